from playground.cli.app import app

app()

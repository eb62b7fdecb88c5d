"""Main CLI application."""

import typer

from playground.cli.commands import analyze, config, providers, serve

app = typer.Typer(
    name="playground",
    help="AI Playground - image description and document summarization",
    no_args_is_help=True,
)

serve.register(app)
analyze.register(app)
providers.register(app)
config.register(app)


if __name__ == "__main__":
    app()

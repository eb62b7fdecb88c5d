"""Server command for running the playground API."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    """Register the serve command."""

    @app.command()
    def serve(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        host: Annotated[
            str | None,
            typer.Option(
                "--host",
                "-h",
                help="Host to bind to (default: from config)",
            ),
        ] = None,
        port: Annotated[
            int | None,
            typer.Option(
                "--port",
                "-p",
                help="Port to bind to (default: from config)",
            ),
        ] = None,
        log_to_file: Annotated[
            bool,
            typer.Option(
                "--log-file/--no-log-file",
                help="Also write JSONL logs under $PLAYGROUND_HOME/logs",
            ),
        ] = True,
    ) -> None:
        """Start the playground API server."""
        try:
            asyncio.run(_run_server(config, host, port, log_to_file))
        except KeyboardInterrupt:
            # Use print here since logging may not be configured yet
            print("\nServer stopped")


async def _run_server(
    config_path: Path | None = None,
    host: str | None = None,
    port: int | None = None,
    log_to_file: bool = True,
) -> None:
    """Run the server asynchronously."""
    from playground.logging import configure_logging

    configure_logging(use_rich=True, log_to_file=log_to_file)

    from playground.config import load_config
    from playground.server import ServerRunner, create_app

    logger.info("config_loading", extra={"path": str(config_path or "default")})
    playground_config = load_config(config_path)

    app = create_app(playground_config)
    runner = ServerRunner(
        app,
        host=host or playground_config.server.host,
        port=port or playground_config.server.port,
    )
    await runner.run()

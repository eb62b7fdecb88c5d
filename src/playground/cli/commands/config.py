"""Configuration management commands."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from playground.cli.console import console, create_table, error, success

if TYPE_CHECKING:
    from rich.table import Table

    from playground.config import PlaygroundConfig

ACTIONS = ("show", "validate")


def _require_file(path: Path) -> None:
    if not path.exists():
        error(f"Config file not found: {path}")
        console.print("Defaults and environment variables are in effect")
        raise typer.Exit(1)


def _show(path: Path) -> None:
    from rich.syntax import Syntax

    _require_file(path)
    console.print(f"[bold]Config file: {path}[/bold]\n")
    console.print(Syntax(path.read_text(), "toml", theme="monokai", line_numbers=True))


def _summary(config: "PlaygroundConfig") -> "Table":
    table = create_table(
        "Configuration Summary", [("Setting", "cyan"), ("Value", "green")]
    )
    for name, has_key in config.credential_status().items():
        table.add_row(
            f"Provider '{name}'",
            "[green]✓ key set[/green]" if has_key else "[yellow]no key[/yellow]",
        )
    table.add_row("OpenAI model", config.openai.model)
    table.add_row("Default provider", config.analysis.default_provider)
    table.add_row("Server", f"{config.server.host}:{config.server.port}")
    table.add_row("Max upload", f"{config.server.max_upload_bytes // 1024} KB")
    return table


def _validate(path: Path) -> None:
    import tomllib

    from pydantic import ValidationError

    from playground.config import load_config

    _require_file(path)
    try:
        config = load_config(path)
    except ValidationError as e:
        error("Configuration validation failed:")
        console.print()
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            console.print(f"  [yellow]{loc}[/yellow]: {err['msg']}")
        raise typer.Exit(1) from None
    except (tomllib.TOMLDecodeError, OSError) as e:
        error(f"Error loading config: {e}")
        raise typer.Exit(1) from None

    success("Configuration is valid!")
    console.print()
    console.print(_summary(config))


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        ctx: typer.Context,
        action: Annotated[
            str | None,
            typer.Argument(help="Action: show, validate"),
        ] = None,
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $PLAYGROUND_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Inspect configuration."""
        if action is None:
            typer.echo(ctx.get_help())
            raise typer.Exit(0)

        if action not in ACTIONS:
            error(f"Unknown action: {action}")
            console.print(f"Valid actions: {', '.join(ACTIONS)}")
            raise typer.Exit(1)

        from playground.config.paths import get_config_path

        config_path = path.expanduser() if path else get_config_path()
        if action == "show":
            _show(config_path)
        else:
            _validate(config_path)

"""One-shot analysis commands: describe and summarize."""

import asyncio
import json
import mimetypes
from pathlib import Path
from typing import Annotated, Any

import typer

from playground.cli.console import console, dim, error, print_analysis


def _load(config_path: Path | None) -> Any:
    from playground.config import load_config

    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        error(str(e))
        raise typer.Exit(1) from None


async def _analyze(playground_config: Any, **kwargs: Any) -> Any:
    from playground.analysis import create_dispatcher

    dispatcher = create_dispatcher(playground_config)
    try:
        return await dispatcher.analyze(**kwargs)
    finally:
        await dispatcher.aclose()


def register(app: typer.Typer) -> None:
    """Register the describe and summarize commands."""

    @app.command()
    def describe(
        image: Annotated[
            Path,
            typer.Argument(help="Image file to describe"),
        ],
        provider: Annotated[
            str | None,
            typer.Option(
                "--provider",
                "-P",
                help="openai, huggingface, google or local",
            ),
        ] = None,
        focus: Annotated[
            str | None,
            typer.Option("--focus", "-f", help="Region or subject to focus on"),
        ] = None,
        as_json: Annotated[
            bool,
            typer.Option("--json", help="Print the API response body as JSON"),
        ] = False,
        config: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
    ) -> None:
        """Describe an image file."""
        from playground.analysis import ContentKind

        path = image.expanduser()
        if not path.is_file():
            error(f"File not found: {path}")
            raise typer.Exit(1)
        mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type or not mime_type.startswith("image/"):
            error(f"Not an image file: {path}")
            raise typer.Exit(1)

        playground_config = _load(config)
        result = asyncio.run(
            _analyze(
                playground_config,
                content=path.read_bytes(),
                kind=ContentKind.IMAGE,
                provider=provider,
                focus=focus,
                mime_type=mime_type,
            )
        )
        payload = result.to_image_payload()
        if as_json:
            typer.echo(json.dumps(payload, indent=2))
            return

        print_analysis(path.name, result.description, payload)
        console.print(f"Scene: {payload['scene']}  Confidence: {payload['confidence']}%")
        for label in ("objects", "people", "emotions", "colors"):
            if payload[label]:
                console.print(f"{label.capitalize()}: {', '.join(payload[label])}")

    @app.command()
    def summarize(
        file: Annotated[
            Path | None,
            typer.Argument(help="Text file to summarize"),
        ] = None,
        url: Annotated[
            str | None,
            typer.Option("--url", "-u", help="Summarize a web page instead"),
        ] = None,
        provider: Annotated[
            str | None,
            typer.Option(
                "--provider",
                "-P",
                help="openai, huggingface or local",
            ),
        ] = None,
        as_json: Annotated[
            bool,
            typer.Option("--json", help="Print the API response body as JSON"),
        ] = False,
        config: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="Path to configuration file"),
        ] = None,
    ) -> None:
        """Summarize a text file or a web page."""
        from playground.analysis import ContentKind
        from playground.fetch import FetchError, fetch_page_text

        if (file is None) == (url is None):
            error("Provide either a FILE or --url")
            raise typer.Exit(1)

        playground_config = _load(config)
        document_type = "text"
        if url is not None:
            try:
                page = asyncio.run(fetch_page_text(url, playground_config.fetch))
            except (FetchError, ValueError) as e:
                error(f"Failed to fetch URL: {e}")
                raise typer.Exit(1) from None
            text, document_type, title = page.text, "webpage", page.url
        else:
            path = file.expanduser()
            if not path.is_file():
                error(f"File not found: {path}")
                raise typer.Exit(1)
            text, title = path.read_text(errors="replace"), path.name

        if not text.strip():
            error("No content to summarize")
            raise typer.Exit(1)

        result = asyncio.run(
            _analyze(
                playground_config,
                content=text,
                kind=ContentKind.DOCUMENT,
                provider=provider,
                document_type=document_type,
            )
        )
        payload = result.to_document_payload()
        if url is not None:
            payload["url"] = url
        if as_json:
            typer.echo(json.dumps(payload, indent=2))
            return

        print_analysis(title, result.description, payload)
        dim(f"Words: {payload['wordCount']}")

"""Provider status command."""

from pathlib import Path
from typing import Annotated

import typer

from playground.cli.console import console, create_table, dim, provider_state

PROVIDER_DETAILS = {
    "openai": ("OpenAI GPT-4o vision", "OPENAI_API_KEY", "images, documents"),
    "huggingface": (
        "Hugging Face inference",
        "HUGGINGFACE_API_KEY / HF_TOKEN",
        "images, documents",
    ),
    "google": ("Google Cloud Vision", "GOOGLE_VISION_API_KEY", "images"),
    "local": ("Local heuristics", "-", "images, documents"),
}


def register(app: typer.Typer) -> None:
    """Register the providers command."""

    @app.command()
    def providers(
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """Show which analysis providers are available."""
        from playground.config import load_config

        playground_config = load_config(config)
        status = playground_config.credential_status()

        table = create_table(
            "Analysis Providers",
            [
                ("Provider", "cyan"),
                ("Service", ""),
                ("Credential", "dim"),
                ("Handles", ""),
                ("Status", ""),
            ],
        )
        for name, (service, env_var, handles) in PROVIDER_DETAILS.items():
            state = provider_state(name, status.get(name, False))
            table.add_row(name, service, env_var, handles, state)

        console.print(table)
        default = playground_config.analysis.default_provider
        dim(f"Default provider: {default}")

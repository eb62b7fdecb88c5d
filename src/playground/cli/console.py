"""Shared console utilities for CLI commands."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Shared console instance for all CLI commands
console = Console()


def error(msg: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]{msg}[/red]")


def warning(msg: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]{msg}[/yellow]")


def success(msg: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]{msg}[/green]")


def dim(msg: str) -> None:
    """Print a dimmed message."""
    console.print(f"[dim]{msg}[/dim]")


def provider_state(name: str, configured: bool) -> str:
    """Status markup for a provider row."""
    if name == "local":
        return "[green]always available[/green]"
    if configured:
        return "[green]configured[/green]"
    return "[yellow]missing key, falls back to local[/yellow]"


def print_analysis(title: str, body: str, payload: dict[str, Any]) -> None:
    """Render an analysis payload: description panel, key points and provider.

    A fallback is called out so the heuristic output is never mistaken for
    the requested provider's answer.
    """
    console.print(Panel(body, title=title, expand=False))
    if payload["keyPoints"]:
        console.print("[bold]Key points[/bold]")
        for point in payload["keyPoints"]:
            console.print(f"  • {point}")
    if payload.get("fallbackReason"):
        warning(
            f"Requested '{payload['requestedApi']}' unavailable "
            f"({payload['fallbackReason']}); used local analysis"
        )
    dim(f"Provider: {payload['apiUsed']}")


def create_table(
    title: str,
    columns: list[tuple[str, str | dict]],
) -> Table:
    """Create a styled table with consistent formatting.

    Args:
        title: Table title.
        columns: List of (name, style) or (name, kwargs_dict) tuples.

    Returns:
        Configured Rich Table.
    """
    table = Table(title=title)
    for name, style_or_kwargs in columns:
        if isinstance(style_or_kwargs, dict):
            table.add_column(name, **style_or_kwargs)
        else:
            table.add_column(name, style=style_or_kwargs)
    return table

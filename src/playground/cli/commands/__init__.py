"""CLI command modules."""

from playground.cli.commands import analyze, config, providers, serve

__all__ = [
    "analyze",
    "config",
    "providers",
    "serve",
]

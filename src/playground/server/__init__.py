"""HTTP server."""

from playground.server.app import create_app
from playground.server.runner import ServerRunner

__all__ = ["ServerRunner", "create_app"]

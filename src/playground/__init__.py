"""AI Playground: multi-provider image and document analysis service."""

__version__ = "0.1.0"

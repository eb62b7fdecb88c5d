"""FastAPI application for the playground server."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from playground import __version__
from playground.analysis import Dispatcher, create_dispatcher
from playground.config import FetchConfig, PlaygroundConfig
from playground.fetch import FetchedPage, fetch_page_text
from playground.server.routes import analysis, health

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str, FetchConfig], Awaitable[FetchedPage]]


def create_app(
    config: PlaygroundConfig,
    dispatcher: Dispatcher | None = None,
    page_fetcher: PageFetcher | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Loaded configuration.
        dispatcher: Analysis dispatcher; built from config when omitted.
        page_fetcher: Coroutine used by URL summarization to retrieve pages.
    """
    dispatcher = dispatcher or create_dispatcher(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "server_starting",
            extra={"providers": dispatcher.provider_status()},
        )
        yield
        logger.info("server_stopping")
        await dispatcher.aclose()

    app = FastAPI(
        title="AI Playground",
        description="Image description and document summarization API",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.dispatcher = dispatcher
    app.state.page_fetcher = page_fetcher or fetch_page_text

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(analysis.router, prefix="/api", tags=["analysis"])

    return app

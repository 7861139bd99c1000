"""
FastAPI Application Entry Point

This module builds the FastAPI application and configures:
- API routes
- Middleware (logging, CORS)
- Rate limiting
- Startup/shutdown of the link store and its snapshot persistence

Lifecycle:
- Startup: restore the snapshot into a new LinkStore, start the flush timer
- Shutdown: stop the timer and write a final snapshot before the process exits

Service routes live under paths containing "_" (e.g. /_health), which can
never collide with a short code.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shortener import __version__
from shortener.api import endpoints
from shortener.core.rate_limit import configure_limiter
from shortener.core.setting import Settings, settings as default_settings
from shortener.db.json_adapter import get_snapshot_adapter
from shortener.middleware.logging import add_logging_middleware
from shortener.services.persistence import SnapshotManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Restore the link store on startup and flush it on shutdown."""
    settings: Settings = app.state.settings

    manager = SnapshotManager(
        get_snapshot_adapter(settings.SNAPSHOT_PATH),
        interval_ms=settings.SAVE_INTERVAL_MS,
    )
    app.state.link_store = manager.open_store(max_url_length=settings.MAX_URL_LENGTH)
    app.state.snapshot_manager = manager
    await manager.start()
    logger.info(f"URL shortener ready, short links use prefix {settings.PREFIX}")

    try:
        yield
    finally:
        await manager.stop()
        logger.info("goodbye")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to build the app with (defaults to the environment)

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings

    app = FastAPI(
        title="URL Shortener Service",
        description="Shortens long URLs to lowercase codes and redirects them back",
        version=__version__,
        docs_url="/_docs",
        redoc_url=None,
        openapi_url="/_openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.state.limiter = configure_limiter(settings.RATE_LIMIT_ENABLED)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Defined before the router so they match before the catch-all short code route
    @app.get("/", tags=["Health"])
    async def root():
        """Service information."""
        return {
            "message": "URL Shortener Service",
            "version": __version__,
            "docs": "/_docs"
        }

    @app.get("/_health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "links": len(request.app.state.link_store)
        }

    app.include_router(endpoints.router, tags=["URL Shortener"])

    return app


app = create_app()

"""FastAPI application factory for the webhook server."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from structlog import get_logger

from redbag_claimer import __version__
from redbag_claimer.api.lifecycle import (
    LIFECYCLE_COMPONENTS,
    execute_shutdown_sequence,
    execute_startup_sequence,
)
from redbag_claimer.api.routes.status import router as status_router
from redbag_claimer.api.routes.webhook import router as webhook_router
from redbag_claimer.config.settings import Settings, get_settings


logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override. If None, uses get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager using component-based approach."""
        app.state.settings = settings
        logger.info(
            "server_start",
            host=settings.server.host,
            port=settings.server.port,
            version=__version__,
        )

        try:
            await execute_startup_sequence(LIFECYCLE_COMPONENTS, app, settings)
            yield
        finally:
            logger.debug("server_stop")
            await execute_shutdown_sequence(LIFECYCLE_COMPONENTS, app)

    app = FastAPI(
        title="Red Bag Claimer",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(webhook_router)
    app.include_router(status_router)
    return app

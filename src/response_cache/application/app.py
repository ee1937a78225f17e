#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Hosts the response cache: creates the ConnectionManager and the
configuration registry, seeds the registry from environment settings,
optionally opens the shared store connection on startup and closes it on
shutdown.
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from response_cache.application.routes.health import router as health_router
from response_cache.application.startup import initialize_cache
from response_cache.core.config.constants import (
    APP_STATE_CONNECTIONS,
    APP_STATE_REGISTRY,
    HEADER_REQUEST_ID,
    Stage,
)
from response_cache.core.config.registry import ConfigRegistry, get_config_registry, seed_registry_from_settings
from response_cache.core.config.settings import Settings, get_settings
from response_cache.core.exceptions import ResponseCacheError
from response_cache.core.interfaces.store import ConnectionFactory
from response_cache.core.logging.logger import (
    clear_request_id,
    get_logger,
    redact_url,
    set_request_id,
    setup_logging,
)
from response_cache.infrastructure.store.connection_manager import ConnectionManager

logger = get_logger(__name__)


# ============================================================================
# Application Lifespan
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).
    """
    settings: Settings = app.state.settings
    registry: ConfigRegistry = getattr(app.state, APP_STATE_REGISTRY)
    connections: ConnectionManager = getattr(app.state, APP_STATE_CONNECTIONS)

    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info("Starting Response Cache Service", stage=Stage.STARTUP, version=settings.app.APP_VERSION)

    if seed_registry_from_settings(settings, registry):
        logger.info(
            "Cache configuration seeded from settings",
            stage=Stage.STARTUP,
            store_url=redact_url(settings.cache.CACHE_STORE_URL or ""),
        )
    else:
        logger.info("No CACHE_STORE_URL configured, caching stays off until configured", stage=Stage.STARTUP)

    try:
        if settings.cache.CACHE_INIT_ON_STARTUP:
            await initialize_cache(connections, registry)

        logger.info("Application startup complete", stage=Stage.STARTUP)

        yield

    finally:
        logger.info("Shutting down application", stage=Stage.CLEANUP)
        await connections.close()
        logger.info("Application shutdown complete", stage=Stage.CLEANUP)


# ============================================================================
# Application Factory
# ============================================================================


def create_app(
    settings: Settings | None = None,
    registry: ConfigRegistry | None = None,
    connection_factory: ConnectionFactory | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use; defaults to the global settings
        registry: Configuration registry; defaults to the global registry
        connection_factory: Store connection factory for the ConnectionManager

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Cache-aside response caching backed by Redis",
        lifespan=lifespan,
    )

    # State is set here rather than in the lifespan so that routes work
    # under clients that skip lifespan events.
    app.state.settings = settings
    setattr(app.state, APP_STATE_REGISTRY, registry or get_config_registry())
    setattr(app.state, APP_STATE_CONNECTIONS, ConnectionManager(connection_factory))

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """
        Inject request ID into all requests for correlation.
        """
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)

        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response

        finally:
            clear_request_id()

    @app.exception_handler(ResponseCacheError)
    async def response_cache_exception_handler(request: Request, exc: ResponseCacheError):
        """Handle cache-layer exceptions that escaped a route."""
        logger.error(
            f"Response cache exception: {exc.message}",
            error_type=type(exc).__name__,
            request_id=exc.request_id,
        )
        return JSONResponse(status_code=500, content=exc.to_dict())

    @app.get("/", tags=["Root"])
    async def root():
        """
        Root endpoint with API information.
        """
        return {
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "health": "/health/cache",
        }

    app.include_router(health_router)

    return app


# Create application instance
app = create_app()


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "response_cache.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )

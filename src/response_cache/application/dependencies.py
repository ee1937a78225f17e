"""
FastAPI Dependency Injection Module
===================================

Reusable dependencies giving route handlers access to the cache layer.

The ConnectionManager and the ConfigRegistry are created once in the
application lifespan and kept on ``app.state``; the dependencies below read
them from there. The registry falls back to the process-wide singleton so a
bare FastAPI app (for example under TestClient without lifespan) still works.

Example:
    @router.get("/items")
    @cache_response({"duration": "10m"})
    async def list_items(cache: ResponseCacheDep):
        return await cache.json({"items": [...]}).commit()
"""

from typing import Annotated

from fastapi import Depends, Request

from response_cache.application.middleware.cache_aside import ResponseCache
from response_cache.application.writer import ManualCacheWriter
from response_cache.core.config.constants import APP_STATE_CONNECTIONS, APP_STATE_REGISTRY
from response_cache.core.config.registry import ConfigRegistry, get_config_registry
from response_cache.infrastructure.store.connection_manager import ConnectionManager

# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_connection_manager(request: Request) -> ConnectionManager:
    """
    Retrieve the application's ConnectionManager from ``app.state``.

    Falls back to creating one on first use when the lifespan did not run,
    so the same manager is shared by every later request of that app.

    Args:
        request: FastAPI Request object (automatically injected by FastAPI)

    Returns:
        ConnectionManager: The application's connection manager
    """
    connections = getattr(request.app.state, APP_STATE_CONNECTIONS, None)
    if connections is None:
        connections = ConnectionManager()
        setattr(request.app.state, APP_STATE_CONNECTIONS, connections)
    return connections


def get_registry(request: Request) -> ConfigRegistry:
    """Configuration registry of the application, else the global one."""
    return getattr(request.app.state, APP_STATE_REGISTRY, None) or get_config_registry()


def get_response_cache(request: Request) -> ResponseCache:
    """
    Request-bound cache handle.

    The handle resolves the CacheContext when it is used, after the
    ``cache_response`` wrapper has run its lookup.
    """
    return ResponseCache(request)


def get_cache_writer(request: Request) -> ManualCacheWriter:
    """ManualCacheWriter bound to the application's manager and registry."""
    return ManualCacheWriter(get_connection_manager(request), get_registry(request))


# ============================================================================
# TYPE ALIASES FOR CLEANER ROUTE SIGNATURES
# ============================================================================

ConnectionManagerDep = Annotated[ConnectionManager, Depends(get_connection_manager)]

RegistryDep = Annotated[ConfigRegistry, Depends(get_registry)]

ResponseCacheDep = Annotated[ResponseCache, Depends(get_response_cache)]

CacheWriterDep = Annotated[ManualCacheWriter, Depends(get_cache_writer)]

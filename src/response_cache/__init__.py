"""
Response Cache

Cache-aside response caching for FastAPI, backed by Redis.

    from response_cache import ResponseCacheDep, cache_response

    @router.get("/items")
    @cache_response({"duration": "1h30m"})
    async def list_items(cache: ResponseCacheDep):
        return await cache.json(await load_items()).commit()
"""

from .application import (
    CachedJSONResponse,
    ManualCacheWriter,
    ResponseCacheDep,
    cache_response,
    get_cache_context,
    initialize_cache,
    is_cache_initialized,
    set_cache,
)
from .core.config import GlobalCacheConfig, RouteCacheConfig
from .core.duration import duration_to_seconds, duration_to_string, parse_duration
from .infrastructure.store import ConnectionManager

__version__ = "1.0.0"

__all__ = [
    "CachedJSONResponse",
    "ManualCacheWriter",
    "ResponseCacheDep",
    "cache_response",
    "get_cache_context",
    "initialize_cache",
    "is_cache_initialized",
    "set_cache",
    "GlobalCacheConfig",
    "RouteCacheConfig",
    "duration_to_seconds",
    "duration_to_string",
    "parse_duration",
    "ConnectionManager",
]

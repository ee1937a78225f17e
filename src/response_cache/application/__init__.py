"""
Application Module

FastAPI integration of the response cache: the cache-aside middleware and its
route decorator, the manual writer, startup initialisation, dependencies and
the hosting application (``response_cache.application.app``).
"""

from .dependencies import (
    CacheWriterDep,
    ConnectionManagerDep,
    RegistryDep,
    ResponseCacheDep,
    get_cache_writer,
    get_connection_manager,
    get_registry,
    get_response_cache,
)
from .middleware import (
    CacheAsideMiddleware,
    CacheContext,
    CachedJSONResponse,
    ResponseCache,
    cache_response,
    get_cache_context,
)
from .startup import initialize_cache, is_cache_initialized
from .writer import ManualCacheWriter, set_cache

__all__ = [
    "CacheWriterDep",
    "ConnectionManagerDep",
    "RegistryDep",
    "ResponseCacheDep",
    "get_cache_writer",
    "get_connection_manager",
    "get_registry",
    "get_response_cache",
    "CacheAsideMiddleware",
    "CacheContext",
    "CachedJSONResponse",
    "ResponseCache",
    "cache_response",
    "get_cache_context",
    "initialize_cache",
    "is_cache_initialized",
    "ManualCacheWriter",
    "set_cache",
]

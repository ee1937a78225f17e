"""
Cache Middleware Module

Components:
-----------
- **cache_aside.py**: Per-request cache-aside flow, CacheContext and the
  committable CachedJSONResponse
- **route_cache.py**: ``cache_response`` decorator binding the flow to an endpoint
"""

from .cache_aside import (
    CacheAsideMiddleware,
    CacheContext,
    CachedJSONResponse,
    PendingWrite,
    ResponseCache,
    decode_body,
    encode_body,
    get_cache_context,
    load_global_config,
)
from .route_cache import cache_response, resolve_route_config

__all__ = [
    "CacheAsideMiddleware",
    "CacheContext",
    "CachedJSONResponse",
    "PendingWrite",
    "ResponseCache",
    "decode_body",
    "encode_body",
    "get_cache_context",
    "load_global_config",
    "cache_response",
    "resolve_route_config",
]

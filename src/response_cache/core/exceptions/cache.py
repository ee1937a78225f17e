"""
Cache-Related Exceptions

All exceptions related to store interaction. Only StoreConnectionClosedError
is treated as recoverable (one reconnect-and-retry); every other CacheError
makes the request fall back to uncached handling.
"""

from response_cache.core.exceptions.base import ResponseCacheError


class CacheError(ResponseCacheError):
    """Base exception for cache-related errors."""
    pass


class StoreConnectionError(CacheError):
    """
    Raised when the store cannot be reached at all.

    Common causes:
    - Redis server is down
    - Incorrect URL
    - Authentication failure
    """
    pass


class StoreConnectionClosedError(StoreConnectionError):
    """
    Raised when a command fails because the connection was closed or dropped.

    This is the only store failure that triggers a reconnect-and-retry.
    """
    pass


class StoreOperationError(CacheError):
    """
    Raised when a store command fails for any other reason.

    Common causes:
    - Wrong value type for the key
    - Server-side limits (memory, read-only replica)
    - Command timeout
    """
    pass


class CacheDeserializationError(CacheError):
    """Raised when a stored value cannot be decoded back into a response body."""
    pass


class CacheInitializationError(CacheError):
    """
    Raised by explicit startup initialisation when the global cache
    configuration is invalid or missing.
    """
    pass

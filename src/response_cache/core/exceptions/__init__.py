"""
Response Cache Exceptions

Hierarchy:

    ResponseCacheError
    ├── ConfigurationError
    └── CacheError
        ├── StoreConnectionError
        │   └── StoreConnectionClosedError
        ├── StoreOperationError
        ├── CacheDeserializationError
        └── CacheInitializationError
"""

from .base import ConfigurationError, ResponseCacheError
from .cache import (
    CacheDeserializationError,
    CacheError,
    CacheInitializationError,
    StoreConnectionClosedError,
    StoreConnectionError,
    StoreOperationError,
)

__all__ = [
    "ResponseCacheError",
    "ConfigurationError",
    "CacheError",
    "StoreConnectionError",
    "StoreConnectionClosedError",
    "StoreOperationError",
    "CacheDeserializationError",
    "CacheInitializationError",
]

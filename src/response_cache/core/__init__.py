"""
Core Module

Foundational components: configuration, logging, exceptions, the duration
parser and store interfaces.
"""

from .duration import duration_to_seconds, duration_to_string, parse_duration
from .exceptions import (
    CacheDeserializationError,
    CacheError,
    CacheInitializationError,
    ConfigurationError,
    ResponseCacheError,
    StoreConnectionClosedError,
    StoreConnectionError,
    StoreOperationError,
)
from .logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    "log_stage",
    "parse_duration",
    "duration_to_seconds",
    "duration_to_string",
    "ResponseCacheError",
    "ConfigurationError",
    "CacheError",
    "StoreConnectionError",
    "StoreConnectionClosedError",
    "StoreOperationError",
    "CacheDeserializationError",
    "CacheInitializationError",
]

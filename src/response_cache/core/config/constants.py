"""
System Constants and Enumerations

This module defines constants and enumerations shared across the
response cache: registry keys, header names, cache status values and
logging stage identifiers.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for header names and registry keys
- Type-safe enums for cache status and processing stages
- Easy to update and track changes
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Request processing stages of the cache-aside flow.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}

    Every log line emitted by the cache layer carries one of these in its
    ``stage`` field so a single request can be followed through the logs.
    """

    CONFIG_CHECK = "1.0_CONFIG_CHECK"
    CONTEXT_ATTACH = "2.0_CONTEXT_ATTACH"
    CACHE_LOOKUP = "3.0_CACHE_LOOKUP"
    CACHE_HIT = "3.1_CACHE_HIT"
    CACHE_MISS = "3.2_CACHE_MISS"
    CACHE_COMMIT = "4.0_CACHE_COMMIT"
    MANUAL_WRITE = "4.1_MANUAL_WRITE"
    CLEANUP = "5.0_CLEANUP"

    # Cross-cutting concerns
    CONNECTION = "C_CONNECTION"
    RECONNECT = "R_RECONNECT"
    STARTUP = "S_STARTUP"


# ============================================================================
# Cache Status
# ============================================================================


class CacheStatus(str, Enum):
    """
    Value of the cache status response header.

    HIT: Response served from the store, handler not invoked
    MISS: Handler ran; its body may have been written to the store
    """

    HIT = "HIT"
    MISS = "MISS"


# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_CACHE_STATUS = "X-Cache-Status"
HEADER_REQUEST_ID = "X-Request-ID"


# ============================================================================
# Configuration Registry Keys
# ============================================================================

# Process-wide cache options (GlobalCacheConfig)
CONFIG_KEY_GLOBAL = "response_cache"

# Optional defaults merged under every per-route configuration
CONFIG_KEY_ROUTE = "response_cache.route"


# ============================================================================
# Request State
# ============================================================================

# Attribute name on ``request.state`` holding the per-request CacheContext
REQUEST_STATE_CONTEXT = "response_cache"

# Attribute names on ``app.state`` set by the hosting application
APP_STATE_CONNECTIONS = "cache_connections"
APP_STATE_REGISTRY = "cache_registry"

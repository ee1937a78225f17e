"""
Cache Startup

Explicit initialisation of the shared store connection, called from the
application lifespan (or by hand). Unlike the request path, which always
degrades to uncached handling, startup fails loudly on a bad configuration.
"""

from pydantic import ValidationError

from response_cache.core.config.constants import CONFIG_KEY_GLOBAL, Stage
from response_cache.core.config.models import GlobalCacheConfig
from response_cache.core.config.registry import ConfigRegistry
from response_cache.core.exceptions import CacheInitializationError
from response_cache.core.logging.logger import get_logger, log_stage, redact_url
from response_cache.infrastructure.store.connection_manager import ConnectionManager

logger = get_logger(__name__)


async def initialize_cache(
    connections: ConnectionManager, registry: ConfigRegistry, verify: bool = False
) -> GlobalCacheConfig:
    """
    Open the shared store connection for the registered store URL.

    Args:
        connections: Manager that will own the shared connection
        registry: Registry holding the global cache options
        verify: Ping the store after opening the connection

    Returns:
        The validated global configuration

    Raises:
        CacheInitializationError: If the global options are missing or invalid
        StoreConnectionError: If ``verify`` is set and the store is unreachable
    """
    raw = registry.get(CONFIG_KEY_GLOBAL)
    if raw is None:
        raise CacheInitializationError(
            "Cache configuration is missing",
            details={"key": CONFIG_KEY_GLOBAL},
        )

    try:
        config = raw if isinstance(raw, GlobalCacheConfig) else GlobalCacheConfig.model_validate(raw)
    except ValidationError as e:
        raise CacheInitializationError(
            "Invalid cache configuration",
            details={"key": CONFIG_KEY_GLOBAL, "errors": e.errors(include_url=False, include_context=False)},
        ) from e

    await connections.ensure_shared_connection(config.store_url)

    if verify:
        lease = connections.acquire(config.store_url)
        try:
            await lease.connection.ping()
        finally:
            await connections.release(lease)

    log_stage(
        logger,
        Stage.STARTUP,
        "Cache initialized",
        store_url=redact_url(config.store_url),
        verified=verify,
    )
    return config


def is_cache_initialized(connections: ConnectionManager) -> bool:
    """True once a shared store connection has been opened."""
    return connections.is_initialized()

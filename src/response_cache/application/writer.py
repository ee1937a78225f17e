"""
Manual Cache Writer

Direct write path for handlers that build their response outside the
middleware's ``commit()`` flow: streamed aggregates, responses assembled by
another layer, or writes for a key other than the request's own.

    writer = ManualCacheWriter(connections, registry)
    await writer.write(request, {"duration": "1h"}, body, response)

The global configuration is re-read on every call, exactly as the middleware
does; an invalid or disabled configuration turns the call into a no-op.
"""

from collections.abc import Mapping
from typing import Any

from fastapi import Request, Response

from response_cache.application.middleware.cache_aside import encode_body, load_global_config
from response_cache.application.middleware.route_cache import resolve_route_config
from response_cache.core.config.constants import APP_STATE_CONNECTIONS, APP_STATE_REGISTRY, CacheStatus, Stage
from response_cache.core.config.models import RouteCacheConfig
from response_cache.core.config.registry import ConfigRegistry, get_config_registry
from response_cache.core.config.settings import get_settings
from response_cache.core.exceptions import CacheError
from response_cache.core.logging.logger import get_logger
from response_cache.infrastructure.store.connection_manager import ConnectionManager
from response_cache.infrastructure.store.session import StoreSession

logger = get_logger(__name__)


class ManualCacheWriter:
    """Writes a response body to the store under a route's cache key."""

    def __init__(
        self,
        connections: ConnectionManager,
        registry: ConfigRegistry | None = None,
        status_header: str | None = None,
    ):
        self._connections = connections
        self._registry = registry
        self.status_header = status_header or get_settings().cache.CACHE_STATUS_HEADER

    async def write(
        self,
        request: Request,
        route_config: RouteCacheConfig | Mapping[str, Any],
        body: Any,
        response: Response | None = None,
    ) -> bool:
        """
        Store ``body`` for ``request`` and tag ``response`` as a MISS.

        Args:
            request: Request whose URL is the default cache key
            route_config: Route options (``duration`` required)
            body: JSON-compatible body
            response: Response to tag, optional

        Returns:
            True if the value was written

        Raises:
            ConfigurationError: If ``route_config`` is invalid
        """
        registry = self._registry or get_config_registry()
        route = route_config if isinstance(route_config, RouteCacheConfig) else resolve_route_config(route_config, registry)

        global_config = load_global_config(registry)
        if global_config is None or not global_config.enabled or not route.enabled:
            return False

        key = route.cache_key or str(request.url)
        if response is not None:
            response.headers[self.status_header] = CacheStatus.MISS.value

        async with StoreSession(self._connections, global_config.store_url) as session:
            try:
                await session.write(key, encode_body(body), route.ttl_seconds)
            except CacheError as e:
                logger.warning(
                    "Manual cache write failed",
                    stage=Stage.MANUAL_WRITE,
                    cache_key=key,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return False

        if global_config.debug:
            logger.info("Response cached manually", stage=Stage.MANUAL_WRITE, cache_key=key, ttl_seconds=route.ttl_seconds)
        return True


async def set_cache(
    request: Request,
    route_config: RouteCacheConfig | Mapping[str, Any],
    body: Any,
    response: Response | None = None,
) -> bool:
    """
    Convenience wrapper resolving the manager and registry from ``app.state``.

    Returns False (nothing written) when the application has no
    ConnectionManager.
    """
    connections = getattr(request.app.state, APP_STATE_CONNECTIONS, None)
    if connections is None:
        logger.error("No ConnectionManager available, response not cached", stage=Stage.MANUAL_WRITE)
        return False
    registry = getattr(request.app.state, APP_STATE_REGISTRY, None)
    return await ManualCacheWriter(connections, registry).write(request, route_config, body, response)

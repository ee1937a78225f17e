"""
Cache Health Route

``GET /health/cache`` reports whether caching is configured and enabled,
whether the shared store connection has been opened, and whether the store
answers a PING. The store URL is returned with its password masked.

HTTP Status Codes:
    200: Always; the status is in the body. A cache outage degrades the
         service to uncached responses rather than taking it down.
"""

from fastapi import APIRouter
from pydantic import BaseModel, ValidationError

from response_cache.application.dependencies import ConnectionManagerDep, RegistryDep
from response_cache.core.config.constants import CONFIG_KEY_GLOBAL, Stage
from response_cache.core.config.models import GlobalCacheConfig
from response_cache.core.exceptions import StoreConnectionError
from response_cache.core.logging.logger import get_logger, redact_url

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


class CacheHealthResponse(BaseModel):
    """
    Cache health report.

    ``healthy`` is None when there is no shared connection to probe.
    """

    enabled: bool
    initialized: bool
    store_url: str | None = None
    healthy: bool | None = None


@router.get("/cache", response_model=CacheHealthResponse)
async def cache_health(connections: ConnectionManagerDep, registry: RegistryDep) -> CacheHealthResponse:
    """Report cache configuration and store reachability."""
    raw = registry.get(CONFIG_KEY_GLOBAL)
    config: GlobalCacheConfig | None = None
    if raw is not None:
        try:
            config = raw if isinstance(raw, GlobalCacheConfig) else GlobalCacheConfig.model_validate(raw)
        except ValidationError as e:
            logger.warning("Cache configuration is invalid", stage=Stage.CONFIG_CHECK, error_count=e.error_count())

    report = CacheHealthResponse(
        enabled=bool(config and config.enabled),
        initialized=connections.is_initialized(),
        store_url=redact_url(config.store_url) if config else None,
    )

    if config is None or not connections.has_shared_connection(config.store_url):
        return report

    lease = connections.acquire(config.store_url)
    try:
        report.healthy = await lease.connection.ping()
    except StoreConnectionError as e:
        logger.warning("Cache health probe failed", stage=Stage.CONNECTION, error=str(e))
        report.healthy = False
    finally:
        await connections.release(lease)
    return report

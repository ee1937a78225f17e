"""
Redis Store Connection

Implements the StoreConnection protocol on top of ``redis.asyncio``.

Architecture:
    RedisStoreConnection
        ├── holds one redis.asyncio.Redis client (own connection pool)
        └── translates redis exceptions into the cache error taxonomy

Error Translation:
    redis.exceptions.ConnectionError  -> StoreConnectionClosedError (recoverable)
    any other redis.exceptions.RedisError -> StoreOperationError
"""

import redis.asyncio as redis
from redis.exceptions import ConnectionError, RedisError

from response_cache.core.config.constants import Stage
from response_cache.core.exceptions import (
    StoreConnectionClosedError,
    StoreConnectionError,
    StoreOperationError,
)
from response_cache.core.logging.logger import get_logger, redact_url

logger = get_logger(__name__)


# Socket limits applied to every connection built from a URL
SOCKET_TIMEOUT = 5
SOCKET_CONNECT_TIMEOUT = 5
HEALTH_CHECK_INTERVAL = 30


class RedisStoreConnection:
    """
    One Redis handle.

    Creating the object opens nothing: redis-py connects lazily on the first
    command, which is where connection failures surface.

    Usage:
        connection = RedisStoreConnection.from_url("redis://localhost:6379/0")
        await connection.set("key", "value")
        await connection.expire("key", 60)
        value = await connection.get("key")
        await connection.close()
    """

    def __init__(self, client: redis.Redis, url: str | None = None):
        """
        Args:
            client: redis.asyncio client (``decode_responses=True`` expected)
            url: Source URL, kept for logging only
        """
        self._redis = client
        self._url = url

    @classmethod
    def from_url(cls, url: str) -> "RedisStoreConnection":
        """
        Build a connection for ``url``.

        Responses are decoded to ``str`` so cached JSON round-trips without
        an extra decode step.
        """
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=SOCKET_TIMEOUT,
            socket_connect_timeout=SOCKET_CONNECT_TIMEOUT,
            health_check_interval=HEALTH_CHECK_INTERVAL,
        )
        return cls(client, url=url)

    @property
    def url(self) -> str | None:
        return self._url

    def _translate(self, command: str, key: str | None, exc: RedisError) -> Exception:
        logger.error(
            f"Redis {command} failed",
            stage=Stage.CONNECTION,
            key=key,
            store_url=redact_url(self._url or ""),
            error=str(exc),
        )
        error_cls = StoreConnectionClosedError if isinstance(exc, ConnectionError) else StoreOperationError
        return error_cls.from_exception(exc, message=f"Redis {command} failed: {exc}", key=key, command=command)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        """
        Get value from Redis.

        Args:
            key: Redis key

        Returns:
            Value or None if not found
        """
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise self._translate("GET", key, e) from e

    async def set(self, key: str, value: str) -> None:
        """Set value in Redis (no expiry; see ``expire``)."""
        try:
            await self._redis.set(key, value)
        except RedisError as e:
            raise self._translate("SET", key, e) from e

    async def expire(self, key: str, seconds: int) -> None:
        """
        Set TTL on a key.

        Args:
            key: Redis key
            seconds: Time-to-live in seconds
        """
        try:
            await self._redis.expire(key, seconds)
        except RedisError as e:
            raise self._translate("EXPIRE", key, e) from e

    async def ping(self) -> bool:
        """
        Check Redis connection health.

        Raises:
            StoreConnectionError: If Redis does not answer
        """
        try:
            return bool(await self._redis.ping())
        except RedisError as e:
            raise StoreConnectionError.from_exception(
                e,
                message=f"Failed to reach Redis: {e}",
                store_url=redact_url(self._url or ""),
            ) from e

    async def close(self) -> None:
        """Close the client and disconnect its pool."""
        await self._redis.aclose()

    def __repr__(self) -> str:
        return f"RedisStoreConnection(url='{redact_url(self._url or '')}')"


def create_redis_connection(url: str) -> RedisStoreConnection:
    """Default connection factory used by the ConnectionManager."""
    return RedisStoreConnection.from_url(url)

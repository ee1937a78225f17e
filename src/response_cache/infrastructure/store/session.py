"""
Store Session

A StoreSession runs the logical store operations of one request (lookup,
write-then-expire) on a leased connection, with the reconnect policy:

    - StoreConnectionClosedError -> reconnect once, retry the operation once
    - second failure             -> raised to the caller
    - any other CacheError       -> raised immediately, no retry

Callers treat every raised CacheError as "uncached"; the session never hides
failures itself.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from response_cache.core.config.constants import Stage
from response_cache.core.exceptions import CacheError, StoreConnectionClosedError
from response_cache.core.interfaces.store import StoreConnection
from response_cache.core.logging.logger import get_logger
from response_cache.infrastructure.store.connection_manager import ConnectionLease, ConnectionManager

logger = get_logger(__name__)

T = TypeVar("T")

# First attempt plus a single retry after reconnecting
MAX_ATTEMPTS = 2


class StoreSession:
    """
    Store operations for one request.

    The connection is acquired lazily on the first operation and kept until
    ``close()``, so a lookup and a later commit on the same request reuse the
    same handle. When the manager already holds a shared connection, the
    session first makes sure it targets this session's URL; a changed URL
    replaces the shared connection.

    Usage:
        async with StoreSession(connections, url) as session:
            cached = await session.lookup("/items?page=1")
            await session.write("/items?page=1", payload, ttl_seconds=60)
    """

    def __init__(self, connections: ConnectionManager, url: str):
        self._connections = connections
        self._url = url
        self._lease: ConnectionLease | None = None

    @property
    def lease(self) -> ConnectionLease | None:
        return self._lease

    @property
    def is_open(self) -> bool:
        return self._lease is not None

    async def _ensure_lease(self) -> ConnectionLease:
        if self._lease is None:
            # Once sharing is initialised, follow the configured URL
            if self._connections.is_initialized():
                await self._connections.ensure_shared_connection(self._url)
            self._lease = self._connections.acquire(self._url)
        return self._lease

    async def _run(
        self, operation: str, key: str, call: Callable[[StoreConnection], Awaitable[T]]
    ) -> T:
        lease = await self._ensure_lease()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(MAX_ATTEMPTS),
                retry=retry_if_exception_type(StoreConnectionClosedError),
                before_sleep=lambda retry_state: logger.warning(
                    "Store connection closed, reconnecting",
                    stage=Stage.RECONNECT,
                    operation=operation,
                    key=key,
                    attempt=retry_state.attempt_number,
                ),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        await self._connections.reconnect_lease(lease)
                    result = await call(lease.connection)
        except CacheError as e:
            e.with_context(operation=operation, shared=not lease.exclusive)
            raise

        return result

    async def lookup(self, key: str) -> str | None:
        """
        Read ``key``.

        Returns:
            Stored value or None when absent

        Raises:
            CacheError: When the read fails after the single retry
        """

        async def _get(connection: StoreConnection) -> str | None:
            return await connection.get(key)

        return await self._run("lookup", key, _get)

    async def write(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store ``value`` under ``key`` and then set its expiry.

        SET and EXPIRE form one logical operation: a dropped connection
        retries both on the new handle.

        Raises:
            CacheError: When the write fails after the single retry
        """

        async def _set_then_expire(connection: StoreConnection) -> None:
            await connection.set(key, value)
            await connection.expire(key, ttl_seconds)

        await self._run("write", key, _set_then_expire)

    async def close(self) -> None:
        """Release the leased connection (closes it only when exclusive)."""
        lease, self._lease = self._lease, None
        if lease is not None:
            await self._connections.release(lease)

    async def __aenter__(self) -> "StoreSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

"""
Store Connection Manager

Owns zero-or-one shared, long-lived store connection plus the policy for
creating, reusing and closing per-call connections.

Ownership:
    The hosting application creates one ConnectionManager, keeps it on
    ``app.state`` and hands it to the cache middleware. There is no module
    level connection slot; two applications in one process do not share
    connections unless they share the manager.

Shared vs exclusive:
    - acquire(url) returns the shared connection when it was opened for the
      same URL (``exclusive=False``), otherwise a fresh connection owned by
      the caller (``exclusive=True``).
    - release(lease) closes exclusive connections only. The shared one is
      closed solely by ensure_shared_connection (URL change) and close()
      (shutdown).

Concurrency:
    The shared slot is a plain attribute. Concurrent reconnects may overwrite
    each other; a request still holding a stale handle simply fails once
    more and reconnects again.
"""

from dataclasses import dataclass

from response_cache.core.config.constants import Stage
from response_cache.core.interfaces.store import ConnectionFactory, StoreConnection
from response_cache.core.logging.logger import get_logger, redact_url
from response_cache.infrastructure.store.redis_store import create_redis_connection

logger = get_logger(__name__)


@dataclass
class ConnectionState:
    """Shared-connection bookkeeping of one ConnectionManager."""

    shared_connection: StoreConnection | None = None
    shared_url: str | None = None
    initialized: bool = False


@dataclass
class ConnectionLease:
    """
    A connection handed to one logical operation.

    Attributes:
        connection: Store handle
        url: Store URL the handle was opened for
        exclusive: True when the holder owns (and must release) the handle
    """

    connection: StoreConnection
    url: str
    exclusive: bool


async def close_quietly(connection: StoreConnection, reason: str) -> None:
    """
    Close a connection as advisory cleanup.

    Close failures are logged and never propagated: a connection that cannot
    be closed cleanly is already unusable, and the caller has moved on.
    """
    try:
        await connection.close()
    except Exception as e:
        logger.warning(
            "Store connection close failed",
            stage=Stage.CONNECTION,
            reason=reason,
            error=str(e),
            error_type=type(e).__name__,
        )


class ConnectionManager:
    """
    Manages store connection lifecycle.

    Usage:
        connections = ConnectionManager()
        await connections.ensure_shared_connection("redis://localhost:6379/0")

        lease = connections.acquire("redis://localhost:6379/0")
        try:
            value = await lease.connection.get("key")
        finally:
            await connections.release(lease)

        await connections.close()
    """

    def __init__(self, connection_factory: ConnectionFactory | None = None):
        """
        Args:
            connection_factory: Builds an unopened connection for a URL.
                Defaults to a redis.asyncio backed connection.
        """
        self._connection_factory = connection_factory or create_redis_connection
        self._state = ConnectionState()

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_initialized(self) -> bool:
        """True once a shared connection has been opened."""
        return self._state.initialized

    def has_shared_connection(self, url: str) -> bool:
        return self._state.shared_connection is not None and self._state.shared_url == url

    def _open(self, url: str) -> StoreConnection:
        return self._connection_factory(url)

    # -------------------------------------------------------------------------
    # Shared connection
    # -------------------------------------------------------------------------

    async def ensure_shared_connection(self, url: str) -> None:
        """
        Make sure a shared connection for ``url`` exists.

        Idempotent for the same URL. A shared connection opened for another
        URL is closed first (advisory close) and replaced.
        """
        if self.has_shared_connection(url):
            return

        previous = self._state.shared_connection
        if previous is not None:
            logger.info(
                "Store URL changed, replacing shared connection",
                stage=Stage.CONNECTION,
                previous_url=redact_url(self._state.shared_url or ""),
                store_url=redact_url(url),
            )
            await close_quietly(previous, reason="url_changed")

        self._state.shared_connection = self._open(url)
        self._state.shared_url = url
        self._state.initialized = True

        logger.info("Shared store connection ready", stage=Stage.CONNECTION, store_url=redact_url(url))

    # -------------------------------------------------------------------------
    # Per-operation connections
    # -------------------------------------------------------------------------

    def acquire(self, url: str) -> ConnectionLease:
        """
        Get a connection for ``url``.

        Returns:
            The shared connection (``exclusive=False``) when it targets the
            same URL, otherwise a new caller-owned one (``exclusive=True``)
        """
        if self.has_shared_connection(url):
            return ConnectionLease(connection=self._state.shared_connection, url=url, exclusive=False)
        return ConnectionLease(connection=self._open(url), url=url, exclusive=True)

    async def release(self, lease: ConnectionLease) -> None:
        """Close the leased connection if, and only if, it is exclusive."""
        if lease.exclusive:
            await close_quietly(lease.connection, reason="released")

    async def reconnect(self, url: str, exclusive: bool) -> StoreConnection:
        """
        Replace a broken connection.

        Exclusive: returns a brand-new handle; the caller closes the old one.
        Shared: installs a new shared handle for ``url`` and returns it, so
        unrelated requests pick up the healed connection too. The replaced
        shared handle is not closed here, other requests may still hold it.
        """
        connection = self._open(url)
        if not exclusive:
            self._state.shared_connection = connection
            self._state.shared_url = url
            self._state.initialized = True

        logger.info(
            "Store connection reopened",
            stage=Stage.RECONNECT,
            store_url=redact_url(url),
            exclusive=exclusive,
        )
        return connection

    async def reconnect_lease(self, lease: ConnectionLease) -> ConnectionLease:
        """Reconnect ``lease`` in place, closing the old handle when exclusive."""
        connection = await self.reconnect(lease.url, lease.exclusive)
        if lease.exclusive:
            await close_quietly(lease.connection, reason="reconnect")
        lease.connection = connection
        return lease

    # -------------------------------------------------------------------------
    # Shutdown
    # -------------------------------------------------------------------------

    async def close(self) -> None:
        """Close the shared connection (application shutdown)."""
        connection = self._state.shared_connection
        self._state = ConnectionState()
        if connection is not None:
            await close_quietly(connection, reason="shutdown")
            logger.info("Shared store connection closed", stage=Stage.CONNECTION)

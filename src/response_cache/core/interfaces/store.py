"""
Store Connection Protocol

Abstract interface of the key-value store connection the cache layer talks
to. The production implementation wraps ``redis.asyncio.Redis``; tests use
in-memory fakes.

Architectural Decision: Protocol-based abstraction
- The connection manager and sessions depend only on this interface
- Facilitates testing with fake stores that count calls or inject failures
- Type-safe interface with runtime checking
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class StoreConnection(Protocol):
    """
    One handle to the key-value store.

    Opening a handle never fails by itself; errors surface on first use.
    Command failures are raised as:

    - StoreConnectionClosedError: the connection was closed or dropped
    - StoreOperationError: any other failure
    """

    async def get(self, key: str) -> str | None:
        """
        Get value from the store.

        Returns:
            Value or None if the key does not exist
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` without expiry."""
        ...

    async def expire(self, key: str, seconds: int) -> None:
        """Set the TTL of ``key`` in seconds."""
        ...

    async def ping(self) -> bool:
        """
        Check store health.

        Raises:
            StoreConnectionError: If the store cannot be reached
        """
        ...

    async def close(self) -> None:
        """Release the handle and its sockets."""
        ...


# Builds a new, unopened handle for a store URL
ConnectionFactory = Callable[[str], StoreConnection]

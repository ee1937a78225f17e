"""
Store Module

Redis-backed store connections, the connection manager owning the shared
connection, and per-request store sessions with reconnect-on-close.
"""

from .connection_manager import ConnectionLease, ConnectionManager, ConnectionState, close_quietly
from .redis_store import RedisStoreConnection, create_redis_connection
from .session import StoreSession

__all__ = [
    "ConnectionLease",
    "ConnectionManager",
    "ConnectionState",
    "close_quietly",
    "RedisStoreConnection",
    "create_redis_connection",
    "StoreSession",
]

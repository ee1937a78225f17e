"""
Unit Tests for ConnectionManager

Tests shared-connection reuse, exclusive leases, reconnects and shutdown.
"""

import pytest

from response_cache.infrastructure.store.connection_manager import ConnectionManager, close_quietly

URL = "redis://localhost:6379/0"
OTHER_URL = "redis://localhost:6379/1"


@pytest.mark.unit
class TestSharedConnection:
    """Test the shared connection slot."""

    @pytest.mark.asyncio
    async def test_ensure_is_idempotent_for_same_url(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)
        await connections.ensure_shared_connection(URL)

        assert fake_store.open_count == 1
        assert connections.is_initialized()
        assert connections.has_shared_connection(URL)

    @pytest.mark.asyncio
    async def test_url_change_closes_old_before_opening_new(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)
        first = connections.state.shared_connection

        await connections.ensure_shared_connection(OTHER_URL)

        assert first.closed
        assert fake_store.open_count == 2
        assert connections.state.shared_url == OTHER_URL
        assert connections.state.shared_connection is fake_store.opened[1]

    @pytest.mark.asyncio
    async def test_url_change_survives_close_failure(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)
        connections.state.shared_connection.close_error = RuntimeError("socket already gone")

        await connections.ensure_shared_connection(OTHER_URL)

        assert connections.has_shared_connection(OTHER_URL)

    def test_not_initialized_by_default(self, connections):
        assert not connections.is_initialized()


@pytest.mark.unit
class TestLeases:
    """Test acquire/release."""

    @pytest.mark.asyncio
    async def test_acquire_returns_shared_for_matching_url(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)

        lease = connections.acquire(URL)

        assert lease.exclusive is False
        assert lease.connection is connections.state.shared_connection

    @pytest.mark.asyncio
    async def test_release_never_closes_shared(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)
        lease = connections.acquire(URL)

        await connections.release(lease)

        assert not lease.connection.closed
        assert fake_store.close_count == 0

    @pytest.mark.asyncio
    async def test_acquire_without_shared_is_exclusive(self, connections, fake_store):
        lease = connections.acquire(URL)

        assert lease.exclusive is True
        assert fake_store.open_count == 1

        await connections.release(lease)
        assert lease.connection.closed

    @pytest.mark.asyncio
    async def test_acquire_for_other_url_is_exclusive(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)

        lease = connections.acquire(OTHER_URL)

        assert lease.exclusive is True
        assert lease.connection is not connections.state.shared_connection


@pytest.mark.unit
class TestReconnect:
    """Test reconnect semantics."""

    @pytest.mark.asyncio
    async def test_exclusive_reconnect_leaves_shared_alone(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)
        shared = connections.state.shared_connection

        fresh = await connections.reconnect(URL, exclusive=True)

        assert fresh is not shared
        assert connections.state.shared_connection is shared

    @pytest.mark.asyncio
    async def test_shared_reconnect_replaces_slot_without_closing(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)
        old = connections.state.shared_connection

        fresh = await connections.reconnect(URL, exclusive=False)

        assert connections.state.shared_connection is fresh
        assert connections.acquire(URL).connection is fresh
        assert not old.closed

    @pytest.mark.asyncio
    async def test_reconnect_lease_closes_old_exclusive_handle(self, connections, fake_store):
        lease = connections.acquire(URL)
        old = lease.connection

        await connections.reconnect_lease(lease)

        assert old.closed
        assert lease.connection is not old
        assert lease.exclusive is True


@pytest.mark.unit
class TestShutdown:
    """Test closing the manager."""

    @pytest.mark.asyncio
    async def test_close_closes_shared_and_resets_state(self, connections, fake_store):
        await connections.ensure_shared_connection(URL)
        shared = connections.state.shared_connection

        await connections.close()

        assert shared.closed
        assert not connections.is_initialized()
        assert connections.state.shared_connection is None

    @pytest.mark.asyncio
    async def test_close_without_shared_is_noop(self, connections, fake_store):
        await connections.close()

        assert fake_store.close_count == 0

    @pytest.mark.asyncio
    async def test_close_quietly_swallows_errors(self, fake_store):
        connection = fake_store(URL)
        connection.close_error = RuntimeError("boom")

        await close_quietly(connection, reason="test")

        assert fake_store.close_count == 1

    def test_default_factory_is_redis(self):
        from response_cache.infrastructure.store.redis_store import RedisStoreConnection

        connection = ConnectionManager().acquire(URL).connection

        assert isinstance(connection, RedisStoreConnection)

"""
Unit Tests for ManualCacheWriter

Tests the direct write path used outside the middleware flow.
"""

import orjson
import pytest
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient

from response_cache.application.app import create_app
from response_cache.application.dependencies import CacheWriterDep
from response_cache.application.writer import ManualCacheWriter, set_cache
from response_cache.core.config.constants import APP_STATE_CONNECTIONS, APP_STATE_REGISTRY, CONFIG_KEY_GLOBAL
from response_cache.core.config.models import RouteCacheConfig
from response_cache.core.exceptions import ConfigurationError
from tests.test_fixtures.request_factory import make_request
from tests.test_fixtures.store_factory import operation_error

KEY = "http://testserver/report"
HEADER = "X-Cache-Status"


@pytest.fixture
def writer(connections, registry):
    return ManualCacheWriter(connections, registry, status_header=HEADER)


@pytest.mark.unit
class TestManualCacheWriter:
    """Test suite for ManualCacheWriter."""

    @pytest.mark.asyncio
    async def test_write_stores_body_with_ttl(self, writer, fake_store):
        response = Response()

        written = await writer.write(make_request("/report"), {"duration": "2h"}, {"total": 10}, response)

        assert written is True
        assert orjson.loads(fake_store.data[KEY]) == {"total": 10}
        assert fake_store.ttls[KEY] == 7200
        assert response.headers[HEADER] == "MISS"

    @pytest.mark.asyncio
    async def test_write_accepts_route_model_and_custom_key(self, writer, fake_store):
        config = RouteCacheConfig(duration="30s", cache_key="report:latest")

        await writer.write(make_request("/report"), config, [1, 2, 3])

        assert fake_store.data["report:latest"] == "[1,2,3]"
        assert fake_store.ttls["report:latest"] == 30

    @pytest.mark.asyncio
    async def test_write_releases_exclusive_connection(self, writer, fake_store):
        await writer.write(make_request("/report"), {"duration": "1m"}, {})

        assert fake_store.opened[0].closed

    @pytest.mark.asyncio
    async def test_disabled_is_noop(self, writer, registry, fake_store):
        registry.set(CONFIG_KEY_GLOBAL, {"storeUrl": "redis://localhost:6379/0", "enabled": False})

        written = await writer.write(make_request("/report"), {"duration": "1m"}, {})

        assert written is False
        assert fake_store.open_count == 0

    @pytest.mark.asyncio
    async def test_invalid_global_config_is_noop(self, writer, registry, fake_store):
        registry.set(CONFIG_KEY_GLOBAL, {"enabled": True})

        assert await writer.write(make_request("/report"), {"duration": "1m"}, {}) is False
        assert fake_store.open_count == 0

    @pytest.mark.asyncio
    async def test_invalid_route_config_raises(self, writer):
        with pytest.raises(ConfigurationError):
            await writer.write(make_request("/report"), {"cacheKey": "x"}, {})

    @pytest.mark.asyncio
    async def test_store_failure_returns_false(self, connections, registry, fake_store, monkeypatch):
        def factory(url):
            connection = fake_store(url)
            connection.fail_with = [operation_error()]
            return connection

        monkeypatch.setattr(connections, "_connection_factory", factory)
        writer = ManualCacheWriter(connections, registry)

        assert await writer.write(make_request("/report"), {"duration": "1m"}, {}) is False
        assert KEY not in fake_store.data


@pytest.mark.unit
class TestSetCache:
    """Test the app.state-resolving convenience wrapper."""

    @pytest.mark.asyncio
    async def test_set_cache_uses_app_state(self, connections, registry, fake_store):
        app = FastAPI()
        setattr(app.state, APP_STATE_CONNECTIONS, connections)
        setattr(app.state, APP_STATE_REGISTRY, registry)

        written = await set_cache(make_request("/report", app=app), {"duration": "1m"}, {"ok": True})

        assert written is True
        assert orjson.loads(fake_store.data[KEY]) == {"ok": True}

    @pytest.mark.asyncio
    async def test_set_cache_without_manager(self):
        assert await set_cache(make_request("/report"), {"duration": "1m"}, {}) is False


@pytest.mark.unit
class TestCacheWriterDependency:
    """Test the writer injected into a route."""

    def test_route_writes_through_injected_writer(self, test_settings, registry, fake_store):
        app = create_app(settings=test_settings, registry=registry, connection_factory=fake_store)

        @app.post("/reports")
        async def build_report(request: Request, response: Response, writer: CacheWriterDep):
            body = {"total": 3}
            written = await writer.write(request, {"duration": "10m", "cacheKey": "report:latest"}, body, response)
            return {"written": written, **body}

        response = TestClient(app).post("/reports")

        assert response.json() == {"written": True, "total": 3}
        assert response.headers[HEADER] == "MISS"
        assert orjson.loads(fake_store.data["report:latest"]) == {"total": 3}
        assert fake_store.ttls["report:latest"] == 600

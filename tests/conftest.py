"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from response_cache.core.config.constants import CONFIG_KEY_GLOBAL  # noqa: E402
from response_cache.core.config.registry import ConfigRegistry  # noqa: E402
from response_cache.core.config.settings import Settings  # noqa: E402
from response_cache.infrastructure.store.connection_manager import ConnectionManager  # noqa: E402
from tests.test_fixtures.store_factory import FakeStore  # noqa: E402

STORE_URL = "redis://localhost:6379/0"


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        CACHE_STORE_URL=STORE_URL,
        CACHE_ENABLED=True,
        CACHE_EXCLUDED_PATHS=[],
        CACHE_DEBUG=False,
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
    )


@pytest.fixture
def global_config():
    """Raw global cache options, as another component would register them."""
    return {"storeUrl": STORE_URL, "enabled": True, "excludedPaths": ["/admin"], "debug": True}


@pytest.fixture
def registry(global_config):
    """Registry with valid global cache options."""
    return ConfigRegistry({CONFIG_KEY_GLOBAL: global_config})


@pytest.fixture
def empty_registry():
    return ConfigRegistry()


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def fake_store():
    """In-memory store; also the connection factory."""
    return FakeStore()


@pytest.fixture
def connections(fake_store):
    """ConnectionManager opening FakeStore connections."""
    return ConnectionManager(connection_factory=fake_store)


# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if real Redis should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")

"""
Unit Tests for Core Exceptions

Tests for the exception hierarchy and its helpers.
"""

import pytest

from response_cache.core.exceptions import (
    CacheDeserializationError,
    CacheError,
    CacheInitializationError,
    ConfigurationError,
    ResponseCacheError,
    StoreConnectionClosedError,
    StoreConnectionError,
    StoreOperationError,
)
from response_cache.core.logging.logger import clear_request_id, set_request_id


@pytest.mark.unit
class TestResponseCacheError:
    """Test the base exception class."""

    def test_base_error_creation(self):
        error = ResponseCacheError("Test message")

        assert str(error) == "Test message"
        assert error.details == {}
        assert error.request_id is None

    def test_details_are_copied(self):
        details = {"key": "/items"}
        error = ResponseCacheError("Test", details=details)
        error.with_context(command="GET")

        assert details == {"key": "/items"}
        assert error.details == {"key": "/items", "command": "GET"}

    def test_to_dict(self):
        error = StoreOperationError("SET failed", request_id="req-1", details={"key": "/items"})

        assert error.to_dict() == {
            "error_type": "StoreOperationError",
            "message": "SET failed",
            "request_id": "req-1",
            "details": {"key": "/items"},
        }

    def test_with_context_chains(self):
        error = CacheError("Test")

        assert error.with_context(a=1) is error

    def test_from_exception(self):
        original = ValueError("bad value")
        error = CacheDeserializationError.from_exception(original, message="Cannot decode", key="/items")

        assert isinstance(error, CacheDeserializationError)
        assert error.message == "Cannot decode"
        assert error.details == {
            "original_error": "ValueError",
            "original_message": "bad value",
            "key": "/items",
        }

    def test_from_exception_defaults_to_original_message(self):
        error = StoreConnectionError.from_exception(OSError("refused"))

        assert error.message == "refused"

    def test_request_id_defaults_to_current_request(self):
        set_request_id("req-9")
        try:
            assert CacheError("Test").request_id == "req-9"
            assert CacheError("Test", request_id="req-1").request_id == "req-1"
        finally:
            clear_request_id()

        assert CacheError("Test").request_id is None

    def test_repr(self):
        error = ConfigurationError("Invalid", request_id="req-2", details={"field": "duration"})

        assert repr(error) == "ConfigurationError(message='Invalid', request_id='req-2', details={'field': 'duration'})"


@pytest.mark.unit
class TestHierarchy:
    """Test how errors are grouped."""

    @pytest.mark.parametrize(
        "error_class",
        [
            StoreConnectionError,
            StoreConnectionClosedError,
            StoreOperationError,
            CacheDeserializationError,
            CacheInitializationError,
        ],
    )
    def test_cache_errors(self, error_class):
        assert issubclass(error_class, CacheError)
        assert issubclass(error_class, ResponseCacheError)

    def test_closed_is_a_connection_error(self):
        assert issubclass(StoreConnectionClosedError, StoreConnectionError)

    def test_operation_error_is_not_recoverable(self):
        assert not issubclass(StoreOperationError, StoreConnectionClosedError)

    def test_configuration_error_is_not_a_cache_error(self):
        assert not issubclass(ConfigurationError, CacheError)

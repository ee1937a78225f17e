"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .request_factory import make_request
from .store_factory import FakeStore, FakeStoreConnection, closed_error, operation_error

__all__ = ["FakeStore", "FakeStoreConnection", "closed_error", "make_request", "operation_error"]

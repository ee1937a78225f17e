"""
Core Interfaces

Protocols for dependency injection and testability.
"""

from .store import ConnectionFactory, StoreConnection

__all__ = ["ConnectionFactory", "StoreConnection"]

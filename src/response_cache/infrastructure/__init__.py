"""
Infrastructure Module

Adapters to external systems; currently the Redis key-value store.
"""

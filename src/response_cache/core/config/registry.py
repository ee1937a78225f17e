"""
Configuration Registry

A small in-process key/value registry the cache layer reads its options
from. Values are stored raw (dicts, models, anything) and validated by the
consumer on every read, so a component can change the cache configuration at
runtime and the next request picks it up without a restart.

Usage:
    registry = get_config_registry()
    registry.set(CONFIG_KEY_GLOBAL, {"storeUrl": "redis://localhost:6379/0"})
    raw = registry.get(CONFIG_KEY_GLOBAL)
"""

from typing import Any

from response_cache.core.config.constants import CONFIG_KEY_GLOBAL
from response_cache.core.config.settings import Settings


class ConfigRegistry:
    """Mutable mapping of configuration keys to raw values."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it was present."""
        if key in self._values:
            del self._values[key]
            return True
        return False

    def clear(self) -> None:
        self._values.clear()

    def keys(self) -> list[str]:
        return list(self._values)

    def __contains__(self, key: str) -> bool:
        return key in self._values


def seed_registry_from_settings(settings: Settings, registry: ConfigRegistry) -> bool:
    """
    Write the global cache options derived from environment settings.

    Nothing is written when no store URL is configured, which leaves the
    cache layer in pass-through mode until another component registers one.

    Args:
        settings: Application settings
        registry: Registry to seed

    Returns:
        True if global cache options were written
    """
    cache = settings.cache
    if not cache.CACHE_STORE_URL:
        return False

    registry.set(
        CONFIG_KEY_GLOBAL,
        {
            "store_url": cache.CACHE_STORE_URL,
            "enabled": cache.CACHE_ENABLED,
            "excluded_paths": list(cache.CACHE_EXCLUDED_PATHS),
            "debug": cache.CACHE_DEBUG,
        },
    )
    return True


# Global registry instance (singleton pattern)
_registry: ConfigRegistry | None = None


def get_config_registry() -> ConfigRegistry:
    """
    Get the global configuration registry (singleton).

    Returns:
        ConfigRegistry: Global registry instance
    """
    global _registry

    if _registry is None:
        _registry = ConfigRegistry()

    return _registry


def reset_config_registry() -> ConfigRegistry:
    """Replace the global registry with an empty one (useful for testing)."""
    global _registry
    _registry = ConfigRegistry()
    return _registry

"""
Configuration Module

Components:
-----------
- **constants.py**: Registry keys, header names, cache status and stage enums
- **settings.py**: Pydantic settings loaded from the environment / ``.env``
- **models.py**: Schemas for the global and per-route cache options
- **registry.py**: Runtime configuration registry the cache layer reads from

Usage:
------
```python
from response_cache.core.config import get_config_registry, get_settings
from response_cache.core.config.constants import CONFIG_KEY_GLOBAL

settings = get_settings()
registry = get_config_registry()
registry.set(CONFIG_KEY_GLOBAL, {"storeUrl": "redis://localhost:6379/0"})
```

Environment Variables:
---------------------
```bash
CACHE_STORE_URL=redis://localhost:6379/0
CACHE_ENABLED=true
CACHE_EXCLUDED_PATHS='["/health", "/admin"]'
CACHE_DEBUG=false
LOG_LEVEL=INFO
LOG_FORMAT=json
```
"""

from .constants import (
    CONFIG_KEY_GLOBAL,
    CONFIG_KEY_ROUTE,
    HEADER_CACHE_STATUS,
    CacheStatus,
    Stage,
)
from .models import GlobalCacheConfig, RouteCacheConfig, merge_route_config
from .registry import (
    ConfigRegistry,
    get_config_registry,
    reset_config_registry,
    seed_registry_from_settings,
)
from .settings import Settings, get_settings, reload_settings

__all__ = [
    "CONFIG_KEY_GLOBAL",
    "CONFIG_KEY_ROUTE",
    "HEADER_CACHE_STATUS",
    "CacheStatus",
    "Stage",
    "GlobalCacheConfig",
    "RouteCacheConfig",
    "merge_route_config",
    "ConfigRegistry",
    "get_config_registry",
    "reset_config_registry",
    "seed_registry_from_settings",
    "Settings",
    "get_settings",
    "reload_settings",
]

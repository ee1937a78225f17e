"""
Cache Configuration Schemas

Pydantic models for the two configuration surfaces the cache layer reads
from the configuration registry:

- GlobalCacheConfig: process-wide options, re-validated on every request
- RouteCacheConfig: per-route options, validated once when a route is bound

Both accept snake_case or camelCase keys so that values written by other
components of the hosting application (often plain JSON) validate unchanged.
"""

from typing import Any

from pydantic import AnyUrl, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel, to_snake

from response_cache.core.duration import parse_duration_spec

_url_adapter = TypeAdapter(AnyUrl)


class GlobalCacheConfig(BaseModel):
    """
    Process-wide cache options.

    Attributes:
        store_url: Redis connection URL (required, validated as a URL)
        enabled: Caching active or not
        excluded_paths: Request path prefixes that are never cached
        debug: Emit per-request trace logs
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    store_url: str
    enabled: bool = True
    excluded_paths: list[str] | None = None
    debug: bool | None = None

    @field_validator("store_url")
    @classmethod
    def validate_store_url(cls, v: str) -> str:
        """Reject anything that does not parse as a URL; keep the original text."""
        _url_adapter.validate_python(v)
        return v

    def is_excluded(self, path: str) -> bool:
        """Check whether ``path`` starts with any excluded prefix."""
        return any(path.startswith(prefix) for prefix in self.excluded_paths or ())


class RouteCacheConfig(BaseModel):
    """
    Per-route cache options.

    Attributes:
        enabled: Caching active for this route
        cache_key: Custom store key; the full request URL is used when absent
        duration: TTL expression such as "5s", "2h" or "1h30m" (required)
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    enabled: bool = True
    cache_key: str | None = None
    duration: str = Field(..., description='Cache duration, e.g. "30s", "1h30m", "2d"')

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: str) -> str:
        spec = parse_duration_spec(v)
        if spec.is_empty:
            raise ValueError(f"duration {v!r} contains no recognised time unit")
        # EXPIRE with 0 deletes the key at once
        if spec.total_seconds == 0:
            raise ValueError(f"duration {v!r} is shorter than one second")
        return v

    @property
    def ttl_seconds(self) -> int:
        """TTL in whole seconds, rounded down."""
        return parse_duration_spec(self.duration).total_seconds


def merge_route_config(
    defaults: dict[str, Any] | None, overrides: "RouteCacheConfig | dict[str, Any] | None"
) -> dict[str, Any]:
    """
    Merge route defaults from the registry under explicit route options.

    Keys of both mappings may be snake_case or camelCase; the result uses
    snake_case so one spelling cannot shadow the other.
    """
    merged: dict[str, Any] = {}
    for source in (defaults or {}, overrides or {}):
        if isinstance(source, RouteCacheConfig):
            source = source.model_dump(exclude_unset=True)
        for key, value in source.items():
            merged[to_snake(key)] = value
    return merged
#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
response cache. Environment settings are the bootstrap source; at runtime the
cache layer reads its options from the configuration registry (see
``registry.py``), which is seeded from these settings on startup.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from response_cache.core.config.constants import HEADER_CACHE_STATUS


class CacheSettings(BaseSettings):
    """
    Store connection and caching switches.

    STAGE-S: Cache bootstrap configuration
    """

    CACHE_STORE_URL: str | None = Field(default=None, description="Redis URL, e.g. redis://localhost:6379/0")
    CACHE_ENABLED: bool = Field(default=True, description="Enable response caching globally")
    CACHE_EXCLUDED_PATHS: list[str] = Field(default_factory=list, description="Path prefixes never cached")
    CACHE_DEBUG: bool = Field(default=False, description="Emit per-request cache trace logs")
    CACHE_STATUS_HEADER: str = Field(default=HEADER_CACHE_STATUS, description="Cache status header name")
    CACHE_INIT_ON_STARTUP: bool = Field(
        default=False,
        description="Open the shared store connection during application startup",
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    APP_NAME: str = Field(default="Response Cache Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from response_cache.core.config.settings import get_settings

        settings = get_settings()
        store_url = settings.cache.CACHE_STORE_URL

    Fields are flat so every one of them maps to a single environment
    variable; the nested views below group them for readability.
    """

    # Cache settings
    CACHE_STORE_URL: str | None = Field(default=None, description="Redis URL, e.g. redis://localhost:6379/0")
    CACHE_ENABLED: bool = Field(default=True, description="Enable response caching globally")
    CACHE_EXCLUDED_PATHS: list[str] = Field(default_factory=list, description="Path prefixes never cached")
    CACHE_DEBUG: bool = Field(default=False, description="Emit per-request cache trace logs")
    CACHE_STATUS_HEADER: str = Field(default=HEADER_CACHE_STATUS, description="Cache status header name")
    CACHE_INIT_ON_STARTUP: bool = Field(
        default=False,
        description="Open the shared store connection during application startup",
    )

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    APP_NAME: str = Field(default="Response Cache Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @property
    def cache(self) -> "CacheSettings":
        """Get cache settings."""
        return CacheSettings(
            CACHE_STORE_URL=self.CACHE_STORE_URL,
            CACHE_ENABLED=self.CACHE_ENABLED,
            CACHE_EXCLUDED_PATHS=self.CACHE_EXCLUDED_PATHS,
            CACHE_DEBUG=self.CACHE_DEBUG,
            CACHE_STATUS_HEADER=self.CACHE_STATUS_HEADER,
            CACHE_INIT_ON_STARTUP=self.CACHE_INIT_ON_STARTUP,
        )

    @property
    def logging(self) -> "LoggingSettings":
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> "ApplicationSettings":
        """Get application settings."""
        return ApplicationSettings(
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings

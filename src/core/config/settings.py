# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the LearnSync
SDK. Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.summarizer.content_player_pid)
    'contentplayer'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """Redis configuration for the key-value cache and preference store.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Redis password.
        database: Redis database number.
        url: Full Redis connection URL.
        max_connections: Maximum connection pool size.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr = SecretStr("")
    database: int = 0
    max_connections: int = 20

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        pwd = self.password.get_secret_value()
        if pwd:
            return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"


class LocalStoreSettings(BaseSettings):
    """Local relational store configuration.

    The local store keeps learner assessment and content summary records.
    as well as locally created profiles.

    Attributes:
        user: Database username.
        password: Database password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOCAL_DB_",
        extra="ignore",
    )

    user: str = "learnsync"
    password: SecretStr = SecretStr("learnsync_local_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "learnsync"
    pool_size: int = 5

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class PlatformAPISettings(BaseSettings):
    """Remote platform API configuration.

    Attributes:
        base_url: Base URL of the platform API gateway.
        api_key: Bearer token sent with requests that need an API token.
        user_token: Optional authenticated user token.
        timeout: Request timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_API_",
        extra="ignore",
    )

    base_url: str = "http://localhost:9000"
    api_key: SecretStr = SecretStr("")
    user_token: SecretStr | None = None
    timeout: float = 30.0


class FrameworkSettings(BaseSettings):
    """Channel and framework lookup configuration.

    Attributes:
        channel_api_path: API path prefix for channel reads.
        channel_config_dir_path: Directory (under assets_path) holding the
            bundled channel-{id}.json files.
        assets_path: Root directory of bundled offline assets.
    """

    model_config = SettingsConfigDict(
        env_prefix="FRAMEWORK_",
        extra="ignore",
    )

    channel_api_path: str = "/api/channel/v1"
    channel_config_dir_path: str = "/data/channel"
    assets_path: str = "assets"


class ContentSettings(BaseSettings):
    """Content service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_",
        extra="ignore",
    )

    content_api_path: str = "/api/content/v1"


class CourseSettings(BaseSettings):
    """Course service configuration."""

    model_config = SettingsConfigDict(
        env_prefix="COURSE_",
        extra="ignore",
    )

    course_api_path: str = "/api/course/v1"


class ProfileSettings(BaseSettings):
    """Profile service configuration.

    Attributes:
        profile_api_path: API path prefix for user endpoints. Versioned
            segments (v1, v4) are appended by the callers.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROFILE_",
        extra="ignore",
    )

    profile_api_path: str = "/api/user"


class CacheSettings(BaseSettings):
    """Cached item store configuration.

    Attributes:
        default_ttl_seconds: How long a cached server response stays fresh
            before the cache-first strategy refreshes it in the background.
    """

    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        extra="ignore",
    )

    default_ttl_seconds: int = 24 * 60 * 60


class SummarizerSettings(BaseSettings):
    """Telemetry summarizer configuration.

    Attributes:
        content_player_pid: Marker searched for in context.pdata.pid to
            recognise events emitted by the in-app content player.
        end_event_delay_seconds: Wait applied after content details are
            read and before an END event is checked for completion.
    """

    model_config = SettingsConfigDict(
        env_prefix="SUMMARIZER_",
        extra="ignore",
    )

    content_player_pid: str = "contentplayer"
    end_event_delay_seconds: float = Field(default=2.0, ge=0)


class Settings(BaseSettings):
    """Main SDK settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        redis: Redis settings.
        local_store: Local relational store settings.
        platform_api: Remote platform API settings.
        framework: Channel/framework lookup settings.
        content: Content service settings.
        course: Course service settings.
        profile: Profile service settings.
        cache: Cached item store settings.
        summarizer: Telemetry summarizer settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Subsettings - loaded with their own env prefixes
    redis: RedisSettings = Field(default_factory=RedisSettings)
    local_store: LocalStoreSettings = Field(default_factory=LocalStoreSettings)
    platform_api: PlatformAPISettings = Field(default_factory=PlatformAPISettings)
    framework: FrameworkSettings = Field(default_factory=FrameworkSettings)
    content: ContentSettings = Field(default_factory=ContentSettings)
    course: CourseSettings = Field(default_factory=CourseSettings)
    profile: ProfileSettings = Field(default_factory=ProfileSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    summarizer: SummarizerSettings = Field(default_factory=SummarizerSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production without an API key.
        """
        if self.environment == "production":
            if not self.platform_api.api_key.get_secret_value():
                raise ValueError(
                    "Platform API key must be set in production. "
                    "Set PLATFORM_API_API_KEY environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()

"""Environment-based configuration using pydantic-settings.

Example:
    >>> from replaykit.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.retries_max
    5

    # Or with environment variables:
    # REPLAYKIT_RETRY_RETRIES_MAX=3
    # REPLAYKIT_RETRY_WAIT_MAX=1.5
    # REPLAYKIT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import (
    ByteSize,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from replaykit import __version__

# Upper bound on bytes read from a discarded response body
RESPONSE_READ_LIMIT = 1 << 20


class RetrySettings(BaseSettings):
    """Default retry envelope configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REPLAYKIT_RETRY_",
        extra="ignore",
    )

    wait_min: NonNegativeFloat = Field(default=0.05, description="Minimum wait between attempts in seconds")
    wait_max: NonNegativeFloat = Field(default=0.2, description="Maximum wait between attempts in seconds")
    retries_max: Annotated[int, Field(ge=0, le=100)] = 5
    drain_limit: ByteSize = Field(
        default=ByteSize(RESPONSE_READ_LIMIT),
        description="Max bytes read when draining a discarded response body",
    )

    @model_validator(mode="after")
    def _check_bounds(self) -> RetrySettings:
        if self.wait_min > self.wait_max:
            raise ValueError(f"wait_min ({self.wait_min}) must not exceed wait_max ({self.wait_max})")
        return self


class HttpSettings(BaseSettings):
    """Defaults for the httpx-backed transport."""

    model_config = SettingsConfigDict(
        env_prefix="REPLAYKIT_HTTP_",
        extra="ignore",
    )

    timeout: PositiveFloat = Field(default=30.0, description="Per-attempt request timeout")
    verify_ssl: bool = True
    user_agent: str = f"replaykit/{__version__}"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="REPLAYKIT_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"


class ReplaykitSettings(BaseSettings):
    """Root settings for replaykit.

    Loads configuration from environment variables with REPLAYKIT_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        REPLAYKIT_RETRY_RETRIES_MAX=2
        REPLAYKIT_HTTP_TIMEOUT=10
        REPLAYKIT_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="REPLAYKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> ReplaykitSettings:
    """Get the global settings instance (cached)."""
    return ReplaykitSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()

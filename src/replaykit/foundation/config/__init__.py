"""Configuration management using pydantic-settings."""

from .settings import (
    RESPONSE_READ_LIMIT,
    HttpSettings,
    LoggingSettings,
    ReplaykitSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "RESPONSE_READ_LIMIT",
    "HttpSettings",
    "LoggingSettings",
    "ReplaykitSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]

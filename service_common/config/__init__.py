"""Configuration Package

Environment-driven settings for the logger, the error tracker and the
Redis cache adapter.
"""

from .settings import (
    LoggingSettings,
    LogLevel,
    RedisSettings,
    SentrySettings,
    ServiceCommonSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "LoggingSettings",
    "LogLevel",
    "RedisSettings",
    "SentrySettings",
    "ServiceCommonSettings",
    "get_settings",
    "reset_settings",
]

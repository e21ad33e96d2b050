"""Persistence adapters."""

from .redis import (
    CacheResult,
    CacheStatus,
    RedisCache,
    RedisConfig,
    RedisOptions,
    new_redis,
)

__all__ = [
    "CacheResult",
    "CacheStatus",
    "RedisCache",
    "RedisConfig",
    "RedisOptions",
    "new_redis",
]

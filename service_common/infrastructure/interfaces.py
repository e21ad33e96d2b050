"""Interfaces implemented by the infrastructure adapters."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional, Union

import redis


class IRedis(ABC):
    """Interface for the key-value cache facade.

    Implementations must be initialized with ``init_client`` before any data
    operation. Data operations degrade to zero values instead of raising:
    an empty string for reads and a zero count for deletes.
    """

    @abstractmethod
    def init_client(self) -> None:
        """Open the connection pool and verify the backend answers.

        Raises:
            redis.exceptions.RedisError: The ping error, unchanged
        """
        pass

    @abstractmethod
    def set_redis_value(self, key: str, payload: str, ttl: Union[int, float, timedelta, None]) -> None:
        """Store ``payload`` under ``key``; a falsy ``ttl`` means no expiry."""
        pass

    @abstractmethod
    def get_redis_value(self, key: str) -> str:
        """Return the stored value, or ``""`` when absent or on any error."""
        pass

    @abstractmethod
    def delete_redis_value(self, key: str) -> int:
        """Return the number of keys removed, or 0 on any error."""
        pass

    @abstractmethod
    def get_client(self) -> Optional[redis.Redis]:
        """Return the raw client for operations the facade does not wrap."""
        pass

"""
Redis cache facade.

Wraps a synchronous redis-py client behind get/set/delete operations with
defaulted connection options. Data operations never raise backend errors:
reads return ``""`` and deletes return ``0`` when the backend fails, exactly
as they do for a missing key. ``lookup`` is available for callers that need
to tell those cases apart.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Dict, Optional, Tuple, Union

import redis
from opentelemetry.instrumentation.redis import RedisInstrumentor
from redis.exceptions import RedisError

from service_common.exceptions import CacheException
from service_common.infrastructure.interfaces import IRedis
from service_common.infrastructure.logging.common_logger import new_common_logger

DEFAULT_PORT = 6379
DEFAULT_POOL_SIZE = 64
DEFAULT_READ_TIMEOUT = 10.0  # seconds

# Values stored by other writers may not be UTF-8; the pool decodes replies.
READ_ERRORS = (RedisError, UnicodeDecodeError)

Duration = Union[int, float, timedelta]


def _seconds(value: Optional[Duration]) -> float:
    if value is None:
        return 0.0
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


@dataclass(frozen=True)
class RedisConfig:
    """Connection settings as supplied by the hosting service.

    Zero values select the defaults applied by ``RedisCache.build_options``.
    """
    host: str
    password: str = ""
    db: int = 0
    pool_size: int = 0
    read_timeout: Duration = 0.0
    tracing: bool = True


@dataclass(frozen=True)
class RedisOptions:
    """Resolved connection options handed to the connection pool."""
    host: str
    port: int
    password: Optional[str]
    db: int
    pool_size: int
    read_timeout: float

    def pool_kwargs(self) -> Dict:
        return {
            "host": self.host,
            "port": self.port,
            "password": self.password,
            "db": self.db,
            "max_connections": self.pool_size,
            "socket_timeout": self.read_timeout,
            "decode_responses": True,
        }


class CacheStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True)
class CacheResult:
    status: CacheStatus
    value: str = ""
    error: Optional[Exception] = None

    @property
    def hit(self) -> bool:
        return self.status == CacheStatus.PRESENT


def split_address(address: str) -> Tuple[str, int]:
    """Split ``host:port``; the port defaults to 6379 when omitted."""
    host, sep, port = address.rpartition(":")
    if not sep:
        return address, DEFAULT_PORT
    if not port.isdigit():
        raise CacheException(
            f"Invalid Redis address: {address}",
            details={"address": address}
        )
    return host.strip("[]") or "localhost", int(port)


def expiry_kwargs(ttl: Optional[Duration]) -> Dict[str, int]:
    """Translate a ttl into ``ex``/``px`` arguments; zero or negative means no expiry."""
    seconds = _seconds(ttl)
    if seconds <= 0:
        return {}
    if seconds.is_integer():
        return {"ex": int(seconds)}
    return {"px": int(seconds * 1000)}


class RedisCache(IRedis):
    """
    Redis implementation of the cache facade.

    The client is created by ``init_client`` rather than by the constructor.
    Calling a data operation before a successful ``init_client`` is a
    programming error and fails on the missing client.
    """

    def __init__(self, config: RedisConfig):
        self._config = config
        self._client: Optional[redis.Redis] = None

    @property
    def config(self) -> RedisConfig:
        return self._config

    def build_options(self) -> RedisOptions:
        """Resolve the connection options, applying defaults for zero values."""
        host, port = split_address(self._config.host)
        read_timeout = _seconds(self._config.read_timeout)

        return RedisOptions(
            host=host,
            port=port,
            password=self._config.password or None,
            db=self._config.db,
            pool_size=self._config.pool_size if self._config.pool_size != 0 else DEFAULT_POOL_SIZE,
            read_timeout=read_timeout if read_timeout != 0 else DEFAULT_READ_TIMEOUT,
        )

    def init_client(self) -> None:
        logger = new_common_logger()
        logger.info("Start open redis connection...")

        options = self.build_options()
        pool = redis.ConnectionPool(**options.pool_kwargs())
        client = redis.Redis(connection_pool=pool)

        try:
            client.ping()
        except RedisError:
            pool.disconnect()
            raise

        if self._config.tracing:
            RedisInstrumentor.instrument_client(client)

        self._client = client
        logger.debugf("Redis connection ready: %s:%s/%s", options.host, options.port, options.db)

    def set_redis_value(self, key: str, payload: str, ttl: Optional[Duration]) -> None:
        try:
            self._client.set(key, payload, **expiry_kwargs(ttl))
        except RedisError as e:
            new_common_logger().debugf("Redis set failed for key %s: %s", key, e)

    def get_redis_value(self, key: str) -> str:
        try:
            value = self._client.get(key)
        except READ_ERRORS as e:
            new_common_logger().debugf("Redis get failed for key %s: %s", key, e)
            return ""
        return value if value is not None else ""

    def delete_redis_value(self, key: str) -> int:
        try:
            return int(self._client.delete(key))
        except RedisError as e:
            new_common_logger().debugf("Redis delete failed for key %s: %s", key, e)
            return 0

    def lookup(self, key: str) -> CacheResult:
        """Read ``key`` reporting whether it was present, absent or the backend failed."""
        try:
            value = self._client.get(key)
        except READ_ERRORS as e:
            return CacheResult(status=CacheStatus.ERROR, error=e)
        if value is None:
            return CacheResult(status=CacheStatus.ABSENT)
        return CacheResult(status=CacheStatus.PRESENT, value=value)

    def get_client(self) -> Optional[redis.Redis]:
        return self._client

    def close(self) -> None:
        """Disconnect the pool and return to the uninitialized state."""
        if self._client is not None:
            self._client.connection_pool.disconnect()
            self._client = None


def new_redis(config: RedisConfig) -> IRedis:
    """Factory returning the cache facade for ``config``; call init_client before use."""
    return RedisCache(config)

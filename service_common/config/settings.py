"""
Unified Configuration System for service-common

Single source of truth for adapter configuration using pydantic-settings.

ARCHITECTURAL PRINCIPLES:
- Only this module accesses environment variables directly
- Adapters receive configuration values, never read the environment
- Type-safe validation with automatic conversion
"""

import logging
from enum import Enum
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings

from service_common.exceptions import ConfigurationException


# =============================================================================
# ENUMS
# =============================================================================

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        return getattr(logging, self.value)


# =============================================================================
# CONFIGURATION SECTIONS
# =============================================================================

class LoggingSettings(BaseSettings):
    """Logging configuration"""
    level: LogLevel = Field(default=LogLevel.INFO, validation_alias="LOG_LEVEL")
    prefix: str = Field(default="", validation_alias="LOG_PREFIX")

    # JSON lines instead of the prefixed text layout
    structured: bool = Field(default=False, validation_alias="STRUCTURED_LOGGING")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
            if v == "WARN":
                return "WARNING"
        return v

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class RedisSettings(BaseSettings):
    """Redis cache connection configuration"""
    host: str = Field(default="localhost:6379", validation_alias="REDIS_HOST")
    password: Optional[SecretStr] = Field(default=None, validation_alias="REDIS_PASSWORD")
    db: int = Field(default=0, validation_alias="REDIS_DB")

    # Zero means "use the adapter default" (64 connections, 10 seconds)
    pool_size: int = Field(default=0, validation_alias="REDIS_POOL_SIZE")
    read_timeout: float = Field(default=0.0, validation_alias="REDIS_READ_TIMEOUT")
    tracing: bool = Field(default=True, validation_alias="REDIS_TRACING")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}

    @field_validator("db", "pool_size")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    def to_config(self):
        """Build the immutable cache config consumed by the Redis adapter."""
        from service_common.infrastructure.persistence.redis import RedisConfig

        return RedisConfig(
            host=self.host,
            password=self.password.get_secret_value() if self.password else "",
            db=self.db,
            pool_size=self.pool_size,
            read_timeout=self.read_timeout,
            tracing=self.tracing,
        )


class SentrySettings(BaseSettings):
    """Error tracking configuration"""
    dsn: Optional[SecretStr] = Field(default=None, validation_alias="SENTRY_DSN")
    environment: str = Field(default="development", validation_alias="SENTRY_ENVIRONMENT")
    traces_sample_rate: float = Field(default=0.0, validation_alias="SENTRY_TRACES_SAMPLE_RATE")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}

    @field_validator("traces_sample_rate")
    @classmethod
    def valid_rate(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("must be between 0.0 and 1.0")
        return v


class ServiceCommonSettings(BaseSettings):
    """
    Unified configuration for the service-common adapters.

    All configuration access should go through this class via dependency injection.
    """

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


# =============================================================================
# SINGLETON MANAGEMENT
# =============================================================================

_settings_instance: Optional[ServiceCommonSettings] = None


def get_settings() -> ServiceCommonSettings:
    """
    Get global settings instance (singleton pattern).

    Raises:
        ConfigurationException: If settings validation fails
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            from dotenv import load_dotenv

            load_dotenv()
            _settings_instance = ServiceCommonSettings()
        except Exception as e:
            raise ConfigurationException(
                f"Settings initialization failed: {e}",
                details={"original_error": str(e), "error_type": type(e).__name__}
            )
    return _settings_instance


def reset_settings() -> None:
    """
    Reset settings instance (primarily for testing).

    Forces recreation of settings on next get_settings() call.
    """
    global _settings_instance
    _settings_instance = None

"""Custom exceptions for the service-common adapters."""

from typing import Any, Dict, Optional


class ServiceCommonException(Exception):
    """Base exception for all service-common errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationException(ServiceCommonException):
    """Raised when configuration is invalid."""
    pass


class CacheException(ServiceCommonException):
    """Raised when the cache configuration cannot be turned into connection options."""
    pass


class LoggerPanic(ServiceCommonException):
    """Raised by the panic-level logging methods after the entry is emitted."""
    pass

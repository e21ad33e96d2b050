"""
Common logger shared by every module of a hosting service.

One ``CommonLogger`` exists per process. Each entry it emits is decorated with
the call site (``source``), the display prefix and the current request
identifier, and error, fatal and panic messages are mirrored to the error
tracker. The request identifier lives in a context variable, so requests
handled concurrently each see their own value.
"""

import inspect
import json
import logging
import os
import sys
import threading
from contextvars import ContextVar
from typing import Any, Mapping, Optional, TextIO

import structlog

from service_common.config.settings import LoggingSettings, LogLevel
from service_common.exceptions import LoggerPanic
from service_common.infrastructure import error_tracking
from service_common.infrastructure.logging.config import LOGGER_NAME, ServiceLoggerConfig, get_logger
from service_common.infrastructure.logging.levels import Lvl, to_framework_level, to_logging_level

request_id_context: ContextVar[str] = ContextVar("request_id", default="")


class CommonLogger:
    """
    Leveled logger with call-site decoration and error forwarding.

    Every level has three variants: plain arguments joined with spaces
    (``info``), a %-format string (``infof``) and a JSON mapping (``infoj``).
    Only the error, fatal and panic families forward to the error tracker.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        stdlib_logger: logging.Logger,
        handler: logging.StreamHandler,
        prefix: str = "",
    ):
        self._logger = logger
        self._stdlib_logger = stdlib_logger
        self._handler = handler
        self._prefix = prefix

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    @property
    def prefix(self) -> str:
        return self._prefix

    @prefix.setter
    def prefix(self, value: str) -> None:
        self._prefix = value

    def set_prefix(self, p: str) -> None:
        self._prefix = p

    @property
    def request_id(self) -> str:
        return request_id_context.get()

    @request_id.setter
    def request_id(self, value: Optional[str]) -> None:
        request_id_context.set(value or "")

    def decorate(self, depth: int = 2) -> structlog.stdlib.BoundLogger:
        """
        Bind call-site and context fields for a single log call.

        Args:
            depth: Frames above this method to report; the default points at
                whoever called the public log method that called decorate

        Returns:
            Bound logger carrying ``source`` and, when set, ``prefix`` and
            ``requestID``
        """
        fields = {"source": self._caller_source(depth + 1)}
        if self._prefix:
            fields["prefix"] = self._prefix
        request_id = self.request_id
        if request_id:
            fields["requestID"] = request_id
        return self._logger.bind(**fields)

    @staticmethod
    def _caller_source(depth: int) -> str:
        frame = inspect.currentframe()
        try:
            for _ in range(depth):
                if frame is None:
                    return ""
                frame = frame.f_back
            if frame is None:
                return ""
            code = frame.f_code
            return f"{os.path.basename(code.co_filename)}:{frame.f_lineno}:{code.co_name}()"
        finally:
            del frame

    # ------------------------------------------------------------------
    # Framework logger interface
    # ------------------------------------------------------------------

    def output(self) -> TextIO:
        return self._handler.stream

    def set_output(self, w: TextIO) -> None:
        # Accepted for interface compatibility; output stays on the configured handler
        pass

    def set_header(self, h: str) -> None:
        # Accepted for interface compatibility; the layout is fixed
        pass

    def level(self) -> Lvl:
        return to_framework_level(self._stdlib_logger.level)

    def set_level(self, v: Lvl) -> None:
        self._stdlib_logger.setLevel(to_logging_level(v))

    def request_id_middleware(self):
        """Middleware entry that binds inbound request ids to this logger."""
        from starlette.middleware import Middleware

        from service_common.api.middleware.request_id import RequestIdMiddleware

        return Middleware(RequestIdMiddleware, logger=self)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit(self, method: str, message: str, forward: bool = False, severity: Optional[str] = None) -> None:
        # _emit sits between decorate and the public method, hence depth 3
        entry = self.decorate(depth=3)
        if severity:
            getattr(entry, method)(message, severity=severity)
        else:
            getattr(entry, method)(message)
        if forward:
            error_tracking.capture_message(message)

    def _terminate(self) -> None:
        error_tracking.flush()
        sys.exit(1)

    @staticmethod
    def _join(args: tuple) -> str:
        return " ".join(str(a) for a in args)

    @staticmethod
    def _format(format: str, args: tuple) -> str:
        return format % args if args else format

    @staticmethod
    def _json(j: Mapping[str, Any]) -> str:
        return json.dumps(j, default=str)

    def print(self, *args: Any) -> None:
        self._emit("info", self._join(args))

    def printf(self, format: str, *args: Any) -> None:
        self._emit("info", self._format(format, args))

    def printj(self, j: Mapping[str, Any]) -> None:
        self._emit("info", self._json(j))

    def debug(self, *args: Any) -> None:
        self._emit("debug", self._join(args))

    def debugf(self, format: str, *args: Any) -> None:
        self._emit("debug", self._format(format, args))

    def debugj(self, j: Mapping[str, Any]) -> None:
        self._emit("debug", self._json(j))

    def info(self, *args: Any) -> None:
        self._emit("info", self._join(args))

    def infof(self, format: str, *args: Any) -> None:
        self._emit("info", self._format(format, args))

    def infoj(self, j: Mapping[str, Any]) -> None:
        self._emit("info", self._json(j))

    def warn(self, *args: Any) -> None:
        self._emit("warning", self._join(args))

    def warnf(self, format: str, *args: Any) -> None:
        self._emit("warning", self._format(format, args))

    def warnj(self, j: Mapping[str, Any]) -> None:
        self._emit("warning", self._json(j))

    def error(self, *args: Any) -> None:
        self._emit("error", self._join(args), forward=True)

    def errorf(self, format: str, *args: Any) -> None:
        self._emit("error", self._format(format, args), forward=True)

    def errorj(self, j: Mapping[str, Any]) -> None:
        self._emit("error", self._json(j), forward=True)

    def fatal(self, *args: Any) -> None:
        message = self._join(args)
        self._emit("critical", message, forward=True, severity="fatal")
        self._terminate()

    def fatalf(self, format: str, *args: Any) -> None:
        message = self._format(format, args)
        self._emit("critical", message, forward=True, severity="fatal")
        self._terminate()

    def fatalj(self, j: Mapping[str, Any]) -> None:
        message = self._json(j)
        self._emit("critical", message, forward=True, severity="fatal")
        self._terminate()

    def panic(self, *args: Any) -> None:
        message = self._join(args)
        self._emit("critical", message, forward=True, severity="panic")
        raise LoggerPanic(message)

    def panicf(self, format: str, *args: Any) -> None:
        message = self._format(format, args)
        self._emit("critical", message, forward=True, severity="panic")
        raise LoggerPanic(message)

    def panicj(self, j: Mapping[str, Any]) -> None:
        message = self._json(j)
        self._emit("critical", message, forward=True, severity="panic")
        raise LoggerPanic(message, details=dict(j))


# =============================================================================
# SINGLETON MANAGEMENT
# =============================================================================

_instance: Optional[CommonLogger] = None
_instance_lock = threading.Lock()


def new_common_logger(prefix: Optional[str] = None, settings: Optional[LoggingSettings] = None) -> CommonLogger:
    """
    Return the process-wide logger, creating it on first use.

    The first call configures structlog and stores ``prefix`` (falling back to
    the configured ``LOG_PREFIX``). Later calls return the same instance; a
    non-empty ``prefix`` that differs case-insensitively from the stored one
    replaces it.

    Args:
        prefix: Display prefix shown before each message
        settings: Logging settings used on first construction only
    """
    global _instance
    if _instance is None:
        with _instance_lock:
            if _instance is None:
                if settings is None:
                    from service_common.config.settings import get_settings
                    settings = get_settings().logging

                config = ServiceLoggerConfig(structured=settings.structured)
                stdlib_logger = logging.getLogger(LOGGER_NAME)
                stdlib_logger.setLevel(LogLevel(settings.level).to_logging_level())
                _instance = CommonLogger(
                    logger=get_logger(LOGGER_NAME),
                    stdlib_logger=stdlib_logger,
                    handler=config.handler,
                    prefix=prefix or settings.prefix,
                )
                return _instance

    if prefix and prefix.casefold() != _instance.prefix.casefold():
        _instance.prefix = prefix
    return _instance


def reset_common_logger() -> None:
    """
    Drop the process-wide logger (primarily for testing).

    The next new_common_logger() call builds a fresh instance.
    """
    global _instance
    with _instance_lock:
        _instance = None

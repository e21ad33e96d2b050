"""
service-common Logging Configuration

Configures structlog over the standard library with a prefixed text layout
(full timestamp) by default, JSON output when structured logging is enabled,
and OpenTelemetry trace context injection.
"""

import logging
import sys
from typing import Any, Dict, Optional, TextIO

import structlog
from opentelemetry import trace

LOGGER_NAME = "service_common"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Keys the text layout places itself instead of listing them as fields
_LAYOUT_KEYS = ("timestamp", "level", "prefix", "event")

_LEVEL_LABELS = {
    "warning": "WARN",
    "critical": "FATAL",
}


class PrefixedTextRenderer:
    """
    Render an event as ``[timestamp] LEVEL prefix: message key=value ...``.

    The level label is right-aligned to five characters, the prefix segment is
    omitted when no prefix is bound and the remaining fields are sorted by key.
    """

    def __call__(self, logger, method_name: str, event_dict: Dict[str, Any]) -> str:
        timestamp = event_dict.pop("timestamp", "")
        level = event_dict.pop("level", method_name)
        prefix = event_dict.pop("prefix", "")
        event = event_dict.pop("event", "")

        label = _LEVEL_LABELS.get(level, level.upper())
        parts = [f"[{timestamp}]", f"{label:>5}"]
        if prefix:
            parts.append(f"{prefix}:")
        parts.append(str(event))

        for key in sorted(event_dict):
            value = event_dict[key]
            if isinstance(value, str) and (" " in value or value == ""):
                value = f'"{value}"'
            parts.append(f"{key}={value}")

        return " ".join(parts)


class ServiceLoggerConfig:
    """
    Structlog configuration for the common logger.

    Sets up a processor chain that handles level filtering, level and
    timestamp addition, exception formatting, severity overrides for the
    fatal and panic methods, trace context and the final rendering.
    """

    def __init__(self, structured: bool = False, stream: Optional[TextIO] = None):
        self.structured = structured
        self.stream = stream or sys.stderr
        self.handler = self.configure_handler()
        self.configure_structlog()

    def configure_handler(self) -> logging.Handler:
        """Attach a single stream handler to the library logger."""
        stdlib_logger = logging.getLogger(LOGGER_NAME)
        for handler in stdlib_logger.handlers[:]:
            stdlib_logger.removeHandler(handler)

        handler = logging.StreamHandler(self.stream)
        handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(handler)
        stdlib_logger.propagate = False
        if stdlib_logger.level == logging.NOTSET:
            stdlib_logger.setLevel(logging.INFO)
        return handler

    def configure_structlog(self) -> None:
        renderer = structlog.processors.JSONRenderer() if self.structured else PrefixedTextRenderer()

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_log_level,
                self.apply_severity,
                structlog.processors.TimeStamper(fmt=TIMESTAMP_FORMAT),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                self.add_trace_context,
                renderer,
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    @staticmethod
    def apply_severity(logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace the level with an explicit ``severity`` when one is given.

        The fatal and panic methods both emit at critical level; the severity
        keeps them apart in the rendered output.
        """
        severity = event_dict.pop("severity", None)
        if severity:
            event_dict["level"] = severity
        return event_dict

    @staticmethod
    def add_trace_context(logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Add OpenTelemetry trace context to log entries."""
        span = trace.get_current_span()
        if span and span.is_recording():
            span_context = span.get_span_context()
            if 'trace_id' not in event_dict:
                event_dict['trace_id'] = format(span_context.trace_id, '032x')
            if 'span_id' not in event_dict:
                event_dict['span_id'] = format(span_context.span_id, '016x')

        return event_dict


def get_logger(name: str = LOGGER_NAME) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger backed by the named standard library logger.

    Example:
        >>> logger = get_logger()
        >>> logger.info("Operation completed", operation="test")
    """
    return structlog.get_logger(name)

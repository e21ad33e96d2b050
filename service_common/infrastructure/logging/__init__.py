"""
service-common Logging Infrastructure

- config: structlog configuration with the prefixed text and JSON renderers
- levels: translation between the framework level scale and logger levels
- common_logger: the process-wide CommonLogger with call-site decoration
  and error forwarding
"""

from .config import PrefixedTextRenderer, ServiceLoggerConfig, get_logger
from .levels import Lvl, to_framework_level, to_logging_level
from .common_logger import CommonLogger, new_common_logger, request_id_context, reset_common_logger

__all__ = [
    'CommonLogger',
    'Lvl',
    'PrefixedTextRenderer',
    'ServiceLoggerConfig',
    'get_logger',
    'new_common_logger',
    'request_id_context',
    'reset_common_logger',
    'to_framework_level',
    'to_logging_level',
]

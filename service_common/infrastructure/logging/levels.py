"""
Level translation between the web framework scale and the logger.

The framework side uses the five-step ``Lvl`` scale; the logger side uses the
standard library numeric levels that structlog filters on.
"""

import logging
from enum import IntEnum
from typing import Dict


class Lvl(IntEnum):
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    OFF = 5


_TO_LOGGING: Dict[Lvl, int] = {
    Lvl.DEBUG: logging.DEBUG,
    Lvl.INFO: logging.INFO,
    Lvl.WARN: logging.WARNING,
    Lvl.ERROR: logging.ERROR,
}

_TO_FRAMEWORK: Dict[int, Lvl] = {v: k for k, v in _TO_LOGGING.items()}


def to_logging_level(level) -> int:
    """Framework level to logger level; anything unmapped becomes INFO."""
    try:
        return _TO_LOGGING.get(Lvl(level), logging.INFO)
    except (TypeError, ValueError):
        return logging.INFO


def to_framework_level(level: int) -> Lvl:
    """Logger level to framework level; anything unmapped becomes OFF."""
    return _TO_FRAMEWORK.get(level, Lvl.OFF)

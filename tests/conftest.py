"""Shared pytest fixtures and configuration for service-common tests."""

import io
import logging
from unittest.mock import MagicMock, patch

import pytest

from service_common.config.settings import reset_settings
from service_common.infrastructure.logging.common_logger import (
    CommonLogger,
    request_id_context,
    reset_common_logger,
)
from service_common.infrastructure.logging.config import LOGGER_NAME, ServiceLoggerConfig, get_logger


@pytest.fixture(autouse=True)
def clean_global_state(monkeypatch):
    """Reset singletons, request context and environment between tests."""
    for var in ("LOG_LEVEL", "LOG_PREFIX", "STRUCTURED_LOGGING", "REDIS_HOST", "REDIS_PASSWORD",
                "REDIS_DB", "REDIS_POOL_SIZE", "REDIS_READ_TIMEOUT", "REDIS_TRACING", "SENTRY_DSN",
                "SENTRY_ENVIRONMENT", "SENTRY_TRACES_SAMPLE_RATE"):
        monkeypatch.delenv(var, raising=False)

    reset_settings()
    reset_common_logger()
    request_id_context.set("")
    yield
    reset_settings()
    reset_common_logger()
    request_id_context.set("")
    logging.getLogger(LOGGER_NAME).setLevel(logging.NOTSET)


@pytest.fixture
def mock_sentry():
    """Replace the Sentry SDK used by the error tracking sink."""
    with patch("service_common.infrastructure.error_tracking.sentry_sdk") as sentry:
        yield sentry


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def common_logger(log_stream):
    """CommonLogger rendering the text layout into an in-memory stream."""
    config = ServiceLoggerConfig(stream=log_stream)
    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.setLevel(logging.INFO)
    return CommonLogger(
        logger=get_logger(LOGGER_NAME),
        stdlib_logger=stdlib_logger,
        handler=config.handler,
        prefix="svc",
    )


@pytest.fixture
def mocked_logger():
    """CommonLogger whose structlog logger is a mock, for inspecting bound fields."""
    structlog_logger = MagicMock()
    stdlib_logger = logging.getLogger(LOGGER_NAME)
    handler = logging.StreamHandler(io.StringIO())
    return CommonLogger(structlog_logger, stdlib_logger, handler), structlog_logger

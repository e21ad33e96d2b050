"""
Error tracking sink backed by Sentry.

The logger forwards error, fatal and panic messages here, and the request-ID
middleware tags the active scope. Submission is fire-and-forget: failures are
logged at debug level and never reach the caller.
"""

import logging
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from service_common.config.settings import SentrySettings

logger = logging.getLogger(__name__)

REQUEST_ID_TAG = "x-request-id"


def init_error_tracking(settings: Optional[SentrySettings] = None) -> bool:
    """
    Initialize the Sentry SDK when a DSN is configured.

    Args:
        settings: Sentry settings section, defaults to the global settings

    Returns:
        True if the SDK was initialized
    """
    if settings is None:
        from service_common.config.settings import get_settings
        settings = get_settings().sentry

    if settings.dsn is None:
        logger.info("Sentry DSN not configured, error tracking disabled")
        return False

    sentry_sdk.init(
        dsn=settings.dsn.get_secret_value(),
        environment=settings.environment,
        traces_sample_rate=settings.traces_sample_rate,
        # Messages are captured explicitly by the logger, log records only become breadcrumbs
        integrations=[LoggingIntegration(level=logging.INFO, event_level=None)],
    )
    logger.info(f"Sentry error tracking initialized (environment={settings.environment})")
    return True


def capture_message(message: str) -> None:
    """Send a plain message to the sink."""
    try:
        sentry_sdk.capture_message(message)
    except Exception as e:
        logger.debug(f"Sentry capture_message failed: {e}")


def set_request_tag(request_id: str) -> None:
    """Tag the current scope with the inbound request identifier."""
    try:
        sentry_sdk.set_tag(REQUEST_ID_TAG, request_id)
    except Exception as e:
        logger.debug(f"Sentry set_tag failed: {e}")


def flush(timeout: float = 2.0) -> None:
    """Drain queued events, used before the process terminates."""
    try:
        sentry_sdk.flush(timeout=timeout)
    except Exception as e:
        logger.debug(f"Sentry flush failed: {e}")

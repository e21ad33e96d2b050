"""Request ID Middleware

Purpose: Thread the inbound X-Request-Id through the common logger and the
error tracker for the lifetime of one request.

This middleware:
- Reads X-Request-Id from the inbound request
- Stores it as the common logger's request id, so every entry logged while
  handling the request carries ``requestID``
- Tags the error tracker scope with ``x-request-id``
- Always calls the next handler and returns its response unchanged
"""

from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from service_common.infrastructure import error_tracking
from service_common.infrastructure.logging.common_logger import CommonLogger, new_common_logger

REQUEST_ID_HEADER = "X-Request-Id"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that binds the request id header to logs and error reports."""

    def __init__(self, app: ASGIApp, logger: Optional[CommonLogger] = None):
        super().__init__(app)
        self.logger = logger or new_common_logger()

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER)
        if request_id:
            self.logger.request_id = request_id
            error_tracking.set_request_tag(request_id)

        return await call_next(request)


def create_request_id_middleware(app: ASGIApp, logger: Optional[CommonLogger] = None) -> RequestIdMiddleware:
    """Factory function to create request ID middleware."""
    return RequestIdMiddleware(app, logger=logger)

"""Middleware Package"""

from .request_id import REQUEST_ID_HEADER, RequestIdMiddleware, create_request_id_middleware

__all__ = ["REQUEST_ID_HEADER", "RequestIdMiddleware", "create_request_id_middleware"]

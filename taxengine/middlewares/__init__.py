"""ASGI middlewares."""

from .request_id import RequestIdMiddleware, current_request_id, request_id_ctx

__all__ = ["RequestIdMiddleware", "current_request_id", "request_id_ctx"]

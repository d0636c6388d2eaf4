"""Request id propagation for logs and error envelopes."""

from __future__ import annotations

import logging
import re
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

HEADER = "X-Request-ID"
# Ids coming from the UI or a proxy are echoed back; anything odd is replaced.
_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
logger = logging.getLogger("taxengine.http")


def current_request_id() -> str | None:
    return request_id_ctx.get(None)


def _incoming_id(request: Request) -> str:
    value = request.headers.get(HEADER, "")
    if _SAFE_ID.match(value):
        return value
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log one line when it completes."""

    async def dispatch(self, request: Request, call_next):
        req_id = _incoming_id(request)
        token = request_id_ctx.set(req_id)
        request.state.request_id = req_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.debug(
                "%s %s %.1fms",
                request.method,
                request.url.path,
                (time.perf_counter() - started) * 1000,
                extra={"route": request.url.path, "status": response.status_code},
            )
        finally:
            request_id_ctx.reset(token)
        response.headers[HEADER] = req_id
        return response

"""Response envelopes shared by every route.

Success is ``{"ok": true, "data": ...}``; failures carry the request id so a
cashier can quote it when reporting a problem.
"""

from typing import Any, Dict

from ..errors import ValidationError


def ok(data: Any) -> Dict[str, Any]:
    return {"ok": True, "data": data}


def err(
    code: int | str,
    message: str,
    hint: str | None = None,
) -> Dict[str, Any]:
    """Return an error envelope."""
    from ..middlewares.request_id import current_request_id

    error: Dict[str, Any] = {"code": code, "message": message}
    if hint:
        error["hint"] = hint
    return {"ok": False, "request_id": current_request_id(), "error": error}


def validation_err(exc: ValidationError) -> Dict[str, Any]:
    """Envelope for a :class:`ValidationError` raised by the engine."""

    return err(exc.code, exc.message, hint=exc.hint)

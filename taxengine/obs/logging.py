"""JSON log lines with buyer details masked.

Invoices and credit notes mention buyer emails, phone numbers, PANs and
GSTINs; none of them should reach the log store in clear text.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any

from ..middlewares.request_id import current_request_id

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+", re.I)
PHONE_RE = re.compile(r"(?<!\w)(?:\+?91[\s-]?)?[6-9]\d{9}\b")
# Keep the state code and the check character of a GSTIN.
GSTIN_RE = re.compile(r"\b(\d{2})[A-Z]{5}\d{4}[A-Z][0-9A-Z]Z([0-9A-Z])\b")
PAN_RE = re.compile(r"\b[A-Z]{5}\d{4}[A-Z]\b")

# LogRecord attributes copied into the JSON object when a caller sets them.
EXTRA_FIELDS = ("route", "status", "code", "doc_no")


def _redact_pii(text: str) -> str:
    text = EMAIL_RE.sub("***", text)
    text = GSTIN_RE.sub(lambda m: m.group(1) + "*" * 12 + m.group(2), text)
    text = PAN_RE.sub("**********", text)
    return PHONE_RE.sub("***", text)


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.req_id = current_request_id()
        return True


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "req_id": getattr(record, "req_id", None),
            "msg": _redact_pii(record.getMessage()),
        }
        for field in EXTRA_FIELDS:
            data[field] = getattr(record, field, None)
        if record.exc_info:
            data["exc"] = _redact_pii(self.formatException(record.exc_info))
        return json.dumps(data)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Send every log line through :class:`JsonFormatter` on stderr.

    ``level`` may be a name such as ``"DEBUG"``; it applies to the
    ``taxengine`` loggers while third-party loggers stay at WARNING.
    """

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger("taxengine").setLevel(level)

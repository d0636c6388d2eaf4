"""GSTIN structure and checksum validation.

A GSTIN is 15 characters::

    27 AAPFU0939F 1 Z V
    |  |          | | `- check character (mod 36)
    |  |          | `--- literal Z
    |  |          `----- entity number for the PAN holder
    |  `---------------- PAN
    `------------------- state code
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple

from ..metrics import gstin_validation_failures_total
from .states import DEFAULT_REGISTRY, StateRegistry

logger = logging.getLogger("taxengine.gstin")

GSTIN_LENGTH = 15
GSTIN_RE = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")
_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

MSG_LENGTH = "GSTIN must be 15 characters"
MSG_FORMAT = "Invalid GSTIN format"
MSG_STATE = "Invalid state code in GSTIN"
MSG_CHECKSUM = "GSTIN check digit does not match; re-check the number for typos"


class GSTINResult(NamedTuple):
    valid: bool
    message: str = ""


def normalize_gstin(value: str | None) -> str:
    """Uppercase and strip ``value``; validation itself never normalizes."""

    return (value or "").strip().upper()


def gstin_check_digit(prefix: str) -> str:
    """Return the mod-36 check character for the first 14 characters."""

    total = 0
    for pos, ch in enumerate(prefix[:14]):
        factor = 2 if pos % 2 else 1
        product = _CHARSET.index(ch) * factor
        total += product // 36 + product % 36
    return _CHARSET[(36 - total % 36) % 36]


def _fail(reason: str, message: str) -> GSTINResult:
    gstin_validation_failures_total.labels(reason=reason).inc()
    return GSTINResult(False, message)


def validate_gstin(
    gstin: str,
    *,
    verify_checksum: bool = False,
    registry: StateRegistry = DEFAULT_REGISTRY,
) -> GSTINResult:
    """Validate ``gstin`` and return ``(valid, message)``.

    The input must already be uppercase; use :func:`normalize_gstin` on user
    input first. With ``verify_checksum`` the final character is recomputed
    and a mismatch reports :data:`MSG_CHECKSUM`, distinct from a structural
    failure.
    """

    if not isinstance(gstin, str) or len(gstin) != GSTIN_LENGTH:
        return _fail("length", MSG_LENGTH)
    if not GSTIN_RE.match(gstin):
        return _fail("format", MSG_FORMAT)
    if gstin[:2] not in registry:
        return _fail("state", MSG_STATE)
    if verify_checksum and gstin_check_digit(gstin) != gstin[-1]:
        logger.info("gstin checksum mismatch for %s", gstin[:2] + "*" * 13)
        return _fail("checksum", MSG_CHECKSUM)
    return GSTINResult(True)


def state_code_from_gstin(gstin: str) -> str | None:
    if validate_gstin(gstin).valid:
        return gstin[:2]
    return None


def pan_from_gstin(gstin: str) -> str | None:
    """Extract the 10 character PAN embedded in ``gstin``."""

    if validate_gstin(gstin).valid:
        return gstin[2:12]
    return None

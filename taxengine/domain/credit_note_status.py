"""Credit note status enumeration and allowed transitions."""

from __future__ import annotations

from enum import Enum


class CreditNoteStatus(str, Enum):
    """Enumerate the lifecycle states for a credit note."""

    PENDING = "pending"
    APPROVED = "approved"
    REFUNDED = "refunded"
    EXCHANGED = "exchanged"
    CANCELLED = "cancelled"


class StockRestoreStatus(str, Enum):
    """Progress of the stock restoration requested on approval."""

    NOT_REQUESTED = "not_requested"
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


TRANSITIONS: dict[CreditNoteStatus, list[CreditNoteStatus]] = {
    CreditNoteStatus.PENDING: [
        CreditNoteStatus.APPROVED,
        CreditNoteStatus.CANCELLED,
    ],
    CreditNoteStatus.APPROVED: [
        CreditNoteStatus.REFUNDED,
        CreditNoteStatus.EXCHANGED,
    ],
    CreditNoteStatus.REFUNDED: [],
    CreditNoteStatus.EXCHANGED: [],
    CreditNoteStatus.CANCELLED: [],
}

TERMINAL = frozenset(status for status, nxt in TRANSITIONS.items() if not nxt)


def can_transition(src: CreditNoteStatus, dst: CreditNoteStatus) -> bool:
    """Return ``True`` if a credit note can move from ``src`` to ``dst``."""

    return dst in TRANSITIONS.get(src, [])

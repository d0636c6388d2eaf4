"""Domain models and helpers."""

from .credit_note_status import (
    TERMINAL,
    TRANSITIONS,
    CreditNoteStatus,
    StockRestoreStatus,
    can_transition,
)

__all__ = [
    "CreditNoteStatus",
    "StockRestoreStatus",
    "TERMINAL",
    "TRANSITIONS",
    "can_transition",
]

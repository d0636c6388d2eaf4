from __future__ import annotations

"""Credit notes that reverse part or all of a finalized invoice.

Credit note lines reuse the original line's rate, discount and intra/inter
state classification; they are never recomputed against the current rate
table. Status changes return new :class:`CreditNote` values.

Approval needs stock to be put back by the inventory subsystem. Rather than
calling it inline, :func:`approve` records :class:`StockRestoreRequest`
entries in the note's outbox. The caller writes the note and its outbox in
one transaction, then reports back with :func:`mark_stock_restored` or
:func:`mark_stock_restore_failed`. Notes stuck in between are listed by
:func:`pending_stock_restorations` for a retry sweep.
"""

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from ..domain.credit_note_status import (
    CreditNoteStatus,
    StockRestoreStatus,
    can_transition,
)
from ..errors import TransitionError, ValidationError
from ..schemas import ComputedDocument, ComputedLineItem, Party
from ..tax.gst_engine import ZERO, compute_line, round2
from ..tax.totals import aggregate
from .invoice_service import Invoice

logger = logging.getLogger("taxengine.credit_notes")


class ReturnReason(str, Enum):
    DEFECTIVE = "defective"
    WRONG_ITEM = "wrong_item"
    SIZE_EXCHANGE = "size_exchange"
    CUSTOMER_REQUEST = "customer_request"
    QUALITY_ISSUE = "quality_issue"
    OTHER = "other"


class ReturnLine(BaseModel):
    """Quantity being returned against line ``sr_no`` (1-based) of an invoice.

    ``already_returned`` comes from the order ledger when known.
    """

    model_config = ConfigDict(frozen=True)

    sr_no: int
    quantity: int
    already_returned: Optional[int] = None


class StockRestoreRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    credit_note_number: str
    original_invoice_number: str
    sr_no: int
    description: str
    hsn_code: str
    quantity: int


class CreditNote(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: str
    original_invoice_number: str
    credit_note_date: date
    reason: ReturnReason
    buyer: Party
    source_lines: tuple[int, ...]
    document: ComputedDocument
    notes: str = ""
    status: CreditNoteStatus = CreditNoteStatus.PENDING
    refund_method: Optional[str] = None
    refund_reference: Optional[str] = None
    refunded_at: Optional[datetime] = None
    stock_restore: StockRestoreStatus = StockRestoreStatus.NOT_REQUESTED
    stock_restore_error: Optional[str] = None
    outbox: tuple[StockRestoreRequest, ...] = ()


def _mirror_line(
    original: ComputedLineItem, item: ReturnLine
) -> ComputedLineItem:
    returned = item.already_returned or 0
    if returned < 0:
        raise ValidationError("BAD_QUANTITY", "Returned count cannot be negative")
    available = original.quantity - returned
    if item.quantity <= 0:
        raise ValidationError(
            "BAD_QUANTITY", f"Return quantity must be positive for line {item.sr_no}"
        )
    if item.quantity > available:
        raise ValidationError(
            "RETURN_EXCEEDS_SOLD",
            f"Line {item.sr_no}: only {available} of {original.description!r} "
            "can be returned",
            hint="Check quantities already returned on earlier credit notes",
        )
    draft = original.to_draft().model_copy(update={"quantity": item.quantity})
    return compute_line(draft, original.inter_state)


def mirror_credit_note(
    invoice: Invoice,
    returns: Sequence[ReturnLine],
    *,
    number: str,
    reason: ReturnReason = ReturnReason.CUSTOMER_REQUEST,
    notes: str = "",
    credit_note_date: date | None = None,
    refund_shipping: bool = False,
) -> CreditNote:
    """Build a pending credit note reversing ``returns`` from ``invoice``.

    Any document discount on the invoice is reversed in proportion to the
    taxable value returned. Shipping is only reversed when
    ``refund_shipping`` is set.
    """

    if not returns:
        raise ValidationError("EMPTY_DOCUMENT", "Select at least one line to return")
    original_lines = invoice.document.lines
    seen: set[int] = set()
    for item in returns:
        if not 1 <= item.sr_no <= len(original_lines):
            raise ValidationError(
                "UNKNOWN_LINE",
                f"Invoice {invoice.number} has no line {item.sr_no}",
            )
        if item.sr_no in seen:
            raise ValidationError(
                "DUPLICATE_LINE", f"Line {item.sr_no} is listed more than once"
            )
        seen.add(item.sr_no)

    lines = [_mirror_line(original_lines[item.sr_no - 1], item) for item in returns]

    discount = ZERO
    original = invoice.document
    if original.discount_amount and original.taxable_value:
        returned_taxable = sum((line.taxable_amount for line in lines), ZERO)
        discount = round2(
            original.discount_amount * returned_taxable / original.taxable_value
        )
    shipping = original.shipping_charges if refund_shipping else ZERO
    document = aggregate(lines, discount, shipping, kind="credit_note")

    logger.info(
        "credit note %s against %s total=%s",
        number,
        invoice.number,
        document.grand_total,
    )
    return CreditNote(
        number=number,
        original_invoice_number=invoice.number,
        credit_note_date=credit_note_date or date.today(),
        reason=reason,
        buyer=invoice.buyer,
        source_lines=tuple(item.sr_no for item in returns),
        document=document,
        notes=notes,
    )


def _move(note: CreditNote, dst: CreditNoteStatus, **changes: object) -> CreditNote:
    if not can_transition(note.status, dst):
        raise TransitionError(
            "BAD_TRANSITION",
            f"Credit note {note.number} cannot go from {note.status.value} to {dst.value}",
        )
    logger.info("credit note %s %s -> %s", note.number, note.status.value, dst.value)
    return note.model_copy(update={"status": dst, **changes})


def approve(note: CreditNote) -> CreditNote:
    """Approve ``note`` and queue stock restoration for every returned line."""

    requests = tuple(
        StockRestoreRequest(
            credit_note_number=note.number,
            original_invoice_number=note.original_invoice_number,
            sr_no=sr_no,
            description=line.description,
            hsn_code=line.hsn_code,
            quantity=line.quantity,
        )
        for sr_no, line in zip(note.source_lines, note.document.lines)
    )
    return _move(
        note,
        CreditNoteStatus.APPROVED,
        stock_restore=StockRestoreStatus.PENDING,
        outbox=requests,
    )


def mark_stock_restored(note: CreditNote) -> CreditNote:
    """Record that the inventory subsystem applied the outbox."""

    if note.stock_restore not in (StockRestoreStatus.PENDING, StockRestoreStatus.FAILED):
        raise TransitionError(
            "NO_STOCK_RESTORE", f"Credit note {note.number} has no pending stock restore"
        )
    return note.model_copy(
        update={
            "stock_restore": StockRestoreStatus.DONE,
            "stock_restore_error": None,
            "outbox": (),
        }
    )


def mark_stock_restore_failed(note: CreditNote, error: str) -> CreditNote:
    """Keep the outbox for retry and remember why restoring stock failed."""

    if note.stock_restore not in (StockRestoreStatus.PENDING, StockRestoreStatus.FAILED):
        raise TransitionError(
            "NO_STOCK_RESTORE", f"Credit note {note.number} has no pending stock restore"
        )
    logger.warning("stock restore failed for credit note %s: %s", note.number, error)
    return note.model_copy(
        update={"stock_restore": StockRestoreStatus.FAILED, "stock_restore_error": error}
    )


def pending_stock_restorations(notes: Iterable[CreditNote]) -> Iterator[CreditNote]:
    """Yield approved notes whose stock has not been restored yet."""

    for note in notes:
        if note.stock_restore in (StockRestoreStatus.PENDING, StockRestoreStatus.FAILED):
            yield note


def refund(
    note: CreditNote,
    method: str,
    reference: str = "",
    *,
    now: datetime | None = None,
) -> CreditNote:
    """Record how the buyer was paid back. Tax figures stay untouched."""

    if not method or not method.strip():
        raise ValidationError("REFUND_METHOD_REQUIRED", "Refund method is required")
    return _move(
        note,
        CreditNoteStatus.REFUNDED,
        refund_method=method.strip(),
        refund_reference=reference,
        refunded_at=now or datetime.now(timezone.utc),
    )


def exchange(
    note: CreditNote, replacement: str, *, now: datetime | None = None
) -> CreditNote:
    """Settle ``note`` against replacement goods instead of money."""

    return _move(
        note,
        CreditNoteStatus.EXCHANGED,
        refund_method="exchange",
        refund_reference=f"Exchange: {replacement}",
        refunded_at=now or datetime.now(timezone.utc),
    )


def cancel(note: CreditNote) -> CreditNote:
    return _move(note, CreditNoteStatus.CANCELLED)


def credit_value(notes: Iterable[CreditNote]) -> Decimal:
    """Total value of approved, refunded or exchanged notes."""

    counted = {
        CreditNoteStatus.APPROVED,
        CreditNoteStatus.REFUNDED,
        CreditNoteStatus.EXCHANGED,
    }
    return sum(
        (note.document.grand_total for note in notes if note.status in counted), ZERO
    )

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from taxengine.billing.credit_notes import (
    ReturnLine,
    approve,
    cancel,
    credit_value,
    exchange,
    mark_stock_restore_failed,
    mark_stock_restored,
    mirror_credit_note,
    pending_stock_restorations,
    refund,
)
from taxengine.billing.invoice_service import build_invoice
from taxengine.domain.credit_note_status import (
    TERMINAL,
    CreditNoteStatus,
    StockRestoreStatus,
    can_transition,
)
from taxengine.errors import TransitionError, ValidationError

from tests.conftest import draft

NOW = datetime(2025, 5, 1, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def invoice(seller, buyer):
    return build_invoice(
        [
            draft(description="Ring", quantity=2, unit_price=1000, discount_percent=10),
            draft(description="Chain", unit_price=5000),
        ],
        seller,
        buyer,
        number="INV-100",
        shipping_charges=50,
    )


@pytest.fixture
def note(invoice):
    return mirror_credit_note(invoice, [ReturnLine(sr_no=1, quantity=1)], number="CN-1")


def test_mirrored_line_keeps_original_rates_and_split(invoice, note):
    line = note.document.lines[0]
    original = invoice.document.lines[0]
    assert line.inter_state is True
    assert line.igst_rate == original.igst_rate
    assert line.discount_percent == original.discount_percent
    assert line.taxable_amount == Decimal("900")
    assert line.igst_amount == Decimal("27")
    assert note.document.grand_total == Decimal("927")
    assert note.status is CreditNoteStatus.PENDING
    assert note.original_invoice_number == "INV-100"
    assert note.source_lines == (1,)


def test_shipping_is_refunded_only_on_request(invoice):
    lines = [ReturnLine(sr_no=2, quantity=1)]
    assert mirror_credit_note(invoice, lines, number="CN").document.shipping_charges == 0
    with_shipping = mirror_credit_note(invoice, lines, number="CN", refund_shipping=True)
    assert with_shipping.document.shipping_charges == Decimal("50")
    assert with_shipping.document.grand_total == Decimal("5200")


def test_document_discount_is_prorated(seller, buyer):
    inv = build_invoice(
        [
            draft(description="Ring", quantity=2, unit_price=1000, discount_percent=10),
            draft(description="Chain", unit_price=5000),
        ],
        seller,
        buyer,
        number="INV-101",
        discount_amount=68,
    )
    cn = mirror_credit_note(inv, [ReturnLine(sr_no=1, quantity=2)], number="CN-2")
    assert cn.document.discount_amount == Decimal("18")
    assert cn.document.grand_total == Decimal("1836")


def test_cannot_return_more_than_sold(invoice):
    with pytest.raises(ValidationError) as exc:
        mirror_credit_note(invoice, [ReturnLine(sr_no=1, quantity=3)], number="CN")
    assert exc.value.code == "RETURN_EXCEEDS_SOLD"
    with pytest.raises(ValidationError):
        mirror_credit_note(
            invoice, [ReturnLine(sr_no=1, quantity=1, already_returned=2)], number="CN"
        )


@pytest.mark.parametrize(
    "returns, code",
    [
        ([], "EMPTY_DOCUMENT"),
        ([ReturnLine(sr_no=5, quantity=1)], "UNKNOWN_LINE"),
        ([ReturnLine(sr_no=0, quantity=1)], "UNKNOWN_LINE"),
        ([ReturnLine(sr_no=1, quantity=1), ReturnLine(sr_no=1, quantity=1)], "DUPLICATE_LINE"),
        ([ReturnLine(sr_no=1, quantity=0)], "BAD_QUANTITY"),
    ],
)
def test_bad_return_selections(invoice, returns, code):
    with pytest.raises(ValidationError) as exc:
        mirror_credit_note(invoice, returns, number="CN")
    assert exc.value.code == code


def test_approve_queues_stock_restore(note):
    approved = approve(note)
    assert approved.status is CreditNoteStatus.APPROVED
    assert approved.stock_restore is StockRestoreStatus.PENDING
    assert len(approved.outbox) == 1
    request = approved.outbox[0]
    assert (request.sr_no, request.quantity, request.description) == (1, 1, "Ring")
    assert note.status is CreditNoteStatus.PENDING


def test_stock_restore_callbacks(note):
    approved = approve(note)
    failed = mark_stock_restore_failed(approved, "inventory offline")
    assert failed.stock_restore is StockRestoreStatus.FAILED
    assert failed.outbox == approved.outbox
    assert list(pending_stock_restorations([note, failed])) == [failed]
    done = mark_stock_restored(failed)
    assert done.stock_restore is StockRestoreStatus.DONE
    assert done.outbox == ()
    assert done.stock_restore_error is None
    with pytest.raises(TransitionError):
        mark_stock_restored(done)


def test_refund_keeps_tax_figures(note):
    approved = approve(note)
    refunded = refund(approved, "UPI", "TXN42", now=NOW)
    assert refunded.status is CreditNoteStatus.REFUNDED
    assert refunded.document == approved.document
    assert refunded.refund_method == "UPI"
    assert refunded.refunded_at == NOW


def test_refund_requires_a_method(note):
    with pytest.raises(ValidationError) as exc:
        refund(approve(note), " ")
    assert exc.value.code == "REFUND_METHOD_REQUIRED"


def test_exchange(note):
    exchanged = exchange(approve(note), "Ring size 7", now=NOW)
    assert exchanged.status is CreditNoteStatus.EXCHANGED
    assert exchanged.refund_reference == "Exchange: Ring size 7"


def test_illegal_transitions(note):
    with pytest.raises(TransitionError):
        refund(note, "cash")
    with pytest.raises(TransitionError):
        cancel(approve(note))
    cancelled = cancel(note)
    assert cancelled.status is CreditNoteStatus.CANCELLED
    with pytest.raises(TransitionError) as exc:
        approve(cancelled)
    assert exc.value.code == "BAD_TRANSITION"


def test_transition_table():
    assert can_transition(CreditNoteStatus.PENDING, CreditNoteStatus.APPROVED)
    assert not can_transition(CreditNoteStatus.PENDING, CreditNoteStatus.REFUNDED)
    assert TERMINAL == {
        CreditNoteStatus.REFUNDED,
        CreditNoteStatus.EXCHANGED,
        CreditNoteStatus.CANCELLED,
    }


def test_credit_value_skips_pending_and_cancelled(invoice, note):
    other = mirror_credit_note(invoice, [ReturnLine(sr_no=2, quantity=1)], number="CN-9")
    assert credit_value([note, cancel(other)]) == 0
    assert credit_value([approve(note), approve(other)]) == Decimal("6077")

"""Invoice, credit note and e-way bill assembly."""

from .credit_notes import CreditNote, ReturnLine, ReturnReason, mirror_credit_note
from .eway_bill import EWayBillPayload, TransportDetails, build_eway_bill
from .invoice_service import Invoice, build_invoice, mark_paid

__all__ = [
    "CreditNote",
    "EWayBillPayload",
    "Invoice",
    "ReturnLine",
    "ReturnReason",
    "TransportDetails",
    "build_eway_bill",
    "build_invoice",
    "mark_paid",
    "mirror_credit_note",
]

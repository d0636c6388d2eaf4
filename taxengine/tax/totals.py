from __future__ import annotations

"""Document level totals with a single rupee round-off."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from ..errors import InvariantViolation, ValidationError
from ..metrics import documents_computed_total
from ..schemas import ComputedDocument, ComputedLineItem, LineItemDraft
from .gst_engine import ZERO, check_line_invariants, compute_lines, round2
from .jurisdiction import Jurisdiction
from .regime import DEFAULT_REGIME, TaxRegime

logger = logging.getLogger("taxengine.totals")

RUPEE = Decimal("1")


def _money(value: Decimal | int | float | str | None, field: str) -> Decimal:
    amount = Decimal(str(value or 0))
    if amount < 0:
        raise ValidationError("NEGATIVE_AMOUNT", f"{field} cannot be negative")
    return round2(amount)


def round_off(amount: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(rounded_total, adjustment)`` to the nearest rupee."""

    rounded = amount.quantize(RUPEE, rounding=ROUND_HALF_UP)
    return rounded, rounded - amount


def aggregate(
    lines: Sequence[ComputedLineItem],
    discount_amount: Decimal | int | float | str | None = 0,
    shipping_charges: Decimal | int | float | str | None = 0,
    *,
    kind: str = "invoice",
) -> ComputedDocument:
    """Sum computed ``lines`` into a :class:`ComputedDocument`.

    ``discount_amount`` is a document level discount on top of any line
    discounts. The grand total is rounded to the rupee and the difference is
    kept in ``round_off``.
    """

    if not lines:
        raise ValidationError(
            "EMPTY_DOCUMENT", "Add at least one line item", hint="Add a product line"
        )
    discount = _money(discount_amount, "Discount")
    shipping = _money(shipping_charges, "Shipping charges")

    taxable = sum((line.taxable_amount for line in lines), ZERO)
    cgst = sum((line.cgst_amount for line in lines), ZERO)
    sgst = sum((line.sgst_amount for line in lines), ZERO)
    igst = sum((line.igst_amount for line in lines), ZERO)
    cess = sum((line.cess_amount for line in lines), ZERO)
    total_tax = cgst + sgst + igst + cess

    if discount > taxable + total_tax + shipping:
        raise ValidationError(
            "DISCOUNT_TOO_LARGE",
            "Discount cannot exceed the document value",
            hint="Reduce the discount",
        )

    unrounded = taxable + total_tax - discount + shipping
    grand_total, adjustment = round_off(unrounded)

    documents_computed_total.labels(kind=kind).inc()
    logger.debug(
        "aggregated %s lines=%d taxable=%s tax=%s total=%s",
        kind,
        len(lines),
        taxable,
        total_tax,
        grand_total,
    )
    return ComputedDocument(
        lines=tuple(lines),
        taxable_value=taxable,
        cgst_total=cgst,
        sgst_total=sgst,
        igst_total=igst,
        cess_total=cess,
        total_tax=total_tax,
        discount_amount=discount,
        shipping_charges=shipping,
        round_off=adjustment,
        grand_total=grand_total,
    )


def compute_document(
    drafts: Iterable[LineItemDraft],
    jurisdiction: Jurisdiction,
    discount_amount: Decimal | int | float | str | None = 0,
    shipping_charges: Decimal | int | float | str | None = 0,
    *,
    kind: str = "invoice",
    regime: TaxRegime = DEFAULT_REGIME,
) -> ComputedDocument:
    """Recompute a whole document from its drafts.

    Called after every line add, remove or edit; nothing is patched
    incrementally. Lines without a rate take it from ``regime``.
    """

    drafts = list(drafts)
    if not drafts:
        raise ValidationError(
            "EMPTY_DOCUMENT", "Add at least one line item", hint="Add a product line"
        )
    lines = compute_lines(drafts, jurisdiction.is_inter_state, regime)
    return aggregate(lines, discount_amount, shipping_charges, kind=kind)


def check_document_invariants(doc: ComputedDocument) -> None:
    """Raise :class:`InvariantViolation` if ``doc`` is inconsistent."""

    for line in doc.lines:
        check_line_invariants(line)
    line_tax = sum((line.tax_amount for line in doc.lines), ZERO)
    if doc.total_tax != line_tax:
        raise InvariantViolation("total_tax is not the sum of line taxes")
    if doc.taxable_value != sum((line.taxable_amount for line in doc.lines), ZERO):
        raise InvariantViolation("taxable_value is not the sum of line values")
    unrounded = doc.taxable_value + doc.total_tax - doc.discount_amount + doc.shipping_charges
    if doc.grand_total != unrounded + doc.round_off:
        raise InvariantViolation("grand_total does not reconcile with round_off")
    if doc.grand_total != doc.grand_total.to_integral_value():
        raise InvariantViolation("grand_total is not a whole rupee amount")
    if abs(doc.round_off) >= 1:
        raise InvariantViolation("round_off is a rupee or more")

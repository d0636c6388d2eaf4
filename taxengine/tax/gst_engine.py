from __future__ import annotations

"""GST calculation for a single invoice line.

Every currency amount is rounded to ₹0.01 with ``ROUND_HALF_UP`` at the line
level; the document level round-off absorbs the residual.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..errors import InvariantViolation, ValidationError
from ..schemas import ComputedLineItem, LineItemDraft, TaxSplit
from .regime import DEFAULT_REGIME, TaxRegime

ROUND = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def round2(value: Decimal) -> Decimal:
    """Round ``value`` to paise, halves away from zero."""

    return value.quantize(ROUND, rounding=ROUND_HALF_UP)


def validate_draft(draft: LineItemDraft) -> None:
    """Raise :class:`ValidationError` for out of range draft fields."""

    if draft.tax_rate is None:
        raise ValidationError(
            "BAD_RATE", f"No GST rate for {draft.description!r}", hint="Set an HSN code"
        )
    if draft.quantity <= 0:
        raise ValidationError(
            "BAD_QUANTITY",
            f"Quantity must be positive for {draft.description!r}",
            hint="Enter a quantity of at least 1",
        )
    if draft.unit_price < 0:
        raise ValidationError(
            "BAD_PRICE", f"Unit price cannot be negative for {draft.description!r}"
        )
    if not ZERO <= draft.discount_percent <= HUNDRED:
        raise ValidationError(
            "BAD_DISCOUNT",
            f"Discount must be between 0 and 100% for {draft.description!r}",
        )
    if draft.tax_rate < 0 or draft.cess_rate < 0:
        raise ValidationError(
            "BAD_RATE", f"Tax rates cannot be negative for {draft.description!r}"
        )


def apply_regime(
    draft: LineItemDraft, regime: TaxRegime = DEFAULT_REGIME
) -> LineItemDraft:
    """Fill a blank HSN code and a missing rate from ``regime``.

    Rates typed on the line win over the table.
    """

    hsn = draft.hsn_code.strip() or regime.default_hsn
    rate = draft.tax_rate if draft.tax_rate is not None else regime.rate_for_hsn(hsn)
    if hsn == draft.hsn_code and rate == draft.tax_rate:
        return draft
    return draft.model_copy(update={"hsn_code": hsn, "tax_rate": rate})


def draft_from_product(
    description: str,
    quantity: int,
    unit_price: Decimal,
    *,
    category: str | None = None,
    material: str | None = None,
    hsn_code: str | None = None,
    discount_percent: Decimal = ZERO,
    regime: TaxRegime = DEFAULT_REGIME,
) -> LineItemDraft:
    """Build a draft for a catalogue product, classified by ``regime``.

    Without an explicit ``hsn_code`` the product's material and category
    pick one; the rate then follows the HSN code.
    """

    hsn = hsn_code or regime.hsn_for_material(category, material)
    return LineItemDraft(
        description=description,
        hsn_code=hsn,
        quantity=quantity,
        unit=regime.default_unit,
        unit_price=unit_price,
        discount_percent=discount_percent,
        tax_rate=regime.rate_for_hsn(hsn),
    )


def split_rate(tax_rate: Decimal, is_inter_state: bool) -> TaxSplit:
    """Return the CGST/SGST or IGST rates for ``tax_rate``."""

    if is_inter_state:
        return TaxSplit(igst_rate=tax_rate)
    half = tax_rate / 2
    return TaxSplit(cgst_rate=half, sgst_rate=half)


def compute_line(
    draft: LineItemDraft, is_inter_state: bool, regime: TaxRegime = DEFAULT_REGIME
) -> ComputedLineItem:
    """Compute discount, taxable value and GST for ``draft``.

    Discount comes off before tax. The line tax is rounded once and, for
    intra-state supplies, split into CGST ``round2(tax / 2)`` and SGST for the
    remainder, so the tax total does not depend on the split.
    """

    draft = apply_regime(draft, regime)
    validate_draft(draft)

    gross = draft.quantity * draft.unit_price
    discount = round2(gross * draft.discount_percent / HUNDRED)
    taxable = max(round2(gross - discount), ZERO)

    split = split_rate(draft.tax_rate, is_inter_state)
    tax = round2(taxable * draft.tax_rate / HUNDRED)
    cgst = sgst = igst = ZERO
    if is_inter_state:
        igst = tax
    else:
        cgst = round2(tax / 2)
        sgst = tax - cgst
    cess = round2(taxable * draft.cess_rate / HUNDRED)

    return ComputedLineItem(
        **draft.model_dump(),
        discount_amount=discount,
        taxable_amount=taxable,
        cgst_rate=split.cgst_rate,
        cgst_amount=cgst,
        sgst_rate=split.sgst_rate,
        sgst_amount=sgst,
        igst_rate=split.igst_rate,
        igst_amount=igst,
        cess_amount=cess,
        total_amount=taxable + cgst + sgst + igst + cess,
        inter_state=is_inter_state,
    )


def compute_lines(
    drafts: list[LineItemDraft] | tuple[LineItemDraft, ...],
    is_inter_state: bool,
    regime: TaxRegime = DEFAULT_REGIME,
) -> list[ComputedLineItem]:
    """Validate every draft first, then compute them all."""

    drafts = [apply_regime(draft, regime) for draft in drafts]
    for draft in drafts:
        validate_draft(draft)
    return [compute_line(draft, is_inter_state) for draft in drafts]


def check_line_invariants(line: ComputedLineItem) -> None:
    """Raise :class:`InvariantViolation` if ``line`` is inconsistent."""

    gross = line.quantity * line.unit_price
    if line.discount_amount != round2(gross * line.discount_percent / HUNDRED):
        raise InvariantViolation("discount_amount does not match discount_percent")
    if line.taxable_amount != round2(gross - line.discount_amount):
        raise InvariantViolation("taxable_amount is not gross less discount")
    if line.taxable_amount < 0:
        raise InvariantViolation("taxable_amount is negative")
    halves = line.cgst_amount or line.sgst_amount
    if halves and line.igst_amount:
        raise InvariantViolation("line carries both CGST/SGST and IGST")
    if line.cgst_rate != line.sgst_rate:
        raise InvariantViolation("CGST and SGST rates differ")
    if line.cgst_rate + line.sgst_rate + line.igst_rate != line.tax_rate:
        raise InvariantViolation("split rates do not add up to the nominal rate")
    if line.inter_state and (line.cgst_rate or line.sgst_rate):
        raise InvariantViolation("inter-state line has CGST/SGST rates")
    if not line.inter_state and line.igst_rate:
        raise InvariantViolation("intra-state line has an IGST rate")
    expected = (
        line.taxable_amount
        + line.cgst_amount
        + line.sgst_amount
        + line.igst_amount
        + line.cess_amount
    )
    if line.total_amount != expected:
        raise InvariantViolation("total_amount is not taxable value plus taxes")

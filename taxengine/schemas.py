# schemas.py

"""Pydantic value objects shared by the calculators."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ZERO = Decimal("0")


class LineItemDraft(BaseModel):
    """A line as typed into the invoice form, before any tax is applied.

    A blank ``hsn_code`` or missing ``tax_rate`` is filled from the store's
    :class:`~taxengine.tax.regime.TaxRegime` when the line is computed.
    """

    model_config = ConfigDict(frozen=True)

    description: str
    hsn_code: str = ""
    quantity: int
    unit: str = "PCS"
    unit_price: Decimal
    discount_percent: Decimal = ZERO
    tax_rate: Optional[Decimal] = None
    cess_rate: Decimal = ZERO


class TaxSplit(BaseModel):
    """Rates applied to one line: CGST + SGST halves, or IGST."""

    model_config = ConfigDict(frozen=True)

    cgst_rate: Decimal = ZERO
    sgst_rate: Decimal = ZERO
    igst_rate: Decimal = ZERO

    @property
    def nominal_rate(self) -> Decimal:
        return self.cgst_rate + self.sgst_rate + self.igst_rate


class ComputedLineItem(LineItemDraft):
    """A draft plus every derived amount. Never edited by hand."""

    tax_rate: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    cgst_rate: Decimal
    cgst_amount: Decimal
    sgst_rate: Decimal
    sgst_amount: Decimal
    igst_rate: Decimal
    igst_amount: Decimal
    cess_amount: Decimal = ZERO
    total_amount: Decimal
    inter_state: bool

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount + self.igst_amount + self.cess_amount

    def to_draft(self) -> LineItemDraft:
        return LineItemDraft(**self.model_dump(include=set(LineItemDraft.model_fields)))


class ComputedDocument(BaseModel):
    """Totals for an invoice or credit note."""

    model_config = ConfigDict(frozen=True)

    lines: tuple[ComputedLineItem, ...]
    taxable_value: Decimal
    cgst_total: Decimal
    sgst_total: Decimal
    igst_total: Decimal
    cess_total: Decimal = ZERO
    total_tax: Decimal
    discount_amount: Decimal = ZERO
    shipping_charges: Decimal = ZERO
    round_off: Decimal
    grand_total: Decimal

    @property
    def is_inter_state(self) -> bool:
        return any(line.inter_state for line in self.lines)


class Party(BaseModel):
    """Seller or buyer details printed on a document."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    gstin: Optional[str] = None
    state_code: Optional[str] = None
    address: str = ""
    place: str = ""
    pincode: Optional[int] = Field(default=None, ge=100000, le=999999)
    phone: str = ""
    email: str = ""

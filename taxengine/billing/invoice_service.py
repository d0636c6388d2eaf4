from __future__ import annotations

"""Finalize GST invoices from draft lines."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from ..errors import ValidationError
from ..schemas import ComputedDocument, LineItemDraft, Party
from ..tax.gstin import normalize_gstin, validate_gstin
from ..tax.jurisdiction import resolve_jurisdiction
from ..tax.regime import DEFAULT_REGIME, TaxRegime
from ..tax.states import DEFAULT_REGISTRY, StateRegistry
from ..tax.totals import compute_document
from ..tax.words import amount_in_words

logger = logging.getLogger("taxengine.billing")


class Invoice(BaseModel):
    """A finalized invoice. Corrections go through a credit note."""

    model_config = ConfigDict(frozen=True)

    number: str
    invoice_date: date
    seller: Party
    buyer: Party
    place_of_supply: str
    document: ComputedDocument
    amount_in_words: str
    is_reverse_charge: bool = False
    is_paid: bool = False
    paid_amount: Decimal = Decimal("0")
    notes: str = ""

    @property
    def grand_total(self) -> Decimal:
        return self.document.grand_total


def check_gstin(
    value: str | None,
    *,
    field: str,
    required: bool = False,
    verify_checksum: bool = False,
    registry: StateRegistry = DEFAULT_REGISTRY,
) -> str | None:
    """Normalize and validate a GSTIN, raising :class:`ValidationError`."""

    gstin = normalize_gstin(value)
    if not gstin:
        if required:
            raise ValidationError("GSTIN_REQUIRED", f"{field} GSTIN is required")
        return None
    result = validate_gstin(gstin, verify_checksum=verify_checksum, registry=registry)
    if not result.valid:
        raise ValidationError("BAD_GSTIN", f"{field} GSTIN: {result.message}")
    return gstin


def build_invoice(
    drafts: Iterable[LineItemDraft],
    seller: Party,
    buyer: Party,
    *,
    number: str,
    invoice_date: date | None = None,
    place_of_supply: str | None = None,
    discount_amount: Decimal | int | str = 0,
    shipping_charges: Decimal | int | str = 0,
    is_reverse_charge: bool = False,
    notes: str = "",
    verify_checksum: bool = False,
    regime: TaxRegime = DEFAULT_REGIME,
    registry: StateRegistry = DEFAULT_REGISTRY,
) -> Invoice:
    """Validate parties, compute every line and return a finalized invoice.

    All validation happens before any amount is computed. The seller state
    is the one embedded in the seller GSTIN and a conflicting
    ``seller.state_code`` is rejected. A buyer who gives a GSTIN but no state
    is placed in the GSTIN's state. Lines without a rate are priced from
    ``regime``.
    """

    if not number or not number.strip():
        raise ValidationError("NUMBER_REQUIRED", "Invoice number is required")
    if not buyer.name.strip():
        raise ValidationError(
            "BUYER_REQUIRED", "Buyer name is required", hint="Use 'Walk-in Customer'"
        )
    seller_gstin = check_gstin(
        seller.gstin,
        field="Seller",
        required=True,
        verify_checksum=verify_checksum,
        registry=registry,
    )
    buyer_gstin = check_gstin(
        buyer.gstin, field="Buyer", verify_checksum=verify_checksum, registry=registry
    )

    seller_state = seller_gstin[:2]
    if seller.state_code:
        seller_state = registry.normalize(seller.state_code, field="seller state")
        if seller_state != seller_gstin[:2]:
            raise ValidationError(
                "STATE_MISMATCH",
                f"Seller state {seller_state} does not match GSTIN state {seller_gstin[:2]}",
                hint="The first two digits of a GSTIN are its state code",
            )
    buyer_state = buyer.state_code or (buyer_gstin[:2] if buyer_gstin else None)
    if buyer_state:
        buyer_state = registry.normalize(buyer_state, field="buyer state")
    jurisdiction = resolve_jurisdiction(
        seller_state, buyer_state, place_of_supply, registry=registry
    )
    document = compute_document(
        drafts,
        jurisdiction,
        discount_amount,
        shipping_charges,
        kind="invoice",
        regime=regime,
    )

    logger.info(
        "invoice %s finalized total=%s inter_state=%s",
        number,
        document.grand_total,
        jurisdiction.is_inter_state,
    )
    return Invoice(
        number=number.strip(),
        invoice_date=invoice_date or date.today(),
        seller=seller.model_copy(
            update={"gstin": seller_gstin, "state_code": jurisdiction.seller_state_code}
        ),
        buyer=buyer.model_copy(update={"gstin": buyer_gstin, "state_code": buyer_state}),
        place_of_supply=jurisdiction.place_of_supply,
        document=document,
        amount_in_words=amount_in_words(document.grand_total),
        is_reverse_charge=is_reverse_charge,
        notes=notes,
    )


def mark_paid(invoice: Invoice, amount: Decimal | int | str | None = None) -> Invoice:
    """Return a copy of ``invoice`` with a payment recorded.

    ``amount`` defaults to the grand total.
    """

    paid = invoice.grand_total if amount is None else Decimal(str(amount))
    if paid < 0:
        raise ValidationError("NEGATIVE_AMOUNT", "Paid amount cannot be negative")
    return invoice.model_copy(
        update={"paid_amount": paid, "is_paid": paid >= invoice.grand_total}
    )

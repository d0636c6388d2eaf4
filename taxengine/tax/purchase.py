"""Single-rate GST for vendor purchase orders.

Purchase orders carry one combined GST rate per line and no CGST/SGST/IGST
split. Totals are kept to the paisa; there is no rupee round-off because the
vendor's own bill carries its round-off.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Sequence

from pydantic import BaseModel, ConfigDict

from ..errors import ValidationError
from ..metrics import documents_computed_total
from .gst_engine import HUNDRED, ZERO, round2


class ReceiptStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    RECEIVED = "received"


class PurchaseOrderLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    hsn_code: str = ""
    quantity: int
    unit_price: Decimal
    gst_rate: Decimal = ZERO
    gst_amount: Decimal = ZERO
    total_price: Decimal = ZERO
    quantity_received: int = 0


class PurchaseOrderTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines: tuple[PurchaseOrderLine, ...]
    subtotal: Decimal
    gst_amount: Decimal
    shipping_cost: Decimal
    discount_amount: Decimal
    total: Decimal


def compute_po_line(line: PurchaseOrderLine) -> PurchaseOrderLine:
    """Return ``line`` with ``gst_amount`` and ``total_price`` filled in."""

    if line.quantity <= 0:
        raise ValidationError(
            "BAD_QUANTITY", f"Quantity must be positive for {line.description!r}"
        )
    if line.unit_price < 0 or line.gst_rate < 0:
        raise ValidationError(
            "BAD_PRICE", f"Price and GST rate cannot be negative for {line.description!r}"
        )
    if line.quantity_received < 0:
        raise ValidationError("BAD_QUANTITY", "Received quantity cannot be negative")
    base = line.quantity * line.unit_price
    gst = round2(base * line.gst_rate / HUNDRED)
    return line.model_copy(update={"gst_amount": gst, "total_price": round2(base + gst)})


def compute_purchase_order(
    lines: Sequence[PurchaseOrderLine],
    shipping_cost: Decimal | int | str = 0,
    discount_amount: Decimal | int | str = 0,
) -> PurchaseOrderTotals:
    """Compute every line and the order total."""

    if not lines:
        raise ValidationError("EMPTY_DOCUMENT", "Add at least one item to the order")
    shipping = Decimal(str(shipping_cost or 0))
    discount = Decimal(str(discount_amount or 0))
    if shipping < 0 or discount < 0:
        raise ValidationError(
            "NEGATIVE_AMOUNT", "Shipping and discount cannot be negative"
        )

    computed = tuple(compute_po_line(line) for line in lines)
    subtotal = sum((line.quantity * line.unit_price for line in computed), ZERO)
    gst = sum((line.gst_amount for line in computed), ZERO)
    total = round2(subtotal + gst + shipping - discount)
    if total < 0:
        raise ValidationError("DISCOUNT_TOO_LARGE", "Discount cannot exceed the order value")

    documents_computed_total.labels(kind="purchase_order").inc()
    return PurchaseOrderTotals(
        lines=computed,
        subtotal=round2(subtotal),
        gst_amount=gst,
        shipping_cost=round2(shipping),
        discount_amount=round2(discount),
        total=total,
    )


def receipt_status(lines: Sequence[PurchaseOrderLine]) -> ReceiptStatus:
    """Summarise how much of the order has arrived."""

    ordered = sum(line.quantity for line in lines)
    received = sum(min(line.quantity_received, line.quantity) for line in lines)
    if received == 0:
        return ReceiptStatus.PENDING
    if received < ordered:
        return ReceiptStatus.PARTIAL
    return ReceiptStatus.RECEIVED

from __future__ import annotations

"""HTTP routes exposing the tax engine to the back-office UI."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel

from .billing.credit_notes import CreditNote, ReturnLine, ReturnReason, mirror_credit_note
from .billing.eway_bill import (
    TransportDetails,
    eway_bill_filename,
    eway_bill_for_invoice,
    eway_bill_json,
)
from .billing.invoice_service import Invoice, build_invoice
from .config import Settings, get_regime, get_settings
from .schemas import LineItemDraft, Party
from .tax.gst_engine import compute_line
from .tax.gstin import normalize_gstin, validate_gstin
from .tax.jurisdiction import resolve_jurisdiction
from .tax.purchase import PurchaseOrderLine, compute_purchase_order
from .tax.totals import compute_document
from .tax.words import amount_in_words
from .utils.csv_export import export_invoices_csv
from .utils.responses import ok

router = APIRouter(prefix="/tax")
logger = logging.getLogger("taxengine.routes")


class JurisdictionIn(BaseModel):
    seller_state_code: Optional[str] = None
    buyer_state_code: Optional[str] = None
    place_of_supply: Optional[str] = None


class LineIn(JurisdictionIn):
    draft: LineItemDraft


class DocumentIn(JurisdictionIn):
    lines: list[LineItemDraft]
    discount_amount: Decimal = Decimal("0")
    shipping_charges: Decimal = Decimal("0")


class PurchaseOrderIn(BaseModel):
    lines: list[PurchaseOrderLine]
    shipping_cost: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")


class GSTINIn(BaseModel):
    gstin: str
    verify_checksum: Optional[bool] = None


class InvoiceIn(BaseModel):
    number: str
    invoice_date: Optional[date] = None
    buyer: Party
    seller: Optional[Party] = None
    place_of_supply: Optional[str] = None
    lines: list[LineItemDraft]
    discount_amount: Decimal = Decimal("0")
    shipping_charges: Decimal = Decimal("0")
    notes: str = ""


class EWayBillIn(InvoiceIn):
    transport: TransportDetails


class CreditNoteIn(BaseModel):
    number: str
    invoice: Invoice
    returns: list[ReturnLine]
    reason: ReturnReason = ReturnReason.CUSTOMER_REQUEST
    notes: str = ""
    refund_shipping: bool = False


def _jurisdiction(body: JurisdictionIn, settings: Settings):
    return resolve_jurisdiction(
        body.seller_state_code or settings.seller_state_code,
        body.buyer_state_code,
        body.place_of_supply,
    )


def _seller(settings: Settings) -> Party:
    return Party(
        name=settings.seller_name,
        gstin=settings.seller_gstin,
        state_code=settings.seller_state_code,
    )


def _invoice(body: InvoiceIn, settings: Settings) -> Invoice:
    return build_invoice(
        body.lines,
        body.seller or _seller(settings),
        body.buyer,
        number=body.number,
        invoice_date=body.invoice_date,
        place_of_supply=body.place_of_supply,
        discount_amount=body.discount_amount,
        shipping_charges=body.shipping_charges,
        notes=body.notes,
        verify_checksum=settings.gstin_verify_checksum,
        regime=get_regime(),
    )


@router.post("/lines/compute")
async def compute_line_route(
    body: LineIn, settings: Settings = Depends(get_settings)
) -> dict:
    jurisdiction = _jurisdiction(body, settings)
    line = compute_line(body.draft, jurisdiction.is_inter_state, get_regime())
    return ok(
        {
            "line": line.model_dump(mode="json"),
            "place_of_supply": jurisdiction.place_of_supply,
            "inter_state": jurisdiction.is_inter_state,
        }
    )


@router.post("/documents/compute")
async def compute_document_route(
    body: DocumentIn, settings: Settings = Depends(get_settings)
) -> dict:
    """Recompute the whole document; called on every edit in the form."""

    jurisdiction = _jurisdiction(body, settings)
    document = compute_document(
        body.lines,
        jurisdiction,
        body.discount_amount,
        body.shipping_charges,
        regime=get_regime(),
    )
    data = document.model_dump(mode="json")
    data["amount_in_words"] = amount_in_words(document.grand_total)
    data["inter_state"] = jurisdiction.is_inter_state
    return ok(data)


@router.post("/purchase-orders/compute")
async def compute_purchase_order_route(body: PurchaseOrderIn) -> dict:
    totals = compute_purchase_order(body.lines, body.shipping_cost, body.discount_amount)
    return ok(totals.model_dump(mode="json"))


@router.post("/gstin/validate")
async def validate_gstin_route(
    body: GSTINIn, settings: Settings = Depends(get_settings)
) -> dict:
    gstin = normalize_gstin(body.gstin)
    verify = settings.gstin_verify_checksum if body.verify_checksum is None else body.verify_checksum
    result = validate_gstin(gstin, verify_checksum=verify)
    return ok({"gstin": gstin, "valid": result.valid, "message": result.message})


@router.get("/amount-in-words")
async def amount_in_words_route(amount: Decimal = Query(...)) -> dict:
    return ok({"amount": str(amount), "words": amount_in_words(amount)})


@router.post("/invoices")
async def create_invoice_route(
    body: InvoiceIn, settings: Settings = Depends(get_settings)
) -> dict:
    invoice = _invoice(body, settings)
    return ok(invoice.model_dump(mode="json"))


@router.post("/eway-bill")
async def eway_bill_route(
    body: EWayBillIn, settings: Settings = Depends(get_settings)
) -> Response:
    """Return the e-way bill JSON as a download named after the invoice."""

    invoice = _invoice(body, settings)
    payload = eway_bill_for_invoice(invoice, body.transport, regime=get_regime())
    response = Response(content=eway_bill_json(payload), media_type="application/json")
    response.headers["Content-Disposition"] = (
        f"attachment; filename={eway_bill_filename(invoice.number)}"
    )
    return response


@router.post("/invoices/export.csv")
async def export_invoices_route(invoices: list[Invoice]) -> Response:
    response = Response(content=export_invoices_csv(invoices), media_type="text/csv")
    response.headers["Content-Disposition"] = "attachment; filename=invoices.csv"
    return response


@router.post("/credit-notes")
async def create_credit_note_route(body: CreditNoteIn) -> dict:
    note: CreditNote = mirror_credit_note(
        body.invoice,
        body.returns,
        number=body.number,
        reason=body.reason,
        notes=body.notes,
        refund_shipping=body.refund_shipping,
    )
    return ok(note.model_dump(mode="json"))

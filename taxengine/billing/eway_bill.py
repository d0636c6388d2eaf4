from __future__ import annotations

"""Assemble e-way bill JSON from a computed invoice.

The payload follows the field names of the NIC e-way bill bulk upload /
API schema so it can be uploaded on the portal or handed to a filing step.
Nothing here talks to the network.
"""

import json
import logging
import math
import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from ..errors import ValidationError
from ..metrics import eway_bills_built_total
from ..schemas import ComputedDocument, Party
from ..tax.gstin import normalize_gstin, validate_gstin
from ..tax.regime import DEFAULT_REGIME, TaxRegime
from ..tax.states import DEFAULT_REGISTRY, StateRegistry
from .invoice_service import Invoice

logger = logging.getLogger("taxengine.eway_bill")

MAX_DISTANCE_KM = 4000
KM_PER_DAY_REGULAR = 200
KM_PER_DAY_ODC = 20
# Intra-state movements up to this distance may skip vehicle details (Part B).
PART_B_EXEMPT_KM = 50
UNREGISTERED = "URP"

Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class SupplyType(str, Enum):
    OUTWARD = "O"
    INWARD = "I"


class SubSupplyType(str, Enum):
    SUPPLY = "1"
    IMPORT = "2"
    EXPORT = "3"
    JOB_WORK = "4"
    FOR_OWN_USE = "5"
    JOB_WORK_RETURNS = "6"
    SALES_RETURN = "7"
    OTHERS = "8"
    SKD_CKD = "9"
    LINE_SALES = "10"
    RECIPIENT_NOT_KNOWN = "11"
    EXHIBITION = "12"


class DocType(str, Enum):
    INVOICE = "INV"
    BILL_OF_SUPPLY = "BIL"
    BILL_OF_ENTRY = "BOE"
    CHALLAN = "CHL"
    CREDIT_NOTE = "CNT"
    OTHERS = "OTH"


class VehicleType(str, Enum):
    REGULAR = "R"
    OVER_DIMENSIONAL = "O"


class TransportMode(int, Enum):
    ROAD = 1
    RAIL = 2
    AIR = 3
    SHIP = 4


class TransportDetails(BaseModel):
    """Transport details captured from the e-way bill form."""

    model_config = ConfigDict(frozen=True)

    distance_km: int
    vehicle_type: VehicleType = VehicleType.REGULAR
    trans_mode: TransportMode = TransportMode.ROAD
    transporter_id: Optional[str] = None
    transporter_name: Optional[str] = None
    vehicle_no: Optional[str] = None
    trans_doc_no: Optional[str] = None
    trans_doc_date: Optional[date] = None


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class EWayBillItem(_Payload):
    product_name: str
    product_desc: str
    hsn_code: int
    quantity: int
    qty_unit: str
    taxable_amount: Amount
    cgst_rate: Amount
    sgst_rate: Amount
    igst_rate: Amount
    cess_rate: Amount


class EWayBillPayload(_Payload):
    supply_type: SupplyType
    sub_supply_type: SubSupplyType
    doc_type: DocType
    doc_no: str
    doc_date: str
    from_gstin: str
    from_trd_name: str
    from_addr1: str
    from_addr2: str = ""
    from_place: str
    from_pincode: Optional[int]
    from_state_code: int
    act_from_state_code: int
    to_gstin: str
    to_trd_name: str
    to_addr1: str
    to_addr2: str = ""
    to_place: str
    to_pincode: Optional[int]
    to_state_code: int
    act_to_state_code: int
    transaction_type: int = 1
    trans_distance: int
    trans_mode: TransportMode
    vehicle_type: VehicleType
    vehicle_no: str
    transporter_id: str
    transporter_name: str
    trans_doc_no: str
    trans_doc_date: str
    total_value: Amount
    cgst_value: Amount
    sgst_value: Amount
    igst_value: Amount
    cess_value: Amount
    tot_inv_value: Amount
    item_list: tuple[EWayBillItem, ...]
    # Informative only; not part of the upload schema.
    eway_bill_required: bool
    part_b_required: bool
    validity_days: Optional[int]
    note: str


def format_eway_date(value: date) -> str:
    """Return ``value`` as ``dd/mm/yyyy``."""

    return value.strftime("%d/%m/%Y")


def validity_days(distance_km: int, vehicle_type: VehicleType) -> int | None:
    """Days an e-way bill stays valid for ``distance_km``.

    One day per 200 km or part of it, 20 km for over-dimensional cargo.
    ``None`` when the distance is 0 and the portal computes it from pincodes.
    """

    if distance_km <= 0:
        return None
    per_day = KM_PER_DAY_REGULAR
    if vehicle_type == VehicleType.OVER_DIMENSIONAL:
        per_day = KM_PER_DAY_ODC
    return math.ceil(distance_km / per_day)


def is_eway_bill_required(
    invoice_value: Decimal, regime: TaxRegime = DEFAULT_REGIME
) -> bool:
    """Goods worth more than the threshold (₹50,000 by default) need one."""

    return invoice_value > regime.eway_bill_threshold


def _hsn_number(code: str, regime: TaxRegime) -> int:
    digits = (code or regime.default_hsn).strip()
    if not digits.isdigit():
        raise ValidationError("BAD_HSN", f"HSN code must be numeric: {digits!r}")
    return int(digits)


def _vehicle_no(value: str | None) -> str:
    return re.sub(r"[\s-]", "", value or "").upper()


def build_eway_bill(
    document: ComputedDocument,
    supplier: Party,
    transport: TransportDetails,
    *,
    doc_no: str,
    doc_date: date,
    buyer: Party | None = None,
    place_of_supply: str | None = None,
    doc_type: DocType = DocType.INVOICE,
    supply_type: SupplyType = SupplyType.OUTWARD,
    sub_supply_type: SubSupplyType = SubSupplyType.SUPPLY,
    regime: TaxRegime = DEFAULT_REGIME,
    registry: StateRegistry = DEFAULT_REGISTRY,
) -> EWayBillPayload:
    """Build the e-way bill payload for ``document``.

    The supplier GSTIN must be valid and fixes the dispatch state unless
    ``supplier.state_code`` says otherwise. Goods are delivered to
    ``place_of_supply`` when given, else to the buyer's registered state;
    that state must agree with the CGST/SGST or IGST split of ``document``.
    Buyers without a GSTIN are reported as ``URP``.
    """

    supplier_gstin = normalize_gstin(supplier.gstin)
    result = validate_gstin(supplier_gstin, registry=registry)
    if not result.valid:
        raise ValidationError("BAD_GSTIN", f"Supplier GSTIN: {result.message}")
    if not 0 <= transport.distance_km <= MAX_DISTANCE_KM:
        raise ValidationError(
            "BAD_DISTANCE",
            f"Distance must be between 0 and {MAX_DISTANCE_KM} km",
            hint="Enter 0 to let the portal compute it from pincodes",
        )
    transporter_id = normalize_gstin(transport.transporter_id)
    if transporter_id and not validate_gstin(transporter_id, registry=registry).valid:
        raise ValidationError("BAD_TRANSPORTER_ID", "Transporter ID must be a valid GSTIN")

    buyer = buyer or Party(name="")
    buyer_gstin = normalize_gstin(buyer.gstin) or UNREGISTERED
    if buyer_gstin != UNREGISTERED and not validate_gstin(buyer_gstin, registry=registry).valid:
        raise ValidationError("BAD_GSTIN", "Buyer GSTIN is not valid")

    from_state = supplier_gstin[:2]
    act_from_state = registry.normalize(supplier.state_code or from_state)
    # Registered state of the buyer vs. the state the goods are delivered to;
    # the latter is the place of supply the invoice was taxed under.
    to_state = registry.normalize(
        buyer.state_code
        or (buyer_gstin[:2] if buyer_gstin != UNREGISTERED else None)
        or place_of_supply
        or act_from_state
    )
    act_to_state = registry.normalize(place_of_supply or to_state)
    if document.lines and document.is_inter_state != (from_state != act_to_state):
        raise ValidationError(
            "STATE_MISMATCH",
            f"Document tax does not match a move from state {from_state} to {act_to_state}",
            hint="Pass the place of supply the invoice was taxed under",
        )

    items = tuple(
        EWayBillItem(
            product_name=line.description[:100],
            product_desc=line.description[:100],
            hsn_code=_hsn_number(line.hsn_code, regime),
            quantity=line.quantity,
            qty_unit=line.unit or regime.default_unit,
            taxable_amount=line.taxable_amount,
            cgst_rate=line.cgst_rate,
            sgst_rate=line.sgst_rate,
            igst_rate=line.igst_rate,
            cess_rate=line.cess_rate,
        )
        for line in document.lines
    )

    required = is_eway_bill_required(document.grand_total, regime)
    intra = act_from_state == act_to_state
    part_b = required and not (intra and transport.distance_km <= PART_B_EXEMPT_KM)
    days = validity_days(transport.distance_km, transport.vehicle_type)
    if not required:
        note = (
            f"Invoice value {document.grand_total} is within the "
            f"{regime.eway_bill_threshold} threshold; e-way bill optional"
        )
    elif days is None:
        note = "Validity will be computed by the portal from pincodes"
    else:
        note = f"Valid for {days} day(s) for {transport.distance_km} km"

    payload = EWayBillPayload(
        supply_type=supply_type,
        sub_supply_type=sub_supply_type,
        doc_type=doc_type,
        doc_no=doc_no,
        doc_date=format_eway_date(doc_date),
        from_gstin=supplier_gstin,
        from_trd_name=supplier.name,
        from_addr1=supplier.address,
        from_place=supplier.place,
        from_pincode=supplier.pincode,
        from_state_code=int(from_state),
        act_from_state_code=int(act_from_state),
        to_gstin=buyer_gstin,
        to_trd_name=buyer.name,
        to_addr1=buyer.address,
        to_place=buyer.place,
        to_pincode=buyer.pincode,
        to_state_code=int(to_state),
        act_to_state_code=int(act_to_state),
        trans_distance=transport.distance_km,
        trans_mode=transport.trans_mode,
        vehicle_type=transport.vehicle_type,
        vehicle_no=_vehicle_no(transport.vehicle_no),
        transporter_id=transporter_id,
        transporter_name=transport.transporter_name or "",
        trans_doc_no=transport.trans_doc_no or "",
        trans_doc_date=(
            format_eway_date(transport.trans_doc_date) if transport.trans_doc_date else ""
        ),
        total_value=document.taxable_value,
        cgst_value=document.cgst_total,
        sgst_value=document.sgst_total,
        igst_value=document.igst_total,
        cess_value=document.cess_total,
        tot_inv_value=document.grand_total,
        item_list=items,
        eway_bill_required=required,
        part_b_required=part_b,
        validity_days=days,
        note=note,
    )
    eway_bills_built_total.inc()
    logger.info("e-way bill payload built for %s required=%s", doc_no, required)
    return payload


def eway_bill_for_invoice(
    invoice: Invoice,
    transport: TransportDetails,
    *,
    regime: TaxRegime = DEFAULT_REGIME,
) -> EWayBillPayload:
    return build_eway_bill(
        invoice.document,
        invoice.seller,
        transport,
        doc_no=invoice.number,
        doc_date=invoice.invoice_date,
        buyer=invoice.buyer,
        place_of_supply=invoice.place_of_supply,
        regime=regime,
    )


def eway_bill_filename(doc_no: str) -> str:
    """Download name for the JSON export of ``doc_no``."""

    safe = re.sub(r"[^A-Za-z0-9_-]+", "-", doc_no).strip("-") or "document"
    return f"eway-bill-{safe}.json"


def eway_bill_json(payload: EWayBillPayload) -> str:
    return json.dumps(payload.model_dump(mode="json", by_alias=True), indent=2)

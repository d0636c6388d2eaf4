from __future__ import annotations

from decimal import Decimal

import pytest

from taxengine.schemas import LineItemDraft, Party

SELLER_GSTIN = "27AAPFU0939F1ZV"
BUYER_GSTIN = "29ABCDE1234F1Z5"


def draft(
    description: str = "Gold ring",
    quantity: int = 1,
    unit_price: str | int = "1000",
    discount_percent: str | int = "0",
    tax_rate: str | int | None = "3",
    hsn_code: str = "711319",
    cess_rate: str | int = "0",
) -> LineItemDraft:
    return LineItemDraft(
        description=description,
        hsn_code=hsn_code,
        quantity=quantity,
        unit_price=Decimal(str(unit_price)),
        discount_percent=Decimal(str(discount_percent)),
        tax_rate=None if tax_rate is None else Decimal(str(tax_rate)),
        cess_rate=Decimal(str(cess_rate)),
    )


@pytest.fixture
def seller() -> Party:
    return Party(
        name="Luminila Jewelry",
        gstin=SELLER_GSTIN,
        state_code="27",
        address="12 MG Road",
        place="Mumbai",
        pincode=400001,
    )


@pytest.fixture
def buyer() -> Party:
    return Party(
        name="Asha Traders",
        gstin=BUYER_GSTIN,
        address="4 Residency Road",
        place="Bengaluru",
        pincode=560001,
    )

from datetime import date
from decimal import Decimal

import pytest

from taxengine.billing.invoice_service import build_invoice, check_gstin, mark_paid
from taxengine.errors import ValidationError
from taxengine.schemas import Party

from tests.conftest import BUYER_GSTIN, draft


def _lines():
    return [
        draft(description="Ring", quantity=2, unit_price=1000, discount_percent=10),
        draft(description="Chain", unit_price=5000),
    ]


def test_buyer_gstin_decides_inter_state(seller, buyer):
    inv = build_invoice(_lines(), seller, buyer, number="INV-1", invoice_date=date(2025, 4, 15))
    assert inv.buyer.state_code == "29"
    assert inv.place_of_supply == "29"
    assert inv.document.is_inter_state
    assert inv.document.igst_total == Decimal("204")
    assert inv.grand_total == Decimal("7004")
    assert inv.amount_in_words == "Seven Thousand Four Rupees Only"


def test_walk_in_customer_is_intra_state(seller):
    inv = build_invoice(_lines(), seller, Party(name="Walk-in Customer"), number="INV-2")
    assert inv.place_of_supply == "27"
    assert inv.document.cgst_total == inv.document.sgst_total == Decimal("102")
    assert inv.buyer.gstin is None
    assert inv.invoice_date == date.today()


def test_place_of_supply_overrides_buyer_state(seller, buyer):
    inv = build_invoice(_lines(), seller, buyer, number="INV-3", place_of_supply="27")
    assert not inv.document.is_inter_state


def test_buyer_state_name_is_normalized(seller):
    inv = build_invoice(
        _lines(), seller, Party(name="Asha", state_code="Karnataka"), number="INV-4"
    )
    assert inv.buyer.state_code == "29"


def test_seller_gstin_is_normalized(seller, buyer):
    lower = seller.model_copy(update={"gstin": seller.gstin.lower()})
    inv = build_invoice(_lines(), lower, buyer, number="INV-5")
    assert inv.seller.gstin == seller.gstin


def test_missing_buyer_name_is_rejected(seller):
    with pytest.raises(ValidationError) as exc:
        build_invoice(_lines(), seller, Party(name="  "), number="INV-6")
    assert exc.value.code == "BUYER_REQUIRED"


def test_missing_number_is_rejected(seller, buyer):
    with pytest.raises(ValidationError) as exc:
        build_invoice(_lines(), seller, buyer, number="")
    assert exc.value.code == "NUMBER_REQUIRED"


def test_seller_gstin_is_required(seller, buyer):
    with pytest.raises(ValidationError) as exc:
        build_invoice(_lines(), seller.model_copy(update={"gstin": None}), buyer, number="X")
    assert exc.value.code == "GSTIN_REQUIRED"


def test_bad_buyer_gstin_is_rejected(seller):
    with pytest.raises(ValidationError) as exc:
        build_invoice(_lines(), seller, Party(name="A", gstin="12345"), number="X")
    assert exc.value.code == "BAD_GSTIN"


def test_checksum_verification_is_opt_in(seller, buyer):
    build_invoice(_lines(), seller, buyer, number="X")
    with pytest.raises(ValidationError):
        build_invoice(_lines(), seller, buyer, number="X", verify_checksum=True)


def test_check_gstin_returns_none_for_blank():
    assert check_gstin("", field="Buyer") is None
    assert check_gstin(BUYER_GSTIN.lower(), field="Buyer") == BUYER_GSTIN


def test_mark_paid(seller, buyer):
    inv = build_invoice(_lines(), seller, buyer, number="INV-7")
    partial = mark_paid(inv, 100)
    assert not partial.is_paid
    assert partial.paid_amount == Decimal("100")
    full = mark_paid(inv)
    assert full.is_paid
    assert full.paid_amount == inv.grand_total
    assert not inv.is_paid
    with pytest.raises(ValidationError):
        mark_paid(inv, -1)


def test_seller_state_must_match_gstin(seller, buyer):
    with pytest.raises(ValidationError) as exc:
        build_invoice(
            _lines(), seller.model_copy(update={"state_code": "29"}), buyer, number="X"
        )
    assert exc.value.code == "STATE_MISMATCH"


def test_seller_state_may_be_given_by_name(seller, buyer):
    named = seller.model_copy(update={"state_code": "Maharashtra"})
    inv = build_invoice(_lines(), named, buyer, number="X")
    assert inv.seller.state_code == "27"

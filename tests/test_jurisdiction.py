import pytest

from taxengine.errors import ValidationError
from taxengine.tax.jurisdiction import RESOLUTION_ORDER, is_inter_state, resolve_jurisdiction


def test_resolution_order_is_place_of_supply_then_buyer_then_seller():
    assert RESOLUTION_ORDER == ("place_of_supply", "buyer_state", "seller_state")


def test_no_buyer_signal_is_intra_state():
    res = resolve_jurisdiction("27")
    assert res.place_of_supply == "27"
    assert res.source == "seller_state"
    assert not res.is_inter_state


def test_buyer_in_another_state_is_inter_state():
    res = resolve_jurisdiction("27", buyer_state="29")
    assert res.source == "buyer_state"
    assert res.is_inter_state


def test_place_of_supply_wins_over_conflicting_buyer_state():
    res = resolve_jurisdiction("27", buyer_state="29", place_of_supply="27")
    assert res.source == "place_of_supply"
    assert res.place_of_supply == "27"
    assert not res.is_inter_state

    res = resolve_jurisdiction("27", buyer_state="27", place_of_supply="29")
    assert res.is_inter_state


def test_blank_values_count_as_absent():
    res = resolve_jurisdiction("27", buyer_state="", place_of_supply="  ")
    assert res.source == "seller_state"


def test_names_and_short_codes_are_normalized():
    assert resolve_jurisdiction("Maharashtra", buyer_state="karnataka").place_of_supply == "29"
    assert resolve_jurisdiction(7, place_of_supply="7").seller_state_code == "07"
    assert not is_inter_state("07", "Delhi")


def test_unknown_state_code_is_rejected():
    with pytest.raises(ValidationError) as exc:
        resolve_jurisdiction("27", buyer_state="99")
    assert exc.value.code == "UNKNOWN_STATE"

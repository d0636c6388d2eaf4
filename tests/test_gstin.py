import pytest

from taxengine.tax.gstin import (
    MSG_CHECKSUM,
    MSG_FORMAT,
    MSG_LENGTH,
    MSG_STATE,
    gstin_check_digit,
    normalize_gstin,
    pan_from_gstin,
    state_code_from_gstin,
    validate_gstin,
)
from taxengine.tax.states import StateRegistry


def test_well_formed_gstin_is_valid():
    assert validate_gstin("29ABCDE1234F1Z5") == (True, "")


@pytest.mark.parametrize("value", ["123", "", "29ABCDE1234F1Z55"])
def test_wrong_length_is_reported(value):
    result = validate_gstin(value)
    assert not result.valid
    assert result.message == MSG_LENGTH


def test_lowercase_is_rejected_until_normalized():
    assert validate_gstin("29abcde1234f1z5").message == MSG_FORMAT
    assert validate_gstin(normalize_gstin(" 29abcde1234f1z5 ")).valid


@pytest.mark.parametrize(
    "value",
    [
        "29ABCDE1234F0Z5",  # entity number cannot be 0
        "29ABCDE1234F1X5",  # 14th character must be Z
        "2AABCDE1234F1Z5",
        "29ABCD11234F1Z5",
    ],
)
def test_structural_errors(value):
    assert validate_gstin(value).message == MSG_FORMAT


def test_unknown_state_code():
    assert validate_gstin("99ABCDE1234F1Z5").message == MSG_STATE
    assert validate_gstin("28ABCDE1234F1Z5").message == MSG_STATE


def test_state_table_is_pluggable():
    registry = StateRegistry({"Test State": "99"})
    assert validate_gstin("99ABCDE1234F1Z5", registry=registry).valid
    assert not validate_gstin("29ABCDE1234F1Z5", registry=registry).valid


def test_check_digit():
    assert gstin_check_digit("27AAPFU0939F1Z") == "V"
    assert gstin_check_digit("29ABCDE1234F1Z") == "W"


def test_checksum_is_only_verified_on_request():
    assert validate_gstin("27AAPFU0939F1ZV", verify_checksum=True).valid
    assert validate_gstin("29ABCDE1234F1Z5").valid
    result = validate_gstin("29ABCDE1234F1Z5", verify_checksum=True)
    assert not result.valid
    assert result.message == MSG_CHECKSUM
    assert MSG_CHECKSUM != MSG_FORMAT


def test_parts_are_extracted_from_valid_gstins():
    assert state_code_from_gstin("27AAPFU0939F1ZV") == "27"
    assert pan_from_gstin("27AAPFU0939F1ZV") == "AAPFU0939F"
    assert state_code_from_gstin("bogus") is None
    assert pan_from_gstin("bogus") is None


def test_normalize_handles_none():
    assert normalize_gstin(None) == ""

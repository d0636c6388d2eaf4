import json
import logging

from taxengine.obs.logging import JsonFormatter, RequestIdFilter, _redact_pii


def test_redacts_email_phone_pan_and_gstin():
    text = _redact_pii(
        "mail a.b@shop.in call +91 9876543210 pan ABCDE1234F gstin 27AAPFU0939F1ZV"
    )
    assert "a.b@shop.in" not in text
    assert "9876543210" not in text
    assert "ABCDE1234F" not in text
    assert "27************V" in text


def test_invoice_numbers_and_amounts_are_kept():
    assert _redact_pii("invoice INV-1 total 53354.00") == "invoice INV-1 total 53354.00"


def test_json_formatter_emits_one_object():
    record = logging.LogRecord(
        "taxengine.billing", logging.INFO, __file__, 1, "buyer %s", ("29ABCDE1234F1Z5",), None
    )
    record.code = "BAD_GSTIN"
    record.doc_no = "INV-1"
    RequestIdFilter().filter(record)
    data = json.loads(JsonFormatter().format(record))
    assert data["level"] == "INFO"
    assert data["logger"] == "taxengine.billing"
    assert data["code"] == "BAD_GSTIN"
    assert data["doc_no"] == "INV-1"
    assert data["route"] is None
    assert data["msg"] == "buyer 29************5"
    assert data["req_id"] is None

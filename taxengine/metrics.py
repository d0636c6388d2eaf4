# metrics.py

"""Prometheus counters for the tax engine."""

from __future__ import annotations

from prometheus_client import Counter

documents_computed_total = Counter(
    "tax_documents_computed_total", "Total documents computed", ["kind"]
)
for _kind in ("invoice", "credit_note", "purchase_order"):
    documents_computed_total.labels(kind=_kind).inc(0)

gstin_validation_failures_total = Counter(
    "gstin_validation_failures_total",
    "Total GSTIN validations that failed",
    ["reason"],
)

eway_bills_built_total = Counter(
    "eway_bills_built_total", "Total e-way bill payloads assembled"
)
eway_bills_built_total.inc(0)

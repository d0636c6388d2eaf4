"""CSV exports for invoice lists and HSN summaries."""

from __future__ import annotations

import csv
import io
from decimal import Decimal
from typing import Any, Iterable

from ..billing.invoice_service import Invoice

INVOICE_HEADERS = ["invoice_number", "invoice_date", "buyer_name", "grand_total", "is_paid"]
HSN_HEADERS = ["hsn", "quantity", "taxable_value", "cgst", "sgst", "igst", "cess", "total"]


def _write(headers: list[str], rows: Iterable[Iterable[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def export_invoices_csv(invoices: Iterable[Invoice]) -> str:
    """One row per invoice with the header row first."""

    return _write(
        INVOICE_HEADERS,
        (
            [
                inv.number,
                inv.invoice_date.isoformat(),
                inv.buyer.name,
                f"{inv.grand_total:.2f}",
                "true" if inv.is_paid else "false",
            ]
            for inv in invoices
        ),
    )


def hsn_summary_csv(invoices: Iterable[Invoice]) -> str:
    """HSN-wise outward supply summary, sorted by HSN with a TOTAL row."""

    summary: dict[str, dict[str, Decimal]] = {}
    for inv in invoices:
        for line in inv.document.lines:
            entry = summary.setdefault(
                line.hsn_code or "",
                {k: Decimal("0") for k in HSN_HEADERS[1:]},
            )
            entry["quantity"] += line.quantity
            entry["taxable_value"] += line.taxable_amount
            entry["cgst"] += line.cgst_amount
            entry["sgst"] += line.sgst_amount
            entry["igst"] += line.igst_amount
            entry["cess"] += line.cess_amount
            entry["total"] += line.total_amount

    totals = {k: Decimal("0") for k in HSN_HEADERS[1:]}
    rows: list[list[str]] = []
    for hsn in sorted(summary):
        vals = summary[hsn]
        rows.append([hsn, str(vals["quantity"])] + [f"{vals[k]:.2f}" for k in HSN_HEADERS[2:]])
        for key, value in vals.items():
            totals[key] += value
    rows.append(["TOTAL", str(totals["quantity"])] + [f"{totals[k]:.2f}" for k in HSN_HEADERS[2:]])
    return _write(HSN_HEADERS, rows)

"""GST computation: states, GSTIN, line tax, totals and words."""

from .gst_engine import (
    apply_regime,
    compute_line,
    compute_lines,
    draft_from_product,
    round2,
    split_rate,
    validate_draft,
)
from .gstin import GSTINResult, normalize_gstin, validate_gstin
from .jurisdiction import RESOLUTION_ORDER, Jurisdiction, resolve_jurisdiction
from .purchase import compute_purchase_order
from .regime import DEFAULT_REGIME, TaxRegime, load_regime
from .states import DEFAULT_REGISTRY, STATE_CODES, StateRegistry
from .totals import aggregate, compute_document
from .words import amount_in_words

__all__ = [
    "DEFAULT_REGIME",
    "DEFAULT_REGISTRY",
    "GSTINResult",
    "Jurisdiction",
    "RESOLUTION_ORDER",
    "STATE_CODES",
    "StateRegistry",
    "TaxRegime",
    "aggregate",
    "apply_regime",
    "amount_in_words",
    "compute_document",
    "compute_line",
    "compute_lines",
    "compute_purchase_order",
    "draft_from_product",
    "load_regime",
    "normalize_gstin",
    "resolve_jurisdiction",
    "round2",
    "split_rate",
    "validate_draft",
    "validate_gstin",
]

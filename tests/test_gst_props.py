from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from taxengine.schemas import LineItemDraft
from taxengine.tax.gst_engine import HUNDRED, check_line_invariants, compute_line
from taxengine.tax.jurisdiction import resolve_jurisdiction
from taxengine.tax.totals import check_document_invariants, compute_document

prices = st.decimals(
    min_value=0, max_value=100000, places=2, allow_nan=False, allow_infinity=False
)
discounts = st.decimals(
    min_value=0, max_value=100, places=2, allow_nan=False, allow_infinity=False
)
rates = st.sampled_from(["0", "0.25", "3", "5", "12", "18", "28"]).map(Decimal)

drafts = st.builds(
    LineItemDraft,
    description=st.just("Item"),
    hsn_code=st.just("711319"),
    quantity=st.integers(min_value=1, max_value=50),
    unit_price=prices,
    discount_percent=discounts,
    tax_rate=rates,
)


@given(drafts)
def test_taxable_value_tracks_discounted_gross(d):
    line = compute_line(d, is_inter_state=False)
    expected = d.quantity * d.unit_price * (1 - d.discount_percent / HUNDRED)
    assert abs(line.taxable_amount - expected) <= Decimal("0.01")
    assert line.taxable_amount >= 0


@given(drafts)
def test_tax_total_does_not_depend_on_the_split(d):
    intra = compute_line(d, is_inter_state=False)
    inter = compute_line(d, is_inter_state=True)
    assert intra.cgst_amount + intra.sgst_amount == inter.igst_amount
    assert intra.total_amount == inter.total_amount
    assert abs(intra.cgst_amount - intra.sgst_amount) <= Decimal("0.01")
    check_line_invariants(intra)
    check_line_invariants(inter)


@given(drafts, st.booleans())
def test_compute_line_is_deterministic(d, inter):
    assert compute_line(d, inter) == compute_line(d, inter)


@settings(max_examples=50)
@given(
    st.lists(drafts, min_size=1, max_size=6),
    st.sampled_from(["27", "29"]),
    st.decimals(min_value=0, max_value=500, places=2, allow_nan=False, allow_infinity=False),
)
def test_documents_round_to_whole_rupees(lines, buyer_state, shipping):
    doc = compute_document(lines, resolve_jurisdiction("27", buyer_state), 0, shipping)
    assert doc.grand_total == doc.grand_total.to_integral_value()
    assert abs(doc.round_off) < 1
    check_document_invariants(doc)

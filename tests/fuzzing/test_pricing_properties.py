"""
Property-based tests for quote pricing and numbering.

Properties checked:
- With no discounts and no tax the total equals the gross line sum
- Tax is applied after both discount layers
- A fixed-amount discount larger than the subtotal is never clamped
- Quote numbering is pure and counts only quotes of the requested year
"""

from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

from crm_engines.pricing import compute_quote_totals, generate_quote_number
from crm_kernel.domain import DiscountKind

from tests.factories import make_item, make_quote, mxn

prices = st.decimals(
    min_value=Decimal("0.01"), max_value=Decimal("100000"), places=2,
    allow_nan=False, allow_infinity=False,
)
quantities = st.integers(min_value=1, max_value=50)
percentages = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("100"), places=2,
    allow_nan=False, allow_infinity=False,
)


@st.composite
def quote_lines(draw):
    count = draw(st.integers(min_value=1, max_value=8))
    return [
        make_item(item_id=str(n), quantity=draw(quantities), unit_price=str(draw(prices)))
        for n in range(count)
    ]


class TestTotalsProperties:
    @given(items=quote_lines())
    @settings(max_examples=100)
    def test_total_is_gross_sum_without_adjustments(self, items):
        totals = compute_quote_totals(items)
        gross = sum((i.unit_price.amount * i.quantity for i in items), Decimal("0"))
        assert totals.subtotal == mxn(gross)
        assert totals.total == totals.subtotal
        assert totals.tax.is_zero

    @given(items=quote_lines(), discount=percentages, tax_rate=percentages)
    @settings(max_examples=100)
    def test_tax_applies_to_discounted_subtotal(self, items, discount, tax_rate):
        totals = compute_quote_totals(
            items,
            global_discount=discount,
            global_discount_kind=DiscountKind.PERCENTAGE,
            tax_rate=tax_rate,
        )
        expected_base = totals.subtotal.amount * (1 - discount / 100)
        assert totals.discounted_subtotal.amount == expected_base
        assert totals.tax.amount == expected_base * tax_rate / 100
        assert totals.total == totals.discounted_subtotal + totals.tax
        assert totals.subtotal == totals.discounted_subtotal + totals.global_discount

    @given(items=quote_lines(), excess=prices)
    @settings(max_examples=50)
    def test_oversized_fixed_discount_goes_negative(self, items, excess):
        subtotal = compute_quote_totals(items).subtotal
        totals = compute_quote_totals(
            items,
            global_discount=subtotal.amount + excess,
            global_discount_kind=DiscountKind.FIXED,
        )
        assert totals.total.is_negative
        assert totals.total.amount == -excess


class TestNumberingProperties:
    @given(
        this_year=st.integers(min_value=0, max_value=30),
        other_year=st.integers(min_value=0, max_value=30),
    )
    @settings(max_examples=50)
    def test_counts_only_matching_year(self, this_year, other_year):
        quotes = [make_quote(f"a{n}", f"COT-2024-{n:03d}") for n in range(this_year)]
        quotes += [make_quote(f"b{n}", f"COT-2023-{n:03d}") for n in range(other_year)]

        first = generate_quote_number(quotes, 2024)
        second = generate_quote_number(quotes, 2024)

        assert first == second
        assert first == f"COT-2024-{this_year + 1:03d}"

"""
Tests for the Quote Pricing Engine.

Covers:
- Line totals with percentage and fixed discounts
- Quote totals: line discounts, then global discount, then tax
- Negative totals are returned, not clamped
- Count-based quote numbering across flat and embedded collections
"""

from decimal import Decimal

import pytest

from crm_engines.pricing import (
    collect_quotes,
    compute_line_total,
    compute_quote_totals,
    generate_quote_number,
    price_quote,
)
from crm_kernel.domain import DiscountKind, Money, QuoteItem

from tests.factories import make_item, make_prospect, make_quote, mxn


class TestLineTotal:
    def test_percentage_line_discount(self):
        item = make_item(quantity=2, unit_price="100", discount="10")
        assert compute_line_total(item) == mxn("180")

    def test_fixed_line_discount(self):
        item = make_item(quantity=3, unit_price="50", discount="20", kind=DiscountKind.FIXED)
        assert compute_line_total(item) == mxn("130")

    def test_matches_item_property(self):
        item = make_item(quantity=4, unit_price="25", discount="5")
        assert compute_line_total(item) == item.line_total

    def test_fixed_discount_over_line_is_negative(self):
        item = make_item(quantity=1, unit_price="10", discount="25", kind=DiscountKind.FIXED)
        assert compute_line_total(item) == mxn("-15")


class TestQuoteTotals:
    def test_single_item_with_global_discount_and_tax(self):
        """(1000 - 10%) * 1.16 = 1044."""
        totals = compute_quote_totals(
            [make_item(unit_price="1000")],
            global_discount=Decimal("10"),
            global_discount_kind=DiscountKind.PERCENTAGE,
            tax_rate=Decimal("16"),
        )
        assert totals.subtotal == mxn("1000")
        assert totals.global_discount == mxn("100")
        assert totals.discounted_subtotal == mxn("900")
        assert totals.tax == mxn("144")
        assert totals.total == mxn("1044")

    def test_line_discounts_apply_before_global(self):
        items = [
            make_item("1", quantity=2, unit_price="100", discount="10"),
            make_item("2", quantity=1, unit_price="20", discount="5", kind=DiscountKind.FIXED),
        ]
        totals = compute_quote_totals(
            items,
            global_discount=Decimal("15"),
            global_discount_kind=DiscountKind.FIXED,
            tax_rate=Decimal("0"),
        )
        # 180 + 15 = 195, less 15 fixed
        assert totals.subtotal == mxn("195")
        assert totals.total == mxn("180")

    def test_zero_discount_zero_tax_equals_sum_of_gross(self):
        items = [make_item("1", quantity=2, unit_price="10"), make_item("2", quantity=3, unit_price="5")]
        totals = compute_quote_totals(items)
        assert totals.total == mxn("35")

    def test_empty_items_is_zero_in_default_currency(self):
        totals = compute_quote_totals([], tax_rate=Decimal("16"))
        assert totals.total == Money.zero("MXN")

    def test_empty_items_uses_given_currency(self):
        totals = compute_quote_totals([], currency="USD")
        assert totals.total == Money.zero("USD")

    def test_negative_total_is_not_clamped(self, captured_logs):
        totals = compute_quote_totals(
            [make_item(unit_price="100")],
            global_discount=Decimal("150"),
            global_discount_kind=DiscountKind.FIXED,
            tax_rate=Decimal("16"),
        )
        assert totals.total == mxn("-58")
        assert any(r["message"] == "quote_total_negative" for r in captured_logs())

    def test_no_intermediate_rounding(self):
        totals = compute_quote_totals(
            [make_item(unit_price="10")],
            global_discount=Decimal("33.333"),
            tax_rate=Decimal("16"),
        )
        assert totals.total.amount == Decimal("6.6667") * Decimal("1.16")

    def test_mixed_currency_items_raise(self):
        items = [
            make_item("1"),
            QuoteItem(item_id="2", name="x", quantity=1, unit_price=Money.of("1", "USD")),
        ]
        with pytest.raises(ValueError):
            compute_quote_totals(items)

    def test_emits_engine_trace(self, captured_logs):
        compute_quote_totals([make_item()], tax_rate=Decimal("16"))
        traces = [r for r in captured_logs() if r["message"] == "CRM_ENGINE_TRACE"]
        assert traces
        assert traces[0]["engine_name"] == "pricing"
        assert len(traces[0]["input_fingerprint"]) == 16


class TestPriceQuote:
    def test_recomputes_subtotal_and_total(self):
        quote = make_quote(
            items=[make_item(quantity=2, unit_price="500")],
            global_discount=Decimal("100"),
            global_discount_kind=DiscountKind.FIXED,
            tax_rate=Decimal("16"),
        )
        priced = price_quote(quote)
        assert priced.subtotal == mxn("1000")
        assert priced.total == mxn("1044")
        assert quote.total == mxn("0")


class TestQuoteNumbering:
    def test_first_number_of_year(self):
        assert generate_quote_number([], 2024) == "COT-2024-001"

    def test_counts_numbers_containing_year(self):
        quotes = [
            make_quote("a", "COT-2024-001"),
            make_quote("b", "COT-2024-002"),
            make_quote("c", "COT-2023-007"),
        ]
        assert generate_quote_number(quotes, 2024) == "COT-2024-003"

    def test_is_pure(self):
        """Calling twice without storing returns the same number."""
        quotes = [make_quote("a", "COT-2024-001")]
        assert generate_quote_number(quotes, 2024) == generate_quote_number(quotes, 2024)

    def test_counts_embedded_quotes(self):
        prospect = make_prospect(quotes=[make_quote("b", "COT-2024-002")])
        number = generate_quote_number([make_quote("a", "COT-2024-001")], 2024, prospects=[prospect])
        assert number == "COT-2024-003"

    def test_quote_held_in_both_collections_counts_twice(self):
        """A quote stored flat and under its prospect is counted from each list."""
        quote = make_quote("a", "COT-2024-001")
        prospect = make_prospect(quotes=[quote])
        assert generate_quote_number([quote], 2024, prospects=[prospect]) == "COT-2024-003"

    def test_gap_after_deletion_can_reuse_existing_number(self):
        remaining = [make_quote("a", "COT-2024-001"), make_quote("c", "COT-2024-003")]
        assert generate_quote_number(remaining, 2024) == "COT-2024-003"

    def test_custom_prefix_and_width(self):
        assert generate_quote_number([], 2025, prefix="Q", width=5) == "Q-2025-00001"


class TestCollectQuotes:
    def test_first_occurrence_wins(self):
        flat = make_quote("a", "COT-2024-001", total="10")
        embedded = make_quote("a", "COT-2024-001", total="99")
        merged = collect_quotes([flat], [make_prospect(quotes=[embedded])])
        assert merged == [flat]

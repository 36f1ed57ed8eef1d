"""
Module: crm_engines.pricing
Responsibility:
    Price quotation line items and whole quotes, and assign sequential
    quote numbers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import crm_kernel/domain.

Invariants enforced:
    - Order of operations is fixed: line discounts, then the global
      discount on their sum, then tax on the discounted subtotal.
    - No clamping: discounts larger than their base produce negative
      line totals or quote totals, which are returned as-is.
    - No intermediate rounding.
    - Numbering is count-based: the next number is one more than the count
      of existing numbers containing the year. Deleting a quote can
      therefore make the generator hand out a number that already exists.

Failure modes:
    - ValueError from Money when items carry different currencies.

Usage:
    from decimal import Decimal
    from crm_engines.pricing import compute_quote_totals
    from crm_kernel.domain import DiscountKind, Money, QuoteItem

    items = [QuoteItem("1", "Chatbot", 2, Money.of("100", "MXN"),
                       Decimal("10"), DiscountKind.PERCENTAGE)]
    totals = compute_quote_totals(items, tax_rate=Decimal("16"))
    print(totals.total)  # 208.80 MXN
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal

from crm_kernel.domain.discount import DiscountKind, apply_discount
from crm_kernel.domain.prospects import Prospect
from crm_kernel.domain.quotes import Quote, QuoteItem
from crm_kernel.domain.values import Currency, Money
from crm_kernel.logging_config import get_logger
from crm_engines.tracer import traced_engine

logger = get_logger("engines.pricing")

# Currency for an empty quote when the caller gives none
DEFAULT_CURRENCY = "MXN"

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class QuoteTotals:
    """
    Result of pricing a set of quote lines.

    ``subtotal`` is the sum of line totals; ``discounted_subtotal`` is the
    tax base; ``total`` is what the client pays.
    """

    subtotal: Money
    global_discount: Money
    discounted_subtotal: Money
    tax: Money
    total: Money


def compute_line_total(item: QuoteItem) -> Money:
    """quantity * unit_price less the line's own discount."""
    return apply_discount(
        item.unit_price * item.quantity, item.discount, item.discount_kind
    )


@traced_engine("pricing", "1.0", fingerprint_fields=(
    "global_discount", "global_discount_kind", "tax_rate",
))
def compute_quote_totals(
    items: Sequence[QuoteItem],
    global_discount: Decimal = Decimal("0"),
    global_discount_kind: DiscountKind = DiscountKind.PERCENTAGE,
    tax_rate: Decimal = Decimal("0"),
    currency: Currency | str | None = None,
) -> QuoteTotals:
    """
    Price a quote.

    Args:
        items: Quote lines, in any order.
        global_discount: Second discount layer applied to the line subtotal.
        global_discount_kind: Interpretation of ``global_discount``.
        tax_rate: Tax percentage applied after both discount layers.
        currency: Currency of the result when ``items`` is empty. Defaults
            to the items' currency, then ``DEFAULT_CURRENCY``.

    Returns:
        QuoteTotals with subtotal, the global discount amount, the tax base,
        the tax amount and the total.
    """
    t0 = time.monotonic()
    if currency is None:
        currency = items[0].unit_price.currency if items else DEFAULT_CURRENCY

    subtotal = Money.total((compute_line_total(i) for i in items), currency)
    discounted = apply_discount(subtotal, global_discount, global_discount_kind)
    tax = discounted * Decimal(tax_rate) / _HUNDRED
    total = discounted + tax

    if total.is_negative:
        logger.warning("quote_total_negative", extra={
            "subtotal": str(subtotal.amount),
            "global_discount": str(global_discount),
            "global_discount_kind": DiscountKind(global_discount_kind).value,
            "total": str(total.amount),
        })

    logger.debug("quote_totals_computed", extra={
        "item_count": len(items),
        "subtotal": str(subtotal.amount),
        "discounted_subtotal": str(discounted.amount),
        "tax": str(tax.amount),
        "total": str(total.amount),
        "currency": total.currency.code,
        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
    })

    return QuoteTotals(
        subtotal=subtotal,
        global_discount=subtotal - discounted,
        discounted_subtotal=discounted,
        tax=tax,
        total=total,
    )


def price_quote(quote: Quote) -> Quote:
    """Return ``quote`` with ``subtotal`` and ``total`` recomputed from its items."""
    totals = compute_quote_totals(
        quote.items,
        global_discount=quote.global_discount,
        global_discount_kind=quote.global_discount_kind,
        tax_rate=quote.tax_rate,
        currency=quote.subtotal.currency,
    )
    return replace(quote, subtotal=totals.subtotal, total=totals.total)


def collect_quotes(
    quotes: Iterable[Quote],
    prospects: Iterable[Prospect] = (),
) -> list[Quote]:
    """
    Merge the flat quote collection with quotes embedded under prospects.

    A quote referenced from both places is the same entity and is returned
    once (first occurrence wins).
    """
    seen: set[str] = set()
    merged: list[Quote] = []
    for quote in list(quotes) + [q for p in prospects for q in p.quotes]:
        if quote.quote_id in seen:
            continue
        seen.add(quote.quote_id)
        merged.append(quote)
    return merged


@traced_engine("quote_numbering", "1.0", fingerprint_fields=("year", "prefix"))
def generate_quote_number(
    quotes: Iterable[Quote],
    year: int,
    prospects: Iterable[Prospect] = (),
    prefix: str = "COT",
    width: int = 3,
) -> str:
    """
    Next quote number for ``year``.

    Counts every quote in ``quotes`` plus every quote embedded under
    ``prospects`` whose number contains ``str(year)``, and returns
    ``<prefix>-<year>-<count + 1>`` zero padded to ``width``. The two
    collections are concatenated as given: a quote held in both is
    counted twice.
    Pure: calling it twice on the same inputs returns the same number.
    """
    year_token = str(year)
    known = list(quotes) + [q for p in prospects for q in p.quotes]
    count = sum(1 for q in known if year_token in q.number)
    number = f"{prefix}-{year}-{str(count + 1).zfill(width)}"

    logger.debug("quote_number_generated", extra={
        "year": year,
        "existing_for_year": count,
        "known_quotes": len(known),
        "number": number,
    })
    return number

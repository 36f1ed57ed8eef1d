"""
Module: crm_engines.pipeline
Responsibility:
    Sales pipeline dashboard figures over prospects and quotes.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Quotes are the union of the flat collection and the quotes embedded
      under prospects, counted once per ``quote_id``.
    - Quote counts use the stored status; a lapsed ``Sent`` quote is
      counted as ``Sent``.
    - Rates are percentages and are 0 when their denominator is 0.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from crm_kernel.domain.prospects import Platform, Prospect, ProspectStatus
from crm_kernel.domain.quotes import Quote, QuoteStatus
from crm_kernel.domain.values import Currency, Money
from crm_kernel.logging_config import get_logger
from crm_engines.pricing import DEFAULT_CURRENCY, collect_quotes

logger = get_logger("engines.pipeline")

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class PipelineMetrics:
    total_prospects: int
    closed_sales: int
    conversion_rate: Decimal
    quotes_generated: int
    total_quoted_value: Money
    acceptance_rate: Decimal
    prospects_by_platform: Mapping[Platform, int] = field(default_factory=dict)
    prospects_by_status: Mapping[ProspectStatus, int] = field(default_factory=dict)
    quotes_by_status: Mapping[QuoteStatus, int] = field(default_factory=dict)


def _rate(count: int, total: int) -> Decimal:
    if total == 0:
        return Decimal("0")
    return Decimal(count) / Decimal(total) * _HUNDRED


def _tally(values: Iterable) -> dict:
    counts: dict = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def pipeline_metrics(
    prospects: Iterable[Prospect],
    quotes: Iterable[Quote],
    currency: Currency | str | None = None,
) -> PipelineMetrics:
    """
    Dashboard figures for the prospect pipeline.

    ``conversion_rate`` is the share of prospects in ``Closed won``;
    ``acceptance_rate`` is the share of quotes in ``Accepted``.
    """
    prospects = list(prospects)
    all_quotes = collect_quotes(quotes, prospects)
    if currency is None:
        currency = all_quotes[0].currency if all_quotes else DEFAULT_CURRENCY

    closed = sum(1 for p in prospects if p.status == ProspectStatus.CLOSED_WON)
    accepted = sum(1 for q in all_quotes if q.status == QuoteStatus.ACCEPTED)

    metrics = PipelineMetrics(
        total_prospects=len(prospects),
        closed_sales=closed,
        conversion_rate=_rate(closed, len(prospects)),
        quotes_generated=len(all_quotes),
        total_quoted_value=Money.total((q.total for q in all_quotes), currency),
        acceptance_rate=_rate(accepted, len(all_quotes)),
        prospects_by_platform=_tally(p.platform for p in prospects),
        prospects_by_status=_tally(p.status for p in prospects),
        quotes_by_status=_tally(q.status for q in all_quotes),
    )

    logger.info("pipeline_metrics_computed", extra={
        "total_prospects": metrics.total_prospects,
        "quotes_generated": metrics.quotes_generated,
        "closed_sales": closed,
    })
    return metrics

"""
QuoteService -- Clock-injected quote workflow over the pure pricing and
lifecycle engines.

Architecture: crm_services -- imperative shell.
    The service reads the clock and the settings, then delegates every
    calculation to crm_engines. It never stores anything: callers receive
    new Quote and Prospect records and persist them however they like.

Invariants enforced:
    - A quote is numbered, priced and stamped exactly once, in
      ``issue_quote``.
    - A quote embedded under a prospect is the same entity as the one in
      the flat collection (same ``quote_id``); re-attaching replaces it.
    - The stored status is only changed through ``change_status``.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

from crm_config import CoreSettings, get_active_settings
from crm_kernel.domain.clock import Clock, SystemClock
from crm_kernel.domain.discount import DiscountKind
from crm_kernel.domain.prospects import Prospect
from crm_kernel.domain.quotes import Quote, QuoteHistoryEntry, QuoteItem, QuoteStatus
from crm_kernel.domain.values import Money
from crm_kernel.exceptions import ProspectNotFoundError
from crm_kernel.logging_config import LogContext, get_logger

from crm_engines.lifecycle import change_quote_status, effective_quote_status
from crm_engines.pricing import generate_quote_number, price_quote

logger = get_logger("services.quotes")


def _new_id() -> str:
    return str(uuid.uuid4())


class QuoteService:
    """Creates, numbers and moves quotes through their statuses.

    Contract:
        - ``draft_quote()`` builds an unnumbered Draft from line items.
        - ``issue_quote()`` numbers, prices and stamps a draft.
        - ``attach_to_prospect()`` embeds a quote under its prospect.
        - ``change_status()`` sets the stored status with a history entry.
        - ``effective_status()`` reports the status to display now.

    Non-goals:
        - Does NOT persist quotes or prospects (caller decides).
        - Does NOT enforce a status transition table.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        settings: CoreSettings | None = None,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._clock = clock or SystemClock()
        self._settings = settings or get_active_settings()
        self._new_id = id_factory

    @property
    def settings(self) -> CoreSettings:
        return self._settings

    def draft_quote(
        self,
        prospect_id: str,
        items: Sequence[QuoteItem],
        created_by: str = "",
        global_discount: Decimal = Decimal("0"),
        global_discount_kind: DiscountKind = DiscountKind.PERCENTAGE,
        tax_rate: Decimal | None = None,
        **fields,
    ) -> Quote:
        """Build an unnumbered Draft dated now and valid for the configured days.

        Extra keyword ``fields`` are passed to ``Quote`` unchanged
        (``notes``, ``payment_terms`` and so on).
        """
        now = self._clock.now()
        pricing = self._settings.pricing
        currency = items[0].unit_price.currency if items else self._settings.currency
        return Quote(
            quote_id=self._new_id(),
            number="",
            prospect_id=prospect_id,
            date=now,
            valid_until=now + timedelta(days=pricing.quote_validity_days),
            items=tuple(items),
            subtotal=Money.zero(currency),
            total=Money.zero(currency),
            global_discount=global_discount,
            global_discount_kind=global_discount_kind,
            tax_rate=pricing.default_tax_rate if tax_rate is None else tax_rate,
            status=QuoteStatus.DRAFT,
            created_by=created_by,
            **fields,
        )

    def issue_quote(
        self,
        draft: Quote,
        quotes: Iterable[Quote],
        prospects: Iterable[Prospect] = (),
    ) -> Quote:
        """Number, price and timestamp ``draft``.

        Args:
            draft: Quote to issue. Its ``number`` is overwritten.
            quotes: Flat collection of existing quotes.
            prospects: Prospects whose embedded quotes also count toward the
                sequence.

        Returns:
            The issued quote with a "Quote created" history entry.
        """
        now = self._clock.now()
        pricing = self._settings.pricing

        with LogContext.bind(quote_id=draft.quote_id, actor_id=draft.created_by or None):
            number = generate_quote_number(
                quotes,
                year=now.year,
                prospects=prospects,
                prefix=pricing.quote_number_prefix,
                width=pricing.quote_number_width,
            )
            created = QuoteHistoryEntry(
                entry_id=f"{draft.quote_id}-h{len(draft.history) + 1}",
                at=now,
                action="Quote created",
                user=draft.created_by,
                details=f"Quote {number} created",
            )
            issued = price_quote(replace(
                draft,
                number=number,
                created_at=now,
                updated_at=now,
                history=draft.history + (created,),
            ))

            logger.info("quote_issued", extra={
                "quote_number": number,
                "prospect_id": issued.prospect_id,
                "item_count": issued.item_count,
                "total": str(issued.total.amount),
                "currency": issued.currency.code,
            })
        return issued

    def attach_to_prospect(
        self,
        prospects: Iterable[Prospect],
        quote: Quote,
    ) -> list[Prospect]:
        """Return ``prospects`` with ``quote`` embedded under its owner.

        A quote already embedded (same ``quote_id``) is replaced in place;
        otherwise it is appended.

        Raises:
            ProspectNotFoundError: if no prospect has ``quote.prospect_id``.
        """
        prospects = list(prospects)
        if not any(p.prospect_id == quote.prospect_id for p in prospects):
            raise ProspectNotFoundError(quote.prospect_id)

        result = []
        for prospect in prospects:
            if prospect.prospect_id != quote.prospect_id:
                result.append(prospect)
                continue
            if any(q.quote_id == quote.quote_id for q in prospect.quotes):
                embedded = tuple(
                    quote if q.quote_id == quote.quote_id else q
                    for q in prospect.quotes
                )
            else:
                embedded = prospect.quotes + (quote,)
            result.append(replace(prospect, quotes=embedded))
        return result

    def change_status(
        self,
        quote: Quote,
        status: QuoteStatus,
        user: str,
    ) -> Quote:
        """Set the stored status at the current clock time."""
        with LogContext.bind(quote_id=quote.quote_id, actor_id=user or None):
            return change_quote_status(
                quote,
                status,
                changed_by=user,
                as_of=self._clock.now(),
                entry_id=f"{quote.quote_id}-h{len(quote.history) + 1}",
            )

    def effective_status(self, quote: Quote) -> QuoteStatus:
        return effective_quote_status(quote, self._clock.now())

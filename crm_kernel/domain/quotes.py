"""
Quote records -- quotations, their line items and change history.

Records are frozen. Status changes and repricing produce new Quote
instances (see ``crm_engines.lifecycle`` and ``crm_engines.pricing``).

A Quote may be referenced from the flat quote collection and from its
prospect's ``quotes`` at the same time. Both references point at the same
identity (``quote_id``); numbering and metrics de-duplicate on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from crm_kernel.domain.discount import DiscountKind, apply_discount
from crm_kernel.domain.values import Money


class QuoteStatus(str, Enum):
    """Stored quote status. Any value may be set from any other."""

    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    EXPIRED = "Expired"


@dataclass(frozen=True)
class QuoteItem:
    """
    One priced line on a quote.

    ``discount`` is percentage points or a currency amount depending on
    ``discount_kind``. Nothing here rejects a discount that exceeds the
    line's gross amount.
    """

    item_id: str
    name: str
    quantity: int
    unit_price: Money
    discount: Decimal = Decimal("0")
    discount_kind: DiscountKind = DiscountKind.PERCENTAGE
    description: str = ""
    product_id: str | None = None

    @property
    def gross_amount(self) -> Money:
        """quantity * unit_price, before the line discount."""
        return self.unit_price * self.quantity

    @property
    def line_total(self) -> Money:
        """Line amount after its own discount."""
        return apply_discount(self.gross_amount, self.discount, self.discount_kind)


@dataclass(frozen=True)
class QuoteHistoryEntry:
    """Append-only audit line on a quote."""

    entry_id: str
    at: datetime
    action: str
    user: str
    details: str = ""


@dataclass(frozen=True)
class Quote:
    """
    A priced proposal sent to a prospect.

    ``subtotal`` and ``total`` are derived values written by the pricing
    engine; ``status`` is the stored status. The display status, which may
    be ``Expired`` for a sent quote past ``valid_until``, is computed by
    ``crm_engines.lifecycle.effective_quote_status`` and never stored.
    """

    quote_id: str
    number: str
    prospect_id: str
    date: datetime
    valid_until: datetime
    items: tuple[QuoteItem, ...]
    subtotal: Money
    total: Money
    global_discount: Decimal = Decimal("0")
    global_discount_kind: DiscountKind = DiscountKind.PERCENTAGE
    tax_rate: Decimal = Decimal("16")
    status: QuoteStatus = QuoteStatus.DRAFT
    payment_terms: str = ""
    notes: str = ""
    terms_and_conditions: str = ""
    payment_methods: tuple[str, ...] = ()
    template: str | None = None
    created_by: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    history: tuple[QuoteHistoryEntry, ...] = field(default_factory=tuple)

    @property
    def currency(self):
        return self.subtotal.currency

    @property
    def item_count(self) -> int:
        return len(self.items)

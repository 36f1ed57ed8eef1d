"""Invoice records generated from scheduled project payments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from crm_kernel.domain.values import Money


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class InvoiceItem:
    item_id: str
    description: str
    quantity: Decimal
    rate: Money
    amount: Money


@dataclass(frozen=True)
class Invoice:
    invoice_id: str
    number: str
    client_id: str
    project_id: str | None
    issue_date: datetime
    due_date: datetime
    amount: Money
    tax: Money
    total: Money
    status: InvoiceStatus = InvoiceStatus.DRAFT
    items: tuple[InvoiceItem, ...] = ()
    notes: str = ""
    payment_terms: str = ""
    paid_date: datetime | None = None

"""
Pure domain layer.

Value objects and immutable records with NO dependencies on:
- Persistence
- Time/clock (except the Clock abstraction itself)
- I/O
"""

from crm_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from crm_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from crm_kernel.domain.discount import DiscountKind, apply_discount, discount_amount
from crm_kernel.domain.dtos import ValidationError
from crm_kernel.domain.invoices import Invoice, InvoiceItem, InvoiceStatus
from crm_kernel.domain.projects import (
    Client,
    ClientStatus,
    Expense,
    ExpenseCategory,
    Meeting,
    MeetingStatus,
    MeetingType,
    Milestone,
    MilestoneStatus,
    NoteType,
    PaymentSchedule,
    PaymentStatus,
    Project,
    ProjectNote,
    ProjectPriority,
    ProjectStatus,
    ProjectType,
)
from crm_kernel.domain.prospects import FollowUp, Platform, Prospect, ProspectStatus
from crm_kernel.domain.quotes import Quote, QuoteHistoryEntry, QuoteItem, QuoteStatus
from crm_kernel.domain.values import Currency, Money

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # Values
    "Currency",
    "CurrencyInfo",
    "CurrencyRegistry",
    "Money",
    "DiscountKind",
    "apply_discount",
    "discount_amount",
    "ValidationError",
    # Quotes / prospects
    "Quote",
    "QuoteHistoryEntry",
    "QuoteItem",
    "QuoteStatus",
    "FollowUp",
    "Platform",
    "Prospect",
    "ProspectStatus",
    # Projects
    "Client",
    "ClientStatus",
    "Expense",
    "ExpenseCategory",
    "Meeting",
    "MeetingStatus",
    "MeetingType",
    "Milestone",
    "MilestoneStatus",
    "NoteType",
    "PaymentSchedule",
    "PaymentStatus",
    "Project",
    "ProjectNote",
    "ProjectPriority",
    "ProjectStatus",
    "ProjectType",
    # Invoices
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
]

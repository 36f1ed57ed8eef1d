"""
CoreSettings schema.

Typed, frozen view of the YAML settings file. The loader parses YAML into
these types; engines and services only ever see these objects, never raw
dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from crm_kernel.domain.projects import ExpenseCategory


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PricingSettings:
    """Quote pricing and numbering defaults."""

    default_tax_rate: Decimal = Decimal("16")  # percent (IVA)
    quote_number_prefix: str = "COT"
    quote_number_width: int = 3
    quote_validity_days: int = 30


@dataclass(frozen=True)
class BillingSettings:
    """Invoice generation defaults."""

    invoice_number_prefix: str = "INV"
    invoice_number_width: int = 4
    tax_rate: Decimal = Decimal("16")  # percent
    payment_terms: str = "30 days"


@dataclass(frozen=True)
class SchedulingSettings:
    """Default look-ahead windows in days."""

    payment_window_days: int = 30
    meeting_window_days: int = 7
    alert_window_days: int = 7


@dataclass(frozen=True)
class BudgetSettings:
    """Categories a project budget is split across, in display order."""

    categories: tuple[ExpenseCategory, ...] = tuple(ExpenseCategory)


@dataclass(frozen=True)
class ReportingSettings:
    generated_by: str = "System"


@dataclass(frozen=True)
class IntakeSettings:
    """Defaults for prospects created from inbound leads."""

    default_owner: str = "1"
    default_platform: str = "unknown"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CoreSettings:
    """Complete settings for one deployment of the core."""

    settings_id: str
    version: int
    currency: str
    pricing: PricingSettings = field(default_factory=PricingSettings)
    billing: BillingSettings = field(default_factory=BillingSettings)
    scheduling: SchedulingSettings = field(default_factory=SchedulingSettings)
    budget: BudgetSettings = field(default_factory=BudgetSettings)
    reporting: ReportingSettings = field(default_factory=ReportingSettings)
    intake: IntakeSettings = field(default_factory=IntakeSettings)
    checksum: str = ""

"""
Module: crm_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines. This is the import surface for crm_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import crm_kernel (and sibling engine modules).
    MUST NOT import crm_config or crm_services.

Invariants enforced:
    - Purity: engines never read the system clock. Every time-relative
      operation takes an explicit ``as_of``; services supply it from a Clock.
    - Decimal-only arithmetic through Money; floats are rejected.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Main engine entrypoints are wrapped with ``@traced_engine`` and emit
    CRM_ENGINE_TRACE records with engine name, version, input fingerprint
    and duration.

Usage:
    from crm_engines import compute_quote_totals, sales_metrics, upcoming_payments
"""

from crm_kernel.logging_config import get_logger

logger = get_logger("engines")

from crm_engines.aggregation import (
    DEFAULT_BUDGET_CATEGORIES,
    UNKNOWN_CLIENT,
    BudgetLine,
    CashFlowData,
    ExpenseData,
    FinancialReport,
    ProfitabilityData,
    ProfitLossData,
    ProjectProfitability,
    ReportPeriod,
    ReportType,
    RevenueData,
    SalesMetrics,
    financial_report,
    find_project,
    project_budgets,
    sales_metrics,
)
from crm_engines.billing import generate_invoice, next_invoice_number
from crm_engines.filters import ProjectFilters, filter_projects
from crm_engines.lifecycle import (
    change_meeting_status,
    change_milestone_status,
    change_payment_status,
    change_project_status,
    change_quote_status,
    effective_quote_status,
    is_quote_expired,
    update_meeting_status,
    update_milestone_status,
    update_payment_status,
)
from crm_engines.pipeline import PipelineMetrics, pipeline_metrics
from crm_engines.pricing import (
    DEFAULT_CURRENCY,
    QuoteTotals,
    collect_quotes,
    compute_line_total,
    compute_quote_totals,
    generate_quote_number,
    price_quote,
)
from crm_engines.scheduling import (
    Alert,
    AlertPriority,
    AlertType,
    overdue_milestones,
    payment_alerts,
    upcoming_meetings,
    upcoming_payments,
)
from crm_engines.tracer import traced_engine

__all__ = [
    # aggregation
    "DEFAULT_BUDGET_CATEGORIES",
    "UNKNOWN_CLIENT",
    "BudgetLine",
    "CashFlowData",
    "ExpenseData",
    "FinancialReport",
    "ProfitabilityData",
    "ProfitLossData",
    "ProjectProfitability",
    "ReportPeriod",
    "ReportType",
    "RevenueData",
    "SalesMetrics",
    "financial_report",
    "find_project",
    "project_budgets",
    "sales_metrics",
    # billing
    "generate_invoice",
    "next_invoice_number",
    # filters
    "ProjectFilters",
    "filter_projects",
    # lifecycle
    "change_meeting_status",
    "change_milestone_status",
    "change_payment_status",
    "change_project_status",
    "change_quote_status",
    "effective_quote_status",
    "is_quote_expired",
    "update_meeting_status",
    "update_milestone_status",
    "update_payment_status",
    # pipeline
    "PipelineMetrics",
    "pipeline_metrics",
    # pricing
    "DEFAULT_CURRENCY",
    "QuoteTotals",
    "collect_quotes",
    "compute_line_total",
    "compute_quote_totals",
    "generate_quote_number",
    "price_quote",
    # scheduling
    "Alert",
    "AlertPriority",
    "AlertType",
    "overdue_milestones",
    "payment_alerts",
    "upcoming_meetings",
    "upcoming_payments",
    # tracer
    "traced_engine",
]

"""
Module: crm_engines.aggregation
Responsibility:
    Sales metrics, per-category project budgets and period financial
    reports computed over a snapshot of projects.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Imports crm_kernel and sibling engines only. ``as_of`` is passed in.

Invariants enforced:
    - Totals are never rounded here; Money.round() is for presentation.
    - Empty collections produce zero values, never a division error.
    - ``profit_margin`` is 0 when revenue is 0.
    - Budget ``remaining`` may be negative; nothing is clamped.
    - Every expense counts, whatever its ``billable``/``approved`` flags.
    - Report project filtering uses ``project.created_at`` only. The cash
      flow outflow therefore includes every expense of a project created in
      the period, regardless of the expense date.

Failure modes:
    - ProjectNotFoundError from find_project.
    - ValueError from Money when projects carry different currencies.

Usage:
    from crm_engines.aggregation import ReportPeriod, ReportType, financial_report

    report = financial_report(
        projects, ReportType.PROFIT_LOSS,
        ReportPeriod(start, end), as_of=now, generated_by="System",
    )
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from crm_kernel.domain.projects import (
    Client,
    ExpenseCategory,
    Project,
    ProjectStatus,
)
from crm_kernel.domain.values import Currency, Money
from crm_kernel.exceptions import ProjectNotFoundError
from crm_kernel.logging_config import get_logger
from crm_engines.pricing import DEFAULT_CURRENCY
from crm_engines.tracer import traced_engine

logger = get_logger("engines.aggregation")

DEFAULT_BUDGET_CATEGORIES: tuple[ExpenseCategory, ...] = tuple(ExpenseCategory)
UNKNOWN_CLIENT = "Unknown"

_HUNDRED = Decimal("100")
_ZERO = Decimal("0")

# Fixed namespace so the same report inputs always yield the same id
_REPORT_NAMESPACE = uuid.UUID("5b7e0c1e-4a52-5e55-9c3e-8f0d2b6a1c44")


def _percentage(part: Money, whole: Money) -> Decimal:
    if whole.is_zero:
        return _ZERO
    return part.amount / whole.amount * _HUNDRED


def _resolve_currency(
    projects: Sequence[Project],
    currency: Currency | str | None,
) -> Currency | str:
    if currency is not None:
        return currency
    if projects:
        return projects[0].currency
    return DEFAULT_CURRENCY


def _local(moment: datetime, as_of: datetime) -> datetime:
    """``moment`` expressed in ``as_of``'s timezone when both are aware."""
    if moment.tzinfo is not None and as_of.tzinfo is not None:
        return moment.astimezone(as_of.tzinfo)
    return moment


def _quarter(moment: datetime) -> int:
    return (moment.month - 1) // 3


# ---------------------------------------------------------------------------
# Sales metrics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SalesMetrics:
    """
    Revenue and expense roll-up over a project collection.

    ``monthly_revenue``, ``quarterly_revenue`` and ``yearly_revenue`` only
    include projects created in the same calendar month, quarter or year as
    the ``as_of`` the metrics were computed for. ``total_revenue`` includes
    every project.
    """

    total_revenue: Money
    monthly_revenue: Money
    quarterly_revenue: Money
    yearly_revenue: Money
    average_project_value: Money
    total_projects: int
    active_projects: int
    completed_projects: int
    total_expenses: Money
    profit_margin: Decimal
    revenue_by_client: Mapping[str, Money] = field(default_factory=dict)
    revenue_by_project: Mapping[str, Money] = field(default_factory=dict)


@traced_engine("sales_metrics", "1.0")
def sales_metrics(
    projects: Iterable[Project],
    clients: Iterable[Client],
    as_of: datetime,
    currency: Currency | str | None = None,
) -> SalesMetrics:
    """
    Compute sales metrics for ``projects`` at ``as_of``.

    Args:
        projects: Project snapshot.
        clients: Clients used to name the ``revenue_by_client`` buckets.
            Projects whose client is missing are grouped under "Unknown".
        as_of: Reference instant for the month/quarter/year buckets.
        currency: Currency of the result. Defaults to the first project's
            currency, then ``DEFAULT_CURRENCY``.
    """
    t0 = time.monotonic()
    projects = list(projects)
    currency = _resolve_currency(projects, currency)
    client_names = {c.client_id: c.company_name for c in clients}
    zero = Money.zero(currency)

    total = monthly = quarterly = yearly = zero
    by_client: dict[str, Money] = {}
    by_project: dict[str, Money] = {}

    for project in projects:
        value = project.total_value
        total = total + value

        created = _local(project.created_at, as_of)
        if created.year == as_of.year:
            yearly = yearly + value
            if _quarter(created) == _quarter(as_of):
                quarterly = quarterly + value
            if created.month == as_of.month:
                monthly = monthly + value

        name = client_names.get(project.client_id, UNKNOWN_CLIENT)
        by_client[name] = by_client.get(name, zero) + value
        # Duplicate project names overwrite
        by_project[project.name] = value

    expenses = Money.total((p.total_expenses() for p in projects), currency)
    average = total / len(projects) if projects else zero

    metrics = SalesMetrics(
        total_revenue=total,
        monthly_revenue=monthly,
        quarterly_revenue=quarterly,
        yearly_revenue=yearly,
        average_project_value=average,
        total_projects=len(projects),
        active_projects=sum(
            1 for p in projects if p.status == ProjectStatus.IN_PROGRESS
        ),
        completed_projects=sum(
            1 for p in projects if p.status == ProjectStatus.COMPLETED
        ),
        total_expenses=expenses,
        profit_margin=_percentage(total - expenses, total),
        revenue_by_client=by_client,
        revenue_by_project=by_project,
    )

    logger.info("sales_metrics_completed", extra={
        "project_count": len(projects),
        "total_revenue": str(total.amount),
        "total_expenses": str(expenses.amount),
        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
    })
    return metrics


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BudgetLine:
    """Allocated, spent and remaining amounts for one project category."""

    budget_id: str
    project_id: str
    category: ExpenseCategory
    allocated: Money
    spent: Money
    remaining: Money
    last_updated: datetime

    @property
    def is_exceeded(self) -> bool:
        return self.remaining.is_negative


def project_budgets(
    project: Project,
    as_of: datetime,
    categories: Sequence[ExpenseCategory] = DEFAULT_BUDGET_CATEGORIES,
) -> list[BudgetLine]:
    """
    Split ``project.budget`` evenly across ``categories``.

    ``spent`` sums the project's expenses in each category; expenses in a
    category outside ``categories`` are not reported.
    """
    if not categories:
        return []

    allocated = project.budget / len(categories)
    spent: dict[ExpenseCategory, Money] = {}
    for expense in project.expenses:
        spent[expense.category] = (
            spent.get(expense.category, Money.zero(project.budget.currency))
            + expense.amount
        )

    lines = []
    for category in categories:
        category = ExpenseCategory(category)
        category_spent = spent.get(category, Money.zero(project.budget.currency))
        lines.append(BudgetLine(
            budget_id=f"{project.project_id}-{category.value}",
            project_id=project.project_id,
            category=category,
            allocated=allocated,
            spent=category_spent,
            remaining=allocated - category_spent,
            last_updated=as_of,
        ))
    return lines


def find_project(projects: Iterable[Project], project_id: str) -> Project:
    """
    Raises:
        ProjectNotFoundError: if no project has ``project_id``.
    """
    for project in projects:
        if project.project_id == project_id:
            return project
    raise ProjectNotFoundError(project_id)


# ---------------------------------------------------------------------------
# Financial reports
# ---------------------------------------------------------------------------


class ReportType(str, Enum):
    PROFIT_LOSS = "profit-loss"
    CASH_FLOW = "cash-flow"
    REVENUE = "revenue"
    EXPENSES = "expenses"
    PROJECT_PROFITABILITY = "project-profitability"


@dataclass(frozen=True)
class ReportPeriod:
    """Closed interval ``[start, end]``."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class ProfitLossData:
    revenue: Money
    expenses: Money
    profit: Money
    profit_margin: Decimal

    def as_rows(self) -> list[tuple[str, object]]:
        return [
            ("revenue", self.revenue),
            ("expenses", self.expenses),
            ("profit", self.profit),
            ("profit_margin", self.profit_margin),
        ]


@dataclass(frozen=True)
class CashFlowData:
    inflow: Money
    outflow: Money
    net_flow: Money

    def as_rows(self) -> list[tuple[str, object]]:
        return [
            ("inflow", self.inflow),
            ("outflow", self.outflow),
            ("net_flow", self.net_flow),
        ]


@dataclass(frozen=True)
class RevenueData:
    total_revenue: Money
    project_count: int
    average_project_value: Money

    def as_rows(self) -> list[tuple[str, object]]:
        return [
            ("total_revenue", self.total_revenue),
            ("project_count", self.project_count),
            ("average_project_value", self.average_project_value),
        ]


@dataclass(frozen=True)
class ExpenseData:
    total_expenses: Money
    by_category: Mapping[ExpenseCategory, Money]

    def as_rows(self) -> list[tuple[str, object]]:
        rows: list[tuple[str, object]] = [("total_expenses", self.total_expenses)]
        rows.extend(
            (f"expenses.{category.value}", amount)
            for category, amount in self.by_category.items()
        )
        return rows


@dataclass(frozen=True)
class ProjectProfitability:
    """
    Return on one project. ``roi`` is profit as a percentage of expenses
    and is 0 for a project with no expenses.
    """

    project_id: str
    name: str
    revenue: Money
    expenses: Money
    profit: Money
    roi: Decimal


@dataclass(frozen=True)
class ProfitabilityData:
    projects: tuple[ProjectProfitability, ...]

    def as_rows(self) -> list[tuple[str, object]]:
        rows: list[tuple[str, object]] = []
        for row in self.projects:
            rows.extend([
                (f"{row.name}.revenue", row.revenue),
                (f"{row.name}.expenses", row.expenses),
                (f"{row.name}.profit", row.profit),
                (f"{row.name}.roi", row.roi),
            ])
        return rows


ReportData = (
    ProfitLossData | CashFlowData | RevenueData | ExpenseData | ProfitabilityData
)


@dataclass(frozen=True)
class FinancialReport:
    report_id: str
    report_type: ReportType
    period: ReportPeriod
    data: ReportData
    generated_at: datetime
    generated_by: str
    project_count: int


def _profit_loss(projects: Sequence[Project], currency) -> ProfitLossData:
    revenue = Money.total((p.total_value for p in projects), currency)
    expenses = Money.total((p.total_expenses() for p in projects), currency)
    profit = revenue - expenses
    return ProfitLossData(
        revenue=revenue,
        expenses=expenses,
        profit=profit,
        profit_margin=_percentage(profit, revenue),
    )


def _cash_flow(
    projects: Sequence[Project],
    period: ReportPeriod,
    currency,
) -> CashFlowData:
    inflow = Money.total(
        (
            payment.amount
            for p in projects
            for payment in p.payments
            if payment.paid_date is not None and period.contains(payment.paid_date)
        ),
        currency,
    )
    outflow = Money.total((p.total_expenses() for p in projects), currency)
    return CashFlowData(inflow=inflow, outflow=outflow, net_flow=inflow - outflow)


def _revenue(projects: Sequence[Project], currency) -> RevenueData:
    total = Money.total((p.total_value for p in projects), currency)
    return RevenueData(
        total_revenue=total,
        project_count=len(projects),
        average_project_value=total / len(projects) if projects else total,
    )


def _expenses(projects: Sequence[Project], currency) -> ExpenseData:
    by_category = {c: Money.zero(currency) for c in ExpenseCategory}
    for project in projects:
        for expense in project.expenses:
            by_category[expense.category] = (
                by_category[expense.category] + expense.amount
            )
    return ExpenseData(
        total_expenses=Money.total(by_category.values(), currency),
        by_category=by_category,
    )


def _profitability(projects: Sequence[Project]) -> ProfitabilityData:
    rows = []
    for project in projects:
        expenses = project.total_expenses()
        profit = project.total_value - expenses
        rows.append(ProjectProfitability(
            project_id=project.project_id,
            name=project.name,
            revenue=project.total_value,
            expenses=expenses,
            profit=profit,
            roi=_percentage(profit, expenses),
        ))
    return ProfitabilityData(projects=tuple(rows))


def report_id_for(
    report_type: ReportType,
    period: ReportPeriod,
    as_of: datetime,
) -> str:
    """Deterministic report id derived from the report's inputs."""
    key = "|".join([
        ReportType(report_type).value,
        period.start.isoformat(),
        period.end.isoformat(),
        as_of.isoformat(),
    ])
    return str(uuid.uuid5(_REPORT_NAMESPACE, key))


@traced_engine("financial_report", "1.0", fingerprint_fields=("report_type",))
def financial_report(
    projects: Iterable[Project],
    report_type: ReportType,
    period: ReportPeriod,
    as_of: datetime,
    generated_by: str = "System",
    currency: Currency | str | None = None,
) -> FinancialReport:
    """
    Build a financial report over the projects created within ``period``.

    Args:
        projects: Project snapshot; filtered by ``created_at`` in ``period``.
        report_type: One of the ``ReportType`` values.
        period: Closed reporting interval.
        as_of: Becomes ``generated_at``.
        generated_by: User or process recorded on the report.
        currency: Currency of the totals. Defaults to the first project's
            currency, then ``DEFAULT_CURRENCY``.

    Raises:
        ValueError: if ``report_type`` is not a known report type.
    """
    t0 = time.monotonic()
    report_type = ReportType(report_type)
    all_projects = list(projects)
    currency = _resolve_currency(all_projects, currency)
    selected = [p for p in all_projects if period.contains(p.created_at)]

    logger.info("financial_report_started", extra={
        "report_type": report_type.value,
        "period_start": period.start.isoformat(),
        "period_end": period.end.isoformat(),
        "projects_in_period": len(selected),
        "projects_total": len(all_projects),
    })

    if report_type == ReportType.PROFIT_LOSS:
        data = _profit_loss(selected, currency)
    elif report_type == ReportType.CASH_FLOW:
        data = _cash_flow(selected, period, currency)
    elif report_type == ReportType.REVENUE:
        data = _revenue(selected, currency)
    elif report_type == ReportType.EXPENSES:
        data = _expenses(selected, currency)
    else:
        data = _profitability(selected)

    report = FinancialReport(
        report_id=report_id_for(report_type, period, as_of),
        report_type=report_type,
        period=period,
        data=data,
        generated_at=as_of,
        generated_by=generated_by,
        project_count=len(selected),
    )

    logger.info("financial_report_completed", extra={
        "report_id": report.report_id,
        "report_type": report_type.value,
        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
    })
    return report

"""
Module: crm_engines.scheduling
Responsibility:
    Time-windowed queries over the payments, meetings and milestones of a
    project collection, plus the alert list built from them.

Architecture position:
    Engines -- pure calculation layer, zero I/O. ``as_of`` is passed in.

Invariants enforced:
    - Read-only projections: stored statuses are never changed, even for
      items whose date has passed.
    - The window filters use dates only. A milestone counts as overdue when
      its due date is before ``as_of`` and it is not completed; its stored
      status does not have to be ``overdue``.
    - The upcoming windows have no lower bound: a pending payment due last
      week is still "due within the next N days".
    - Results are sorted ascending by their date; ties keep input order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from crm_kernel.domain.projects import (
    ExpenseCategory,
    Meeting,
    MeetingStatus,
    Milestone,
    MilestoneStatus,
    PaymentSchedule,
    PaymentStatus,
    Project,
)
from crm_kernel.logging_config import get_logger
from crm_engines.aggregation import DEFAULT_BUDGET_CATEGORIES, project_budgets

logger = get_logger("engines.scheduling")


def upcoming_payments(
    projects: Iterable[Project],
    as_of: datetime,
    days: int = 7,
) -> list[PaymentSchedule]:
    """Pending payments due on or before ``as_of + days``, earliest first."""
    cutoff = as_of + timedelta(days=days)
    result = sorted(
        (
            p
            for project in projects
            for p in project.payments
            if p.status == PaymentStatus.PENDING and p.due_date <= cutoff
        ),
        key=lambda p: p.due_date,
    )
    logger.debug("upcoming_payments_selected", extra={
        "window_days": days,
        "cutoff": cutoff.isoformat(),
        "count": len(result),
    })
    return result


def upcoming_meetings(
    projects: Iterable[Project],
    as_of: datetime,
    days: int = 7,
) -> list[Meeting]:
    """Scheduled meetings on or before ``as_of + days``, earliest first."""
    cutoff = as_of + timedelta(days=days)
    result = sorted(
        (
            m
            for project in projects
            for m in project.meetings
            if m.status == MeetingStatus.SCHEDULED and m.scheduled_date <= cutoff
        ),
        key=lambda m: m.scheduled_date,
    )
    logger.debug("upcoming_meetings_selected", extra={
        "window_days": days,
        "cutoff": cutoff.isoformat(),
        "count": len(result),
    })
    return result


def overdue_milestones(
    projects: Iterable[Project],
    as_of: datetime,
) -> list[Milestone]:
    """Milestones not completed whose due date is strictly before ``as_of``."""
    result = sorted(
        (
            m
            for project in projects
            for m in project.milestones
            if m.status != MilestoneStatus.COMPLETED and m.due_date < as_of
        ),
        key=lambda m: m.due_date,
    )
    logger.debug("overdue_milestones_selected", extra={"count": len(result)})
    return result


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------


class AlertType(str, Enum):
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    BUDGET_EXCEEDED = "budget_exceeded"


class AlertPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Alert:
    """One entry on the payment/budget alert list."""

    alert_id: str
    kind: AlertType
    title: str
    message: str
    priority: AlertPriority
    related_id: str
    related_type: str  # "payment" | "budget"
    created_at: datetime


def payment_alerts(
    projects: Iterable[Project],
    as_of: datetime,
    days: int = 7,
    categories: Sequence[ExpenseCategory] = DEFAULT_BUDGET_CATEGORIES,
) -> list[Alert]:
    """
    Alerts for overdue and upcoming pending payments and overspent budgets.

    Budgets are split across ``categories``, as in ``project_budgets``.

    Order: overdue payments (earliest first), upcoming payments (earliest
    first), then budget categories with negative ``remaining`` in project
    order.
    """
    projects = list(projects)
    cutoff = as_of + timedelta(days=days)
    overdue: list[Alert] = []
    upcoming: list[Alert] = []

    for payment in upcoming_payments(projects, as_of, days):
        if payment.due_date < as_of:
            overdue.append(Alert(
                alert_id=f"overdue-{payment.payment_id}",
                kind=AlertType.OVERDUE,
                title="Overdue payment",
                message=f"{payment.description}: {payment.amount} was due "
                        f"{payment.due_date.date().isoformat()}",
                priority=AlertPriority.HIGH,
                related_id=payment.payment_id,
                related_type="payment",
                created_at=as_of,
            ))
        elif payment.due_date <= cutoff:
            upcoming.append(Alert(
                alert_id=f"upcoming-{payment.payment_id}",
                kind=AlertType.UPCOMING,
                title="Upcoming payment",
                message=f"{payment.description}: {payment.amount} due "
                        f"{payment.due_date.date().isoformat()}",
                priority=AlertPriority.MEDIUM,
                related_id=payment.payment_id,
                related_type="payment",
                created_at=as_of,
            ))

    budget: list[Alert] = []
    for project in projects:
        for line in project_budgets(project, as_of, categories):
            if line.remaining.is_negative:
                budget.append(Alert(
                    alert_id=f"budget-{line.budget_id}",
                    kind=AlertType.BUDGET_EXCEEDED,
                    title="Budget exceeded",
                    message=f"{project.name} / {line.category.value}: "
                            f"spent {line.spent} of {line.allocated}",
                    priority=AlertPriority.HIGH,
                    related_id=line.budget_id,
                    related_type="budget",
                    created_at=as_of,
                ))

    alerts = overdue + upcoming + budget
    logger.info("payment_alerts_built", extra={
        "overdue": len(overdue),
        "upcoming": len(upcoming),
        "budget_exceeded": len(budget),
    })
    return alerts

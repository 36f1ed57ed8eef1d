"""
AnalyticsService -- Clock-injected wrapper over the scheduling, aggregation,
billing and pipeline engines.

Architecture: crm_services -- imperative shell.
    Supplies ``as_of`` from the clock and defaults (windows, categories,
    billing numbering, report author) from CoreSettings, then delegates to
    the pure engines.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from crm_config import CoreSettings, get_active_settings
from crm_kernel.domain.clock import Clock, SystemClock
from crm_kernel.domain.invoices import Invoice
from crm_kernel.domain.projects import (
    Client,
    Meeting,
    Milestone,
    PaymentSchedule,
    Project,
)
from crm_kernel.domain.prospects import Prospect
from crm_kernel.domain.quotes import Quote
from crm_kernel.logging_config import LogContext, get_logger

from crm_engines.aggregation import (
    BudgetLine,
    FinancialReport,
    ReportPeriod,
    ReportType,
    SalesMetrics,
    financial_report,
    find_project,
    project_budgets,
    sales_metrics,
)
from crm_engines.billing import generate_invoice
from crm_engines.pipeline import PipelineMetrics, pipeline_metrics
from crm_engines.scheduling import (
    Alert,
    overdue_milestones,
    payment_alerts,
    upcoming_meetings,
    upcoming_payments,
)

logger = get_logger("services.analytics")


class AnalyticsService:
    """Read models and invoices for a project snapshot at the current time.

    Contract:
        - Every method reads the clock once and passes it as ``as_of``.
        - Window arguments left as None take the configured defaults.

    Non-goals:
        - Does NOT cache results; each call recomputes from its inputs.
        - Does NOT persist invoices or reports (caller decides).
    """

    def __init__(
        self,
        clock: Clock | None = None,
        settings: CoreSettings | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._settings = settings or get_active_settings()

    def _empty_currency(self, records: Sequence[object]) -> str | None:
        """Configured currency for an empty collection; otherwise the engine infers it."""
        return None if records else self._settings.currency

    # -- Aggregation ---------------------------------------------------------

    def sales_metrics(
        self,
        projects: Iterable[Project],
        clients: Iterable[Client],
    ) -> SalesMetrics:
        projects = list(projects)
        return sales_metrics(
            projects, clients, self._clock.now(), currency=self._empty_currency(projects)
        )

    def project_budgets(
        self,
        projects: Iterable[Project],
        project_id: str,
    ) -> list[BudgetLine]:
        """Budget lines for one project.

        Raises:
            ProjectNotFoundError: if ``project_id`` is unknown.
        """
        project = find_project(projects, project_id)
        return project_budgets(
            project, self._clock.now(), self._settings.budget.categories
        )

    def financial_report(
        self,
        projects: Iterable[Project],
        report_type: ReportType,
        period: ReportPeriod,
        generated_by: str | None = None,
    ) -> FinancialReport:
        projects = list(projects)
        author = generated_by or self._settings.reporting.generated_by
        with LogContext.bind(actor_id=author):
            return financial_report(
                projects,
                report_type=report_type,
                period=period,
                as_of=self._clock.now(),
                generated_by=author,
                currency=self._empty_currency(projects),
            )

    # -- Scheduling ----------------------------------------------------------

    def upcoming_payments(
        self,
        projects: Iterable[Project],
        days: int | None = None,
    ) -> list[PaymentSchedule]:
        if days is None:
            days = self._settings.scheduling.payment_window_days
        return upcoming_payments(projects, self._clock.now(), days)

    def upcoming_meetings(
        self,
        projects: Iterable[Project],
        days: int | None = None,
    ) -> list[Meeting]:
        if days is None:
            days = self._settings.scheduling.meeting_window_days
        return upcoming_meetings(projects, self._clock.now(), days)

    def overdue_milestones(self, projects: Iterable[Project]) -> list[Milestone]:
        return overdue_milestones(projects, self._clock.now())

    def payment_alerts(
        self,
        projects: Iterable[Project],
        days: int | None = None,
    ) -> list[Alert]:
        if days is None:
            days = self._settings.scheduling.alert_window_days
        return payment_alerts(
            projects, self._clock.now(), days, self._settings.budget.categories
        )

    # -- Billing and pipeline ------------------------------------------------

    def generate_invoice(
        self,
        projects: Iterable[Project],
        clients: Iterable[Client],
        invoices: Sequence[Invoice],
        project_id: str,
        payment_id: str,
    ) -> Invoice:
        """Draft invoice for one scheduled payment using configured billing.

        Raises:
            ProjectNotFoundError, ClientNotFoundError, PaymentNotFoundError.
        """
        billing = self._settings.billing
        with LogContext.bind(project_id=project_id):
            return generate_invoice(
                projects,
                clients,
                invoices,
                project_id=project_id,
                payment_id=payment_id,
                as_of=self._clock.now(),
                tax_rate=billing.tax_rate,
                prefix=billing.invoice_number_prefix,
                width=billing.invoice_number_width,
                payment_terms=billing.payment_terms,
            )

    def pipeline_metrics(
        self,
        prospects: Iterable[Prospect],
        quotes: Iterable[Quote],
    ) -> PipelineMetrics:
        prospects = list(prospects)
        quotes = list(quotes)
        known = quotes + [q for p in prospects for q in p.quotes]
        return pipeline_metrics(prospects, quotes, currency=self._empty_currency(known))

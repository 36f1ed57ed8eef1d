"""
crm_services -- Package init and public API.

Responsibility:
    Clock- and settings-aware orchestration over the pure engines
    (crm_engines/). This is the only layer that reads wall-clock time or
    loads settings, and the only one that writes files (report export).

Architecture position:
    Services -- imperative shell over engines + kernel.

    Dependency direction:
        crm_services/ -> crm_engines/  (allowed)
        crm_services/ -> crm_config/   (allowed)
        crm_services/ -> crm_kernel/   (allowed)
        crm_engines/  -> crm_services/ (FORBIDDEN)
        crm_kernel/   -> crm_services/ (FORBIDDEN)
"""

from crm_kernel.logging_config import get_logger

logger = get_logger("services")

from crm_services.analytics_service import AnalyticsService
from crm_services.lead_intake_service import LeadIntakeService
from crm_services.quote_service import QuoteService
from crm_services.report_export import export_report_csv, export_report_xlsx

__all__ = [
    "AnalyticsService",
    "LeadIntakeService",
    "QuoteService",
    "export_report_csv",
    "export_report_xlsx",
]

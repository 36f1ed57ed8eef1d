"""
Financial report export to CSV and XLSX.

Both formats share one layout: a header row ``metric, value, currency``,
the report metadata rows, then one row per metric from ``data.as_rows()``.
Money values are rounded to the currency's decimal places on export only.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

from crm_kernel.domain.values import Money
from crm_kernel.logging_config import get_logger

from crm_engines.aggregation import FinancialReport

logger = get_logger("services.report_export")

HEADER = ("metric", "value", "currency")


def _cell(value: Any) -> tuple[Any, str]:
    """Split a report value into (value, currency code)."""
    if isinstance(value, Money):
        rounded = value.round()
        return rounded.amount, rounded.currency.code
    return value, ""


def report_rows(report: FinancialReport) -> list[tuple[str, Any, str]]:
    """Rows shared by every export format, header excluded."""
    rows: list[tuple[str, Any, str]] = [
        ("report_id", report.report_id, ""),
        ("report_type", report.report_type.value, ""),
        ("period_start", report.period.start.isoformat(), ""),
        ("period_end", report.period.end.isoformat(), ""),
        ("generated_at", report.generated_at.isoformat(), ""),
        ("generated_by", report.generated_by, ""),
        ("project_count", report.project_count, ""),
    ]
    for metric, value in report.data.as_rows():
        amount, currency = _cell(value)
        rows.append((metric, amount, currency))
    return rows


def export_report_csv(report: FinancialReport, path: Path | str) -> Path:
    """Write ``report`` as CSV to ``path`` and return the path."""
    path = Path(path)
    rows = report_rows(report)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(HEADER)
        for metric, value, currency in rows:
            writer.writerow((metric, str(value), currency))

    logger.info("report_exported", extra={
        "report_id": report.report_id,
        "format": "csv",
        "row_count": len(rows),
        "path": str(path),
    })
    return path


def export_report_xlsx(report: FinancialReport, path: Path | str) -> Path:
    """Write ``report`` as a single-sheet workbook to ``path`` and return the path."""
    try:
        import openpyxl
    except ImportError as e:
        raise ImportError("XLSX export requires openpyxl. Install with: pip install openpyxl") from e

    path = Path(path)
    rows = report_rows(report)

    wb = openpyxl.Workbook()
    try:
        sheet = wb.active
        sheet.title = report.report_type.value
        sheet.append(HEADER)
        for row in rows:
            sheet.append(row)
        wb.save(path)
    finally:
        wb.close()

    logger.info("report_exported", extra={
        "report_id": report.report_id,
        "format": "xlsx",
        "row_count": len(rows),
        "path": str(path),
    })
    return path

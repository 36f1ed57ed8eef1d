"""
Tests for financial report export (CSV and XLSX).
"""

import csv
from datetime import datetime, timezone
from decimal import Decimal

import openpyxl

from crm_engines.aggregation import ReportPeriod, ReportType, financial_report
from crm_kernel.domain import ExpenseCategory
from crm_services.report_export import HEADER, export_report_csv, export_report_xlsx, report_rows

from tests.factories import BASE, make_expense, make_project

PERIOD = ReportPeriod(
    datetime(2024, 1, 1, tzinfo=timezone.utc),
    datetime(2024, 12, 31, tzinfo=timezone.utc),
)


def build_report(report_type=ReportType.PROFIT_LOSS):
    project = make_project(
        total_value="1000",
        expenses=(make_expense("e1", "333.333", ExpenseCategory.TOOLS),),
    )
    return financial_report([project], report_type, PERIOD, as_of=BASE, generated_by="tester")


class TestReportRows:
    def test_metadata_then_metrics(self):
        report = build_report()
        rows = report_rows(report)
        names = [r[0] for r in rows]
        assert names[:7] == [
            "report_id", "report_type", "period_start", "period_end",
            "generated_at", "generated_by", "project_count",
        ]
        assert names[7:] == ["revenue", "expenses", "profit", "profit_margin"]

    def test_money_rounded_with_currency(self):
        rows = {r[0]: r for r in report_rows(build_report())}
        assert rows["expenses"][1:] == (Decimal("333.33"), "MXN")
        assert rows["profit"][1:] == (Decimal("666.67"), "MXN")
        assert rows["profit_margin"][2] == ""

    def test_expense_report_rows_per_category(self):
        names = [r[0] for r in report_rows(build_report(ReportType.EXPENSES))]
        assert "expenses.tools" in names
        assert "expenses.travel" in names


class TestCsvExport:
    def test_writes_header_and_rows(self, tmp_path):
        report = build_report()
        path = export_report_csv(report, tmp_path / "report.csv")

        with path.open(newline="", encoding="utf-8") as fh:
            rows = list(csv.reader(fh))
        assert tuple(rows[0]) == HEADER
        assert rows[1] == ["report_id", report.report_id, ""]
        assert ["revenue", "1000.00", "MXN"] in rows


class TestXlsxExport:
    def test_writes_workbook(self, tmp_path, captured_logs):
        report = build_report(ReportType.CASH_FLOW)
        path = export_report_xlsx(report, tmp_path / "report.xlsx")

        wb = openpyxl.load_workbook(path, read_only=True)
        try:
            sheet = wb.active
            assert sheet.title == "cash-flow"
            rows = [tuple(c for c in row) for row in sheet.iter_rows(values_only=True)]
        finally:
            wb.close()

        assert rows[0] == HEADER
        metrics = {r[0]: r[1] for r in rows[1:]}
        assert metrics["generated_by"] == "tester"
        assert Decimal(str(metrics["inflow"])) == Decimal("0")
        assert Decimal(str(metrics["net_flow"])) == Decimal("-333.33")
        assert any(
            r["message"] == "report_exported" and r["format"] == "xlsx"
            for r in captured_logs()
        )

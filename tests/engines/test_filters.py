"""Tests for project list filtering."""

from datetime import datetime, timezone

from crm_engines.aggregation import ReportPeriod
from crm_engines.filters import ProjectFilters, filter_projects
from crm_kernel.domain import ProjectPriority, ProjectStatus, ProjectType

from tests.factories import make_project


class TestFilterProjects:
    def setup_method(self):
        self.site = make_project(
            "site", "c1", type=ProjectType.WEBSITE, priority=ProjectPriority.HIGH,
            assigned_to=("ana", "luis"),
            created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )
        self.bot = make_project(
            "bot", "c2", type=ProjectType.CHATBOT, status=ProjectStatus.COMPLETED,
            assigned_to=("maria",),
            created_at=datetime(2024, 6, 1, tzinfo=timezone.utc),
        )
        self.projects = [self.site, self.bot]

    def ids(self, filters):
        return [p.project_id for p in filter_projects(self.projects, filters)]

    def test_empty_filters_match_everything(self):
        assert self.ids(ProjectFilters()) == ["site", "bot"]

    def test_status(self):
        assert self.ids(ProjectFilters(statuses=frozenset({ProjectStatus.COMPLETED}))) == ["bot"]

    def test_type_and_priority_combined(self):
        filters = ProjectFilters(
            types=frozenset({ProjectType.WEBSITE, ProjectType.CHATBOT}),
            priorities=frozenset({ProjectPriority.HIGH}),
        )
        assert self.ids(filters) == ["site"]

    def test_assigned_to_any_overlap(self):
        assert self.ids(ProjectFilters(assigned_to=frozenset({"luis", "pedro"}))) == ["site"]

    def test_client(self):
        assert self.ids(ProjectFilters(client_ids=frozenset({"c2"}))) == ["bot"]

    def test_date_range_on_created_at(self):
        period = ReportPeriod(
            datetime(2024, 5, 1, tzinfo=timezone.utc),
            datetime(2024, 12, 31, tzinfo=timezone.utc),
        )
        assert self.ids(ProjectFilters(date_range=period)) == ["bot"]

    def test_no_match(self):
        filters = ProjectFilters(
            statuses=frozenset({ProjectStatus.COMPLETED}),
            client_ids=frozenset({"c1"}),
        )
        assert self.ids(filters) == []

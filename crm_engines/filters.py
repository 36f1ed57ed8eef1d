"""Project list filtering.

Every criterion that is set must match; an empty criterion matches every
project. ``date_range`` is checked against ``created_at``, the same date the
financial reports filter on.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from crm_kernel.domain.projects import (
    Project,
    ProjectPriority,
    ProjectStatus,
    ProjectType,
)
from crm_kernel.logging_config import get_logger
from crm_engines.aggregation import ReportPeriod

logger = get_logger("engines.filters")


@dataclass(frozen=True)
class ProjectFilters:
    statuses: frozenset[ProjectStatus] = frozenset()
    types: frozenset[ProjectType] = frozenset()
    priorities: frozenset[ProjectPriority] = frozenset()
    assigned_to: frozenset[str] = frozenset()
    client_ids: frozenset[str] = frozenset()
    date_range: ReportPeriod | None = None

    def matches(self, project: Project) -> bool:
        if self.statuses and project.status not in self.statuses:
            return False
        if self.types and project.type not in self.types:
            return False
        if self.priorities and project.priority not in self.priorities:
            return False
        # Any shared assignee is enough
        if self.assigned_to and not self.assigned_to.intersection(project.assigned_to):
            return False
        if self.client_ids and project.client_id not in self.client_ids:
            return False
        if self.date_range is not None and not self.date_range.contains(project.created_at):
            return False
        return True


def filter_projects(
    projects: Iterable[Project],
    filters: ProjectFilters,
) -> list[Project]:
    """Projects matching ``filters``, in input order."""
    projects = list(projects)
    result = [p for p in projects if filters.matches(p)]
    logger.debug("projects_filtered", extra={
        "input_count": len(projects),
        "match_count": len(result),
    })
    return result

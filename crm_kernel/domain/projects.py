"""
Project records -- clients, projects and everything a project owns.

Every record is frozen; collections are tuples so a snapshot handed to an
engine cannot be mutated behind its back. Status fields have no transition
table: any value may follow any other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from crm_kernel.domain.values import Money


class ClientStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PROSPECT = "prospect"


class ProjectType(str, Enum):
    CHATBOT = "chatbot"
    APP = "app"
    WEBSITE = "website"
    CRM = "crm"
    AUTOMATION = "automation"
    OTHER = "other"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in-progress"
    TESTING = "testing"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"
    CANCELLED = "cancelled"


class ProjectPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class MeetingStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class MeetingType(str, Enum):
    REVIEW = "review"
    PLANNING = "planning"
    STATUS = "status"
    DEMO = "demo"
    KICKOFF = "kickoff"
    OTHER = "other"


class ExpenseCategory(str, Enum):
    """Fixed expense classification; also the budget category list."""

    LICENSE = "license"
    SUBSCRIPTION = "subscription"
    HOSTING = "hosting"
    TOOLS = "tools"
    TRAVEL = "travel"
    OTHER = "other"


class NoteType(str, Enum):
    UPDATE = "update"
    IMPROVEMENT = "improvement"
    ISSUE = "issue"
    MEETING = "meeting"
    GENERAL = "general"


@dataclass(frozen=True)
class Client:
    client_id: str
    company_name: str
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    industry: str = ""
    status: ClientStatus = ClientStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None
    notes: str = ""


@dataclass(frozen=True)
class Milestone:
    """
    A dated deliverable checkpoint.

    ``dependencies`` lists other milestone ids for display only; nothing
    checks them for cycles or ordering.
    """

    milestone_id: str
    title: str
    due_date: datetime
    status: MilestoneStatus = MilestoneStatus.PENDING
    progress: int = 0
    completed_date: datetime | None = None
    dependencies: frozenset[str] = frozenset()
    assigned_to: str = ""
    description: str = ""


@dataclass(frozen=True)
class ProjectNote:
    note_id: str
    content: str
    created_at: datetime
    created_by: str = ""
    kind: NoteType = NoteType.GENERAL
    is_important: bool = False


@dataclass(frozen=True)
class PaymentSchedule:
    payment_id: str
    description: str
    amount: Money
    due_date: datetime
    status: PaymentStatus = PaymentStatus.PENDING
    paid_date: datetime | None = None
    invoice_number: str | None = None
    payment_method: str | None = None
    notes: str = ""


@dataclass(frozen=True)
class Meeting:
    meeting_id: str
    title: str
    scheduled_date: datetime
    duration: int = 60  # minutes
    status: MeetingStatus = MeetingStatus.SCHEDULED
    kind: MeetingType = MeetingType.OTHER
    attendees: tuple[str, ...] = ()
    notes: str = ""


@dataclass(frozen=True)
class Expense:
    """
    A project cost. ``billable`` and ``approved`` are informational: every
    expense counts toward totals regardless of them.
    """

    expense_id: str
    description: str
    category: ExpenseCategory
    amount: Money
    date: datetime
    vendor: str = ""
    billable: bool = False
    approved: bool = False
    approved_by: str | None = None


@dataclass(frozen=True)
class Project:
    """A client engagement with its schedule, costs and commercial value."""

    project_id: str
    client_id: str
    name: str
    budget: Money
    total_value: Money
    created_at: datetime
    updated_at: datetime
    description: str = ""
    type: ProjectType = ProjectType.OTHER
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: ProjectPriority = ProjectPriority.MEDIUM
    start_date: datetime | None = None
    end_date: datetime | None = None
    estimated_hours: int = 0
    actual_hours: int = 0
    assigned_to: tuple[str, ...] = ()
    project_manager: str = ""
    milestones: tuple[Milestone, ...] = field(default_factory=tuple)
    notes: tuple[ProjectNote, ...] = field(default_factory=tuple)
    payments: tuple[PaymentSchedule, ...] = field(default_factory=tuple)
    meetings: tuple[Meeting, ...] = field(default_factory=tuple)
    expenses: tuple[Expense, ...] = field(default_factory=tuple)

    @property
    def currency(self):
        return self.total_value.currency

    def total_expenses(self) -> Money:
        """Sum of every expense on the project, in the project's currency."""
        return Money.total((e.amount for e in self.expenses), self.currency)

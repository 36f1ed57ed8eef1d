"""
Tests for scheduling queries and payment alerts.

Covers:
- Upcoming payment and meeting windows (no lower bound)
- Overdue milestones by date, regardless of stored status
- Sorting by date
- Alert list: overdue, upcoming, budget exceeded
"""

from crm_engines.scheduling import (
    AlertPriority,
    AlertType,
    overdue_milestones,
    payment_alerts,
    upcoming_meetings,
    upcoming_payments,
)
from crm_kernel.domain import (
    ExpenseCategory,
    MeetingStatus,
    MilestoneStatus,
    PaymentStatus,
)

from tests.factories import (
    BASE,
    make_expense,
    make_meeting,
    make_milestone,
    make_payment,
    make_project,
)


class TestUpcomingPayments:
    def test_pending_within_window_sorted(self):
        project = make_project(payments=(
            make_payment("late", due_in_days=5),
            make_payment("soon", due_in_days=1),
            make_payment("far", due_in_days=30),
        ))
        result = upcoming_payments([project], BASE, days=7)
        assert [p.payment_id for p in result] == ["soon", "late"]

    def test_paid_payment_due_tomorrow_excluded(self):
        project = make_project(payments=(
            make_payment("paid", due_in_days=1, status=PaymentStatus.PAID, paid_date=BASE),
        ))
        assert upcoming_payments([project], BASE, days=7) == []

    def test_past_due_pending_included(self):
        project = make_project(payments=(make_payment("old", due_in_days=-10),))
        assert [p.payment_id for p in upcoming_payments([project], BASE)] == ["old"]

    def test_window_end_inclusive(self):
        project = make_project(payments=(make_payment("edge", due_in_days=7),))
        assert len(upcoming_payments([project], BASE, days=7)) == 1

    def test_spans_projects(self):
        a = make_project("a", payments=(make_payment("p2", due_in_days=3),))
        b = make_project("b", payments=(make_payment("p1", due_in_days=2),))
        assert [p.payment_id for p in upcoming_payments([a, b], BASE)] == ["p1", "p2"]

    def test_stored_status_not_changed(self):
        payment = make_payment("old", due_in_days=-10)
        upcoming_payments([make_project(payments=(payment,))], BASE)
        assert payment.status == PaymentStatus.PENDING


class TestUpcomingMeetings:
    def test_only_scheduled_in_window(self):
        project = make_project(meetings=(
            make_meeting("a", in_days=2),
            make_meeting("b", in_days=1, status=MeetingStatus.CANCELLED),
            make_meeting("c", in_days=10),
            make_meeting("d", in_days=0),
        ))
        result = upcoming_meetings([project], BASE, days=7)
        assert [m.meeting_id for m in result] == ["d", "a"]


class TestOverdueMilestones:
    def test_overdue_by_date_without_stored_overdue(self):
        project = make_project(milestones=(
            make_milestone("pending", due_in_days=-2),
            make_milestone("progress", due_in_days=-5, status=MilestoneStatus.IN_PROGRESS),
            make_milestone("future", due_in_days=3),
        ))
        result = overdue_milestones([project], BASE)
        assert [m.milestone_id for m in result] == ["progress", "pending"]

    def test_completed_never_overdue(self):
        project = make_project(milestones=(
            make_milestone("done", due_in_days=-2, status=MilestoneStatus.COMPLETED,
                           progress=100, completed_date=BASE),
        ))
        assert overdue_milestones([project], BASE) == []

    def test_due_now_is_not_overdue(self):
        project = make_project(milestones=(make_milestone("now", due_in_days=0),))
        assert overdue_milestones([project], BASE) == []

    def test_empty(self):
        assert overdue_milestones([], BASE) == []


class TestPaymentAlerts:
    def test_overdue_then_upcoming(self):
        project = make_project(payments=(
            make_payment("up", due_in_days=2),
            make_payment("over", due_in_days=-1),
        ))
        alerts = payment_alerts([project], BASE, days=7)
        assert [(a.kind, a.related_id) for a in alerts] == [
            (AlertType.OVERDUE, "over"),
            (AlertType.UPCOMING, "up"),
        ]
        assert alerts[0].priority == AlertPriority.HIGH
        assert alerts[1].priority == AlertPriority.MEDIUM
        assert all(a.created_at == BASE for a in alerts)

    def test_budget_exceeded(self):
        # 600 / 6 categories = 100 allocated to hosting
        project = make_project(budget="600", expenses=(
            make_expense("e1", amount="150", category=ExpenseCategory.HOSTING),
        ))
        alerts = payment_alerts([project], BASE)
        assert len(alerts) == 1
        assert alerts[0].kind == AlertType.BUDGET_EXCEEDED
        assert alerts[0].related_id == "pr1-hosting"
        assert alerts[0].related_type == "budget"

    def test_budget_uses_given_categories(self):
        # 600 / 2 categories = 300 allocated to each
        project = make_project(budget="600", expenses=(
            make_expense("e1", amount="150", category=ExpenseCategory.HOSTING),
            make_expense("e2", amount="400", category=ExpenseCategory.TOOLS),
        ))
        alerts = payment_alerts(
            [project], BASE,
            categories=(ExpenseCategory.HOSTING, ExpenseCategory.TOOLS),
        )
        assert [a.related_id for a in alerts] == ["pr1-tools"]

    def test_no_alerts_for_paid_or_distant_payments(self):
        project = make_project(budget="600", payments=(
            make_payment("paid", due_in_days=-1, status=PaymentStatus.PAID, paid_date=BASE),
            make_payment("far", due_in_days=40),
        ))
        assert payment_alerts([project], BASE, days=7) == []

    def test_accepts_generator(self):
        projects = (p for p in [make_project(payments=(make_payment("x", due_in_days=-1),))])
        assert len(payment_alerts(projects, BASE)) == 1

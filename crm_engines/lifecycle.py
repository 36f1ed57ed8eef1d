"""
Module: crm_engines.lifecycle
Responsibility:
    Status changes for quotes, milestones, payments, meetings and projects,
    and the derived (display) status of a quote.

Architecture position:
    Engines -- pure calculation layer, zero I/O. ``as_of`` is always passed
    in by the caller.

Invariants enforced:
    - No transition table: any status may be set from any other.
    - Two-layer quote status. ``effective_quote_status`` reports ``Expired``
      for a ``Sent`` quote past ``valid_until`` but never writes it back; the
      stored status keeps saying ``Sent``.
    - Inputs are never mutated; every change returns a new record.
    - Quote history is append-only.

Side effects applied on change:
    Milestone -> completed (no completed_date yet): completed_date = as_of,
                 progress = 100.
    Milestone -> anything else: completed_date cleared; in-progress sets
                 progress to 50 unless it was already in progress; pending
                 and overdue reset progress to 0.
    Payment   -> paid: paid_date = as_of if unset. Any other status clears
                 paid_date.

Failure modes:
    - MilestoneNotFoundError / PaymentNotFoundError / MeetingNotFoundError
      from the project-level helpers when the id is not on the project.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from crm_kernel.domain.projects import (
    Meeting,
    MeetingStatus,
    Milestone,
    MilestoneStatus,
    PaymentSchedule,
    PaymentStatus,
    Project,
    ProjectStatus,
)
from crm_kernel.domain.quotes import Quote, QuoteHistoryEntry, QuoteStatus
from crm_kernel.exceptions import (
    MeetingNotFoundError,
    MilestoneNotFoundError,
    PaymentNotFoundError,
)
from crm_kernel.logging_config import get_logger

logger = get_logger("engines.lifecycle")

IN_PROGRESS_DEFAULT = 50


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------


def is_quote_expired(quote: Quote, as_of: datetime) -> bool:
    """True when a sent quote is past its validity date."""
    return quote.status == QuoteStatus.SENT and as_of > quote.valid_until


def effective_quote_status(quote: Quote, as_of: datetime) -> QuoteStatus:
    """Status to display: ``Expired`` for a lapsed sent quote, else the stored one."""
    if is_quote_expired(quote, as_of):
        return QuoteStatus.EXPIRED
    return quote.status


def change_quote_status(
    quote: Quote,
    status: QuoteStatus,
    changed_by: str,
    as_of: datetime,
    entry_id: str | None = None,
) -> Quote:
    """
    Set the stored status and append a history entry.

    Args:
        quote: Quote to change.
        status: New stored status.
        changed_by: User recorded on the history entry.
        as_of: Time of the change; becomes ``updated_at``.
        entry_id: History entry id. Defaults to a sequence id derived from
            the quote id and history length.
    """
    status = QuoteStatus(status)
    entry = QuoteHistoryEntry(
        entry_id=entry_id or f"{quote.quote_id}-h{len(quote.history) + 1}",
        at=as_of,
        action=f"Status changed to {status.value}",
        user=changed_by,
        details=f"Previous status: {quote.status.value}",
    )
    logger.info("quote_status_changed", extra={
        "quote_id": quote.quote_id,
        "quote_number": quote.number,
        "from_status": quote.status.value,
        "to_status": status.value,
        "changed_by": changed_by,
    })
    return replace(
        quote,
        status=status,
        updated_at=as_of,
        history=quote.history + (entry,),
    )


# ---------------------------------------------------------------------------
# Milestones, payments, meetings
# ---------------------------------------------------------------------------


def change_milestone_status(
    milestone: Milestone,
    status: MilestoneStatus,
    as_of: datetime,
) -> Milestone:
    """Set a milestone's status, applying the completion/progress side effects."""
    status = MilestoneStatus(status)

    if status == MilestoneStatus.COMPLETED:
        if milestone.completed_date is None:
            return replace(
                milestone, status=status, completed_date=as_of, progress=100
            )
        return replace(milestone, status=status)

    if status == MilestoneStatus.IN_PROGRESS:
        progress = (
            milestone.progress
            if milestone.status == MilestoneStatus.IN_PROGRESS
            else IN_PROGRESS_DEFAULT
        )
    else:
        progress = 0

    return replace(milestone, status=status, completed_date=None, progress=progress)


def change_payment_status(
    payment: PaymentSchedule,
    status: PaymentStatus,
    as_of: datetime,
) -> PaymentSchedule:
    """Set a payment's status; ``paid`` stamps ``paid_date``, others clear it."""
    status = PaymentStatus(status)
    if status == PaymentStatus.PAID:
        return replace(payment, status=status, paid_date=payment.paid_date or as_of)
    return replace(payment, status=status, paid_date=None)


def change_meeting_status(meeting: Meeting, status: MeetingStatus) -> Meeting:
    return replace(meeting, status=MeetingStatus(status))


def change_project_status(
    project: Project,
    status: ProjectStatus,
    as_of: datetime,
) -> Project:
    return replace(project, status=ProjectStatus(status), updated_at=as_of)


# ---------------------------------------------------------------------------
# Project-level helpers
# ---------------------------------------------------------------------------


def update_milestone_status(
    project: Project,
    milestone_id: str,
    status: MilestoneStatus,
    as_of: datetime,
) -> Project:
    """
    Change one milestone on ``project``.

    Raises:
        MilestoneNotFoundError: if ``milestone_id`` is not on the project.
    """
    if not any(m.milestone_id == milestone_id for m in project.milestones):
        raise MilestoneNotFoundError(milestone_id, project.project_id)
    milestones = tuple(
        change_milestone_status(m, status, as_of) if m.milestone_id == milestone_id else m
        for m in project.milestones
    )
    return replace(project, milestones=milestones, updated_at=as_of)


def update_payment_status(
    project: Project,
    payment_id: str,
    status: PaymentStatus,
    as_of: datetime,
) -> Project:
    """
    Change one scheduled payment on ``project``.

    Raises:
        PaymentNotFoundError: if ``payment_id`` is not on the project.
    """
    if not any(p.payment_id == payment_id for p in project.payments):
        raise PaymentNotFoundError(payment_id, project.project_id)
    payments = tuple(
        change_payment_status(p, status, as_of) if p.payment_id == payment_id else p
        for p in project.payments
    )
    return replace(project, payments=payments, updated_at=as_of)


def update_meeting_status(
    project: Project,
    meeting_id: str,
    status: MeetingStatus,
    as_of: datetime,
) -> Project:
    """
    Change one meeting on ``project``.

    Raises:
        MeetingNotFoundError: if ``meeting_id`` is not on the project.
    """
    if not any(m.meeting_id == meeting_id for m in project.meetings):
        raise MeetingNotFoundError(meeting_id, project.project_id)
    meetings = tuple(
        change_meeting_status(m, status) if m.meeting_id == meeting_id else m
        for m in project.meetings
    )
    return replace(project, meetings=meetings, updated_at=as_of)

"""
Typed Exception Hierarchy for the CRM finance core.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers embedding the core (a web handler, a batch job, a UI adapter) need to
tell "that project does not exist" apart from a programming error without
parsing message strings. Every error therefore has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (ids, field names) instead of prose

Example:
    try:
        invoice = generate_invoice(projects, clients, invoices,
                                   project_id=pid, payment_id=pay_id,
                                   as_of=clock.now())
    except PaymentNotFoundError as e:
        return {"error": e.code, "payment_id": e.payment_id}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CrmKernelError (base)
    |
    +-- NotFoundError
    |   +-- ProjectNotFoundError
    |   +-- ClientNotFoundError
    |   +-- ProspectNotFoundError
    |   +-- PaymentNotFoundError
    |   +-- MilestoneNotFoundError
    |   +-- MeetingNotFoundError
    |
    +-- IngestionError
    |   +-- LeadValidationError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                   | When Raised
----------------|------------------------|---------------------------------------
Lookup          | PROJECT_NOT_FOUND      | Project id not in supplied collection
                | CLIENT_NOT_FOUND       | Client id not in supplied collection
                | PROSPECT_NOT_FOUND     | Prospect id not in supplied collection
                | PAYMENT_NOT_FOUND      | Payment id not in the project schedule
                | MILESTONE_NOT_FOUND    | Milestone id not in the project
                | MEETING_NOT_FOUND      | Meeting id not in the project
----------------|------------------------|---------------------------------------
Ingestion       | LEAD_VALIDATION_FAILED | Inbound lead payload rejected
----------------|------------------------|---------------------------------------
Configuration   | CONFIGURATION_INVALID  | Settings file missing keys or malformed

Arithmetic has no exception here. Negative quantities or
discounts larger than their base are accepted and flow into negative totals;
value objects raise plain ValueError only for unusable input (bad currency
code, mixed currencies).
"""


class CrmKernelError(Exception):
    """
    Base exception for all CRM core errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CRM_KERNEL_ERROR"


# Lookup exceptions


class NotFoundError(CrmKernelError):
    """Base exception for references to records absent from the snapshot."""

    code: str = "NOT_FOUND"


class ProjectNotFoundError(NotFoundError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class ClientNotFoundError(NotFoundError):
    """Client with given ID was not found."""

    code: str = "CLIENT_NOT_FOUND"

    def __init__(self, client_id: str):
        self.client_id = client_id
        super().__init__(f"Client not found: {client_id}")


class ProspectNotFoundError(NotFoundError):
    """Prospect with given ID was not found."""

    code: str = "PROSPECT_NOT_FOUND"

    def __init__(self, prospect_id: str):
        self.prospect_id = prospect_id
        super().__init__(f"Prospect not found: {prospect_id}")


class PaymentNotFoundError(NotFoundError):
    """Scheduled payment was not found in the project's schedule."""

    code: str = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: str, project_id: str | None = None):
        self.payment_id = payment_id
        self.project_id = project_id
        super().__init__(
            f"Payment not found: {payment_id}"
            + (f" (project {project_id})" if project_id else "")
        )


class MilestoneNotFoundError(NotFoundError):
    """Milestone was not found in the project."""

    code: str = "MILESTONE_NOT_FOUND"

    def __init__(self, milestone_id: str, project_id: str | None = None):
        self.milestone_id = milestone_id
        self.project_id = project_id
        super().__init__(f"Milestone not found: {milestone_id}")


class MeetingNotFoundError(NotFoundError):
    """Meeting was not found in the project."""

    code: str = "MEETING_NOT_FOUND"

    def __init__(self, meeting_id: str, project_id: str | None = None):
        self.meeting_id = meeting_id
        self.project_id = project_id
        super().__init__(f"Meeting not found: {meeting_id}")


# Ingestion exceptions


class IngestionError(CrmKernelError):
    """Base exception for inbound data errors."""

    code: str = "INGESTION_ERROR"


class LeadValidationError(IngestionError):
    """Inbound lead payload failed validation."""

    code: str = "LEAD_VALIDATION_FAILED"

    def __init__(self, errors: list):
        self.errors = errors
        fields = ", ".join(sorted({e.field for e in errors if e.field}))
        super().__init__(f"Lead rejected: {len(errors)} error(s) [{fields}]")


# Configuration exceptions


class ConfigurationError(CrmKernelError):
    """Settings file is missing required keys or has invalid values."""

    code: str = "CONFIGURATION_INVALID"

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)

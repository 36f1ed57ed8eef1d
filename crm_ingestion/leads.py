"""
Lead payload validation and prospect creation.

A lead payload is a flat mapping with the keys in ``LEAD_FIELDS``. Values
arrive as strings from the integration; ``contact_date`` may also be a
datetime already.

Architecture: crm_ingestion. ZERO I/O. Imports only from crm_kernel.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from crm_kernel.domain.dtos import ValidationError
from crm_kernel.domain.prospects import Platform, Prospect, ProspectStatus
from crm_kernel.exceptions import LeadValidationError
from crm_kernel.logging_config import get_logger

logger = get_logger("ingestion.leads")

LEAD_FIELDS = (
    "name",
    "phone",
    "email",
    "platform",
    "service_of_interest",
    "contact_date",
)

_REQUIRED_FIELDS = ("name", "phone", "email")


def _text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    return str(value).strip()


def parse_contact_date(value: Any, tz=None) -> datetime:
    """
    Parse an ISO 8601 date or datetime.

    Naive results take ``tz`` when one is given.

    Raises:
        ValueError: if ``value`` is not a datetime or ISO 8601 string.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip())
    else:
        raise ValueError(f"Unsupported contact date: {value!r}")
    if parsed.tzinfo is None and tz is not None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_platform(value: Any, default: Platform = Platform.UNKNOWN) -> Platform:
    """Match a platform name case-insensitively; anything else is ``default``."""
    text = "" if value is None else str(value).strip().lower()
    for platform in Platform:
        if platform.value.lower() == text:
            return platform
    return default


def validate_lead(payload: Mapping[str, Any]) -> list[ValidationError]:
    """Validate a lead payload. Returns an empty list when it is acceptable."""
    errors: list[ValidationError] = []
    for key in _REQUIRED_FIELDS:
        if not _text(payload, key):
            errors.append(ValidationError(
                code="MISSING_REQUIRED_FIELD",
                message=f"Lead is missing required field: {key}",
                field=key,
            ))

    raw_date = payload.get("contact_date")
    if raw_date not in (None, ""):
        try:
            parse_contact_date(raw_date)
        except ValueError:
            errors.append(ValidationError(
                code="INVALID_DATE",
                message=f"Unparseable contact date: {raw_date!r}",
                field="contact_date",
            ))
    return errors


def prospect_from_lead(
    payload: Mapping[str, Any],
    as_of: datetime,
    owner: str = "1",
    default_platform: Platform | str = Platform.UNKNOWN,
    id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> Prospect:
    """
    Create a New prospect from a lead payload.

    Args:
        payload: Lead mapping with the ``LEAD_FIELDS`` keys.
        as_of: Intake time. Used as ``created_at`` and as the contact date
            when the payload carries none.
        owner: User the prospect is assigned to.
        default_platform: Platform for leads with a missing or unknown one.
        id_factory: Produces the prospect id.

    Raises:
        LeadValidationError: if ``validate_lead`` reports any error.
    """
    errors = validate_lead(payload)
    if errors:
        logger.warning("lead_rejected", extra={
            "error_count": len(errors),
            "fields": [e.field for e in errors],
        })
        raise LeadValidationError(errors)

    raw_date = payload.get("contact_date")
    contact_date = (
        parse_contact_date(raw_date, as_of.tzinfo)
        if raw_date not in (None, "")
        else as_of
    )
    platform = parse_platform(payload.get("platform"), Platform(default_platform))

    prospect = Prospect(
        prospect_id=id_factory(),
        name=_text(payload, "name"),
        phone=_text(payload, "phone"),
        email=_text(payload, "email"),
        platform=platform,
        status=ProspectStatus.NEW,
        contact_date=contact_date,
        owner=owner,
        service_of_interest=_text(payload, "service_of_interest"),
        source="webhook",
        created_at=as_of,
        internal_notes=f"Received via webhook ({platform.value})",
    )
    logger.info("lead_accepted", extra={
        "prospect_id": prospect.prospect_id,
        "platform": platform.value,
    })
    return prospect

"""
crm_ingestion -- Inbound lead intake.

Validates lead payloads posted by the external lead-capture integration and
turns them into New prospects. This is the only write path that originates
outside the embedding application.

Architecture:
    crm_ingestion/ is a top-level package. Nothing in crm_kernel/ or
    crm_engines/ imports from ingestion.
"""

from crm_ingestion.leads import (
    LEAD_FIELDS,
    parse_contact_date,
    parse_platform,
    prospect_from_lead,
    validate_lead,
)

__all__ = [
    "LEAD_FIELDS",
    "parse_contact_date",
    "parse_platform",
    "prospect_from_lead",
    "validate_lead",
]

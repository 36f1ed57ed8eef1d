"""Prospect records -- leads and the quotes issued to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from crm_kernel.domain.quotes import Quote


class Platform(str, Enum):
    """Channel a lead arrived through."""

    WHATSAPP = "WhatsApp"
    INSTAGRAM = "Instagram"
    FACEBOOK = "Facebook"
    UNKNOWN = "unknown"


class ProspectStatus(str, Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    FOLLOWING_UP = "Following up"
    QUOTED = "Quoted"
    CLOSED_WON = "Closed won"
    LOST = "Lost"


@dataclass(frozen=True)
class FollowUp:
    follow_up_id: str
    at: datetime
    note: str
    user: str = ""


@dataclass(frozen=True)
class Prospect:
    """
    A lead. ``quotes`` holds the same Quote entities that may also sit in
    the flat quote collection.
    """

    prospect_id: str
    name: str
    phone: str
    email: str
    platform: Platform
    status: ProspectStatus
    contact_date: datetime
    owner: str = ""
    service_of_interest: str = ""
    source: str = ""
    created_at: datetime | None = None
    last_follow_up: datetime | None = None
    follow_ups: tuple[FollowUp, ...] = field(default_factory=tuple)
    quotes: tuple[Quote, ...] = field(default_factory=tuple)
    internal_notes: str = ""

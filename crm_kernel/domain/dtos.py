"""Small shared DTOs used across kernel consumers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationError:
    """
    One validation failure on an inbound record.

    ``code`` is machine readable, ``field`` names the offending key when
    there is one.
    """

    code: str
    message: str
    field: str | None = None

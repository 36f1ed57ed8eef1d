"""
Lead intake service: payload -> validate -> Prospect.

Reads the clock and the intake settings (default owner and platform), then
delegates to crm_ingestion.leads. Each lead is handled inside a LogContext
carrying a correlation id so the accept/reject records can be tied together.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from crm_config import CoreSettings, get_active_settings
from crm_kernel.domain.clock import Clock, SystemClock
from crm_kernel.domain.dtos import ValidationError
from crm_kernel.domain.prospects import Prospect
from crm_kernel.exceptions import LeadValidationError
from crm_kernel.logging_config import LogContext, get_logger

from crm_ingestion.leads import prospect_from_lead, validate_lead

logger = get_logger("services.lead_intake")


def _new_id() -> str:
    return str(uuid.uuid4())


class LeadIntakeService:
    """Turns inbound lead payloads into New prospects.

    Contract:
        - ``receive()`` returns a Prospect or raises LeadValidationError.
        - ``receive_many()`` accepts what it can and reports the rest.

    Non-goals:
        - Does NOT de-duplicate leads against existing prospects.
        - Does NOT persist prospects (caller decides).
    """

    def __init__(
        self,
        clock: Clock | None = None,
        settings: CoreSettings | None = None,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._clock = clock or SystemClock()
        self._settings = settings or get_active_settings()
        self._new_id = id_factory

    def validate(self, payload: Mapping[str, Any]) -> list[ValidationError]:
        return validate_lead(payload)

    def receive(
        self,
        payload: Mapping[str, Any],
        correlation_id: str | None = None,
    ) -> Prospect:
        """Create a prospect owned by the configured default owner.

        Raises:
            LeadValidationError: if the payload fails validation.
        """
        intake = self._settings.intake
        with LogContext.bind(correlation_id=correlation_id or self._new_id()):
            return prospect_from_lead(
                payload,
                self._clock.now(),
                owner=intake.default_owner,
                default_platform=intake.default_platform,
                id_factory=self._new_id,
            )

    def receive_many(
        self,
        payloads: Iterable[Mapping[str, Any]],
    ) -> tuple[list[Prospect], list[tuple[int, list[ValidationError]]]]:
        """Process a batch of leads.

        Returns:
            (accepted prospects, [(payload index, errors)] for rejected ones).
        """
        accepted: list[Prospect] = []
        rejected: list[tuple[int, list[ValidationError]]] = []
        for index, payload in enumerate(payloads):
            try:
                accepted.append(self.receive(payload))
            except LeadValidationError as exc:
                rejected.append((index, list(exc.errors)))

        logger.info("lead_batch_processed", extra={
            "accepted": len(accepted),
            "rejected": len(rejected),
        })
        return accepted, rejected

"""Tests for the structured logging system (crm_kernel/logging_config.py)."""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from crm_engines.tracer import compute_input_fingerprint, traced_engine
from crm_kernel.domain import QuoteStatus, ValidationError
from crm_kernel.exceptions import LeadValidationError, ProjectNotFoundError
from crm_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Give each test its own handler, then restore the suite configuration."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestStructuredFormatter:
    def test_envelope(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        (record,) = _parse_all_logs(stream)
        assert record["message"] == "hello"
        assert record["level"] == "INFO"
        assert record["logger"] == "crm_kernel.test"
        assert "ts" in record

    def test_extra_values_encoded(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("typed", extra={
            "amount": Decimal("10.50"),
            "status": QuoteStatus.SENT,
            "at": datetime(2024, 5, 15, tzinfo=timezone.utc),
        })

        (record,) = _parse_all_logs(stream)
        assert record["amount"] == "10.50"
        assert record["status"] == "Sent"
        assert record["at"] == "2024-05-15T00:00:00+00:00"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ProjectNotFoundError("pr-9")
        except ProjectNotFoundError:
            get_logger("test").exception("failed")

        (record,) = _parse_all_logs(stream)
        assert record["exc_type"] == "ProjectNotFoundError"
        assert record["exc_code"] == "PROJECT_NOT_FOUND"
        assert record["exc_project_id"] == "pr-9"
        assert "traceback" in record

    def test_structured_exception_attributes_encoded(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        error = ValidationError(code="MISSING_REQUIRED_FIELD", message="Lead is missing name", field="name")
        try:
            raise LeadValidationError([error])
        except LeadValidationError:
            get_logger("test").exception("rejected")

        (record,) = _parse_all_logs(stream)
        assert record["exc_code"] == "LEAD_VALIDATION_FAILED"
        assert record["exc_errors"] == [
            {"code": "MISSING_REQUIRED_FIELD", "message": "Lead is missing name", "field": "name"}
        ]

    def test_configure_is_idempotent(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=handler)
        get_logger("test").info("once")
        assert len(_parse_all_logs(stream)) == 1


class TestLogContext:
    def test_context_fields_added(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="c-1", actor_id="maria")
        get_logger("test").info("with context")

        (record,) = _parse_all_logs(stream)
        assert record["correlation_id"] == "c-1"
        assert record["actor_id"] == "maria"

    def test_bind_restores_previous_values(self):
        LogContext.set(quote_id="outer")
        with LogContext.bind(quote_id="inner", project_id="pr1"):
            assert LogContext.get_all() == {"quote_id": "inner", "project_id": "pr1"}
        assert LogContext.get_all() == {"quote_id": "outer"}

    def test_clear(self):
        LogContext.set(correlation_id="c-2", project_id="pr1")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(invoice_id="i-1")
        with pytest.raises(TypeError):
            with LogContext.bind(invoice_id="i-1"):
                pass

    def test_bind_skips_none(self):
        LogContext.set(actor_id="maria")
        with LogContext.bind(actor_id=None, quote_id="q1"):
            assert LogContext.get_all() == {"actor_id": "maria", "quote_id": "q1"}
        assert LogContext.get_all() == {"actor_id": "maria"}


class TestEngineTracer:
    def test_fingerprint_is_deterministic(self):
        a = compute_input_fingerprint(("tax_rate", "kind"), {"tax_rate": Decimal("16"), "kind": None})
        b = compute_input_fingerprint(("tax_rate", "kind"), {"kind": None, "tax_rate": Decimal("16")})
        c = compute_input_fingerprint(("tax_rate", "kind"), {"tax_rate": Decimal("8")})
        assert a == b
        assert a != c
        assert len(a) == 16

    def test_trace_record_emitted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)

        @traced_engine("demo", "2.1", fingerprint_fields=("rate",))
        def double(value, rate=Decimal("1")):
            return value * 2

        assert double(3, rate=Decimal("5")) == 6
        (record,) = _parse_all_logs(stream)
        assert record["message"] == "CRM_ENGINE_TRACE"
        assert record["engine_name"] == "demo"
        assert record["engine_version"] == "2.1"
        assert record["input_fingerprint"] == compute_input_fingerprint(
            ("rate",), {"rate": Decimal("5")}
        )

"""
Settings Loader (``crm_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the typed
``crm_config.schema`` dataclasses. Runtime callers go through
``crm_config.get_active_settings()`` instead of calling this directly.

Invariants enforced
-------------------
* Required keys (``settings_id``, ``version``, ``currency``) raise
  ``ConfigurationError`` when missing; optional sections fall back to the
  schema defaults.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  settings for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid keys  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from crm_config.schema import (
    BillingSettings,
    BudgetSettings,
    CoreSettings,
    IntakeSettings,
    PricingSettings,
    ReportingSettings,
    SchedulingSettings,
)
from crm_kernel.domain.currency import CurrencyRegistry
from crm_kernel.domain.projects import ExpenseCategory
from crm_kernel.domain.prospects import Platform
from crm_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, key: str) -> Decimal:
    """Parse a Decimal from YAML. Floats go through str() to keep their literal."""
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ConfigurationError(f"Invalid decimal for {key}: {value!r}", key=key) from e


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data or data[key] is None:
        raise ConfigurationError(f"Missing required setting: {key}", key=key)
    return data[key]


def parse_pricing(data: dict[str, Any]) -> PricingSettings:
    defaults = PricingSettings()
    return PricingSettings(
        default_tax_rate=parse_decimal(
            data.get("default_tax_rate", defaults.default_tax_rate),
            "pricing.default_tax_rate",
        ),
        quote_number_prefix=str(data.get("quote_number_prefix", defaults.quote_number_prefix)),
        quote_number_width=int(data.get("quote_number_width", defaults.quote_number_width)),
        quote_validity_days=int(data.get("quote_validity_days", defaults.quote_validity_days)),
    )


def parse_billing(data: dict[str, Any]) -> BillingSettings:
    defaults = BillingSettings()
    return BillingSettings(
        invoice_number_prefix=str(data.get("invoice_number_prefix", defaults.invoice_number_prefix)),
        invoice_number_width=int(data.get("invoice_number_width", defaults.invoice_number_width)),
        tax_rate=parse_decimal(data.get("tax_rate", defaults.tax_rate), "billing.tax_rate"),
        payment_terms=str(data.get("payment_terms", defaults.payment_terms)),
    )


def parse_scheduling(data: dict[str, Any]) -> SchedulingSettings:
    defaults = SchedulingSettings()
    return SchedulingSettings(
        payment_window_days=int(data.get("payment_window_days", defaults.payment_window_days)),
        meeting_window_days=int(data.get("meeting_window_days", defaults.meeting_window_days)),
        alert_window_days=int(data.get("alert_window_days", defaults.alert_window_days)),
    )


def parse_budget(data: dict[str, Any]) -> BudgetSettings:
    """
    Parse the budget category list.

    Raises:
        ConfigurationError: on an unknown or empty category list.
    """
    raw = data.get("categories")
    if raw is None:
        return BudgetSettings()
    if not raw:
        raise ConfigurationError("budget.categories must not be empty", key="budget.categories")
    try:
        categories = tuple(ExpenseCategory(c) for c in raw)
    except ValueError as e:
        raise ConfigurationError(str(e), key="budget.categories") from e
    return BudgetSettings(categories=categories)


def parse_intake(data: dict[str, Any]) -> IntakeSettings:
    """
    Parse lead intake defaults.

    Raises:
        ConfigurationError: on an unknown default platform.
    """
    defaults = IntakeSettings()
    platform = str(data.get("default_platform", defaults.default_platform))
    try:
        Platform(platform)
    except ValueError as e:
        raise ConfigurationError(str(e), key="intake.default_platform") from e
    return IntakeSettings(
        default_owner=str(data.get("default_owner", defaults.default_owner)),
        default_platform=platform,
    )


def parse_settings(data: dict[str, Any], checksum: str = "") -> CoreSettings:
    """
    Parse a full ``CoreSettings`` from a dict.

    Raises:
        ConfigurationError: if a required key is missing or the currency
            is not supported.
    """
    currency = str(_require(data, "currency")).upper()
    if not CurrencyRegistry.is_valid(currency):
        raise ConfigurationError(f"Unsupported currency: {currency}", key="currency")

    reporting = data.get("reporting") or {}

    return CoreSettings(
        settings_id=str(_require(data, "settings_id")),
        version=int(_require(data, "version")),
        currency=currency,
        pricing=parse_pricing(data.get("pricing") or {}),
        billing=parse_billing(data.get("billing") or {}),
        scheduling=parse_scheduling(data.get("scheduling") or {}),
        budget=parse_budget(data.get("budget") or {}),
        reporting=ReportingSettings(
            generated_by=str(reporting.get("generated_by", ReportingSettings().generated_by)),
        ),
        intake=parse_intake(data.get("intake") or {}),
        checksum=checksum,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the raw settings mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def load_settings(path: Path) -> CoreSettings:
    """Load and parse a settings file."""
    data = load_yaml_file(path)
    return parse_settings(data, checksum=compute_checksum(data))

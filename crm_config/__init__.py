"""
crm_config -- single public entrypoint for core settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``. Engines never read files or environment
    variables; services receive a ``CoreSettings`` and pass plain values
    (tax rate, prefixes, windows) into the engines.

Architecture position:
    Configuration -- YAML-driven. Sits above ``crm_kernel`` and below
    ``crm_services``. The kernel MUST NEVER import from ``crm_config``.

Failure modes:
    - ``FileNotFoundError`` -- settings file does not exist.
    - ``ConfigurationError`` -- missing required keys or invalid values.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``CRM_CONFIG_TRACE`` log entry with the settings id, version and
    checksum, tying computed quotes and reports to the settings in force.
"""

from __future__ import annotations

import logging
from pathlib import Path

from crm_config.loader import load_settings
from crm_config.schema import (
    BillingSettings,
    BudgetSettings,
    CoreSettings,
    IntakeSettings,
    PricingSettings,
    ReportingSettings,
    SchedulingSettings,
)

_logger = logging.getLogger("crm_kernel.config")

# Bundled defaults shipped with the package
DEFAULT_SETTINGS_PATH = Path(__file__).parent / "defaults" / "core.yaml"


def get_active_settings(config_path: Path | None = None) -> CoreSettings:
    """The ONLY public settings entrypoint.

    Args:
        config_path: Override path to a settings YAML file. Defaults to the
            bundled ``crm_config/defaults/core.yaml``.

    Returns:
        CoreSettings -- frozen, fully parsed settings.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ConfigurationError: If the file is missing required keys.
    """
    path = config_path or DEFAULT_SETTINGS_PATH
    settings = load_settings(path)

    _logger.info(
        "CRM_CONFIG_TRACE",
        extra={
            "trace_type": "CRM_CONFIG_TRACE",
            "settings_id": settings.settings_id,
            "settings_version": settings.version,
            "checksum": settings.checksum,
            "currency": settings.currency,
            "source": str(path),
        },
    )
    return settings


__all__ = [
    "BillingSettings",
    "BudgetSettings",
    "CoreSettings",
    "DEFAULT_SETTINGS_PATH",
    "IntakeSettings",
    "PricingSettings",
    "ReportingSettings",
    "SchedulingSettings",
    "get_active_settings",
]

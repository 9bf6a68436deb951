"""
campaign_config -- single public entrypoint for runtime settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  Services and engines never read files or
    environment variables themselves; the composition root (the reporting
    script, the test harness) reads settings here and passes plain values
    (``enforce_ceiling``, ``percent_places``) into the kernel.

Architecture position:
    Configuration -- sits above ``campaign_kernel`` and
    ``campaign_engines``.  The kernel MUST NEVER import from
    ``campaign_config``.

Failure modes:
    - ``FileNotFoundError`` -- the settings file does not exist.
    - ``ConfigurationError`` (a ``ValueError``) -- invalid values.

Audit relevance:
    Every successful ``get_active_settings()`` call emits a
    ``CAMPAIGN_CONFIG_TRACE`` log entry naming the source file and the
    allocation policy in force.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from campaign_config.loader import load_yaml_file, parse_settings
from campaign_config.schema import (
    AllocationSettings,
    ConfigurationError,
    DatabaseSettings,
    KernelSettings,
    LoggingSettings,
    ReportingSettings,
)

_logger = logging.getLogger("campaign_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_PATH_ENV = "CAMPAIGN_KERNEL_CONFIG"
DATABASE_URL_ENV = "DATABASE_URL"
LOG_LEVEL_ENV = "CAMPAIGN_KERNEL_LOG_LEVEL"


def get_active_settings(config_path: Path | str | None = None) -> KernelSettings:
    """The ONLY public configuration entrypoint.

    Resolution order for the file: ``config_path``, then the
    ``CAMPAIGN_KERNEL_CONFIG`` environment variable, then the packaged
    ``defaults.yaml``.  ``DATABASE_URL`` and ``CAMPAIGN_KERNEL_LOG_LEVEL``
    override the corresponding file values.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ConfigurationError: If any value is invalid.
    """
    path = Path(config_path or os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    data = load_yaml_file(path)

    db_url = os.environ.get(DATABASE_URL_ENV)
    if db_url:
        data = {**data, "database": {**(data.get("database") or {}), "url": db_url}}
    log_level = os.environ.get(LOG_LEVEL_ENV)
    if log_level:
        data = {**data, "logging": {**(data.get("logging") or {}), "level": log_level}}

    settings = parse_settings(data, source=str(path))

    _logger.info(
        "CAMPAIGN_CONFIG_TRACE",
        extra={
            "trace_type": "CAMPAIGN_CONFIG_TRACE",
            "config_source": settings.source,
            "enforce_ceiling": settings.allocation.enforce_ceiling,
            "percent_places": settings.reporting.percent_places,
            "log_level": settings.logging.level,
        },
    )
    return settings


__all__ = [
    "AllocationSettings",
    "ConfigurationError",
    "DatabaseSettings",
    "KernelSettings",
    "LoggingSettings",
    "ReportingSettings",
    "get_active_settings",
    "load_yaml_file",
    "parse_settings",
]

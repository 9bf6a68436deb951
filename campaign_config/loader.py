"""
Configuration Loader (``campaign_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen dataclasses of
``campaign_config.schema``.  The single public entry point for runtime
settings is ``campaign_config.get_active_settings()``.

Invariants enforced
-------------------
* Every parse error raises ``ConfigurationError`` naming the offending key;
  unknown sections and keys are rejected rather than ignored.
* Every parsed object is a frozen dataclass from ``schema.py``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from campaign_config.schema import (
    AllocationSettings,
    ConfigurationError,
    DatabaseSettings,
    KernelSettings,
    LoggingSettings,
    ReportingSettings,
)

_VALID_LEVELS = frozenset(logging.getLevelNamesMapping())


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    return data


def _section(data: dict[str, Any], name: str, allowed: set[str]) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(name, "must be a mapping")
    unknown = sorted(set(section) - allowed)
    if unknown:
        raise ConfigurationError(f"{name}.{unknown[0]}", "unknown setting")
    return section


def _bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(key, f"expected true/false, got {value!r}")
    return value


def _int(key: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(key, f"expected an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(key, f"must be >= {minimum}, got {value}")
    return value


def _level(key: str, value: Any) -> str:
    if not isinstance(value, str) or value.upper() not in _VALID_LEVELS:
        raise ConfigurationError(key, f"unknown log level {value!r}")
    return value.upper()


def parse_settings(data: dict[str, Any], source: str | None = None) -> KernelSettings:
    """Build a validated KernelSettings from a raw settings mapping."""
    unknown = sorted(set(data) - {"database", "logging", "allocation", "reporting"})
    if unknown:
        raise ConfigurationError(unknown[0], "unknown section")

    defaults = KernelSettings()

    db = _section(data, "database", {"url", "echo", "pool_size", "max_overflow"})
    url = db.get("url", defaults.database.url)
    if not isinstance(url, str) or not url:
        raise ConfigurationError("database.url", "must be a non-empty string")
    database = DatabaseSettings(
        url=url,
        echo=_bool("database.echo", db.get("echo", defaults.database.echo)),
        pool_size=_int("database.pool_size", db.get("pool_size", defaults.database.pool_size), 1),
        max_overflow=_int(
            "database.max_overflow", db.get("max_overflow", defaults.database.max_overflow), 0
        ),
    )

    log = _section(data, "logging", {"level"})
    logging_settings = LoggingSettings(
        level=_level("logging.level", log.get("level", defaults.logging.level)),
    )

    alloc = _section(data, "allocation", {"enforce_ceiling"})
    allocation = AllocationSettings(
        enforce_ceiling=_bool(
            "allocation.enforce_ceiling",
            alloc.get("enforce_ceiling", defaults.allocation.enforce_ceiling),
        ),
    )

    rep = _section(data, "reporting", {"percent_places"})
    reporting = ReportingSettings(
        percent_places=_int(
            "reporting.percent_places",
            rep.get("percent_places", defaults.reporting.percent_places),
            0,
        ),
    )

    return KernelSettings(
        database=database,
        logging=logging_settings,
        allocation=allocation,
        reporting=reporting,
        source=source,
    )

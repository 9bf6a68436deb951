"""
Configuration schema (``campaign_config.schema``).

Frozen dataclasses describing the runtime settings of the campaign kernel:

  DatabaseSettings    = connection URL and pool sizing
  LoggingSettings     = root level for the campaign_kernel logger tree
  AllocationSettings  = allocation ceiling policy
  ReportingSettings   = rounding of reported percentages
  KernelSettings      = the assembled, validated whole
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_DATABASE_URL = "sqlite://"


class ConfigurationError(ValueError):
    """Raised when configuration is missing a value or holds an invalid one."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"{key}: {message}")


@dataclass(frozen=True)
class DatabaseSettings:
    url: str = DEFAULT_DATABASE_URL
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class AllocationSettings:
    """
    Allocation ceiling policy.

    ``enforce_ceiling`` False keeps over-allocations (flagged and logged at
    WARNING) for installations migrating data that already breaks the
    ceiling.
    """

    enforce_ceiling: bool = True


@dataclass(frozen=True)
class ReportingSettings:
    percent_places: int = 2


@dataclass(frozen=True)
class KernelSettings:
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    allocation: AllocationSettings = field(default_factory=AllocationSettings)
    reporting: ReportingSettings = field(default_factory=ReportingSettings)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "database": {
                "url": self.database.url,
                "echo": self.database.echo,
                "pool_size": self.database.pool_size,
                "max_overflow": self.database.max_overflow,
            },
            "logging": {"level": self.logging.level},
            "allocation": {"enforce_ceiling": self.allocation.enforce_ceiling},
            "reporting": {"percent_places": self.reporting.percent_places},
            "source": self.source,
        }

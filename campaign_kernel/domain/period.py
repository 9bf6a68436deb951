"""
Period -- (year, month) value object.

Responsibility:
    Represents the monthly granularity used by campaigns, budget lines and
    results, and validates campaign start/end ordering.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - month is in 1..12.
    - A campaign's end period never precedes its start period.

Failure modes:
    - InvalidPeriodError on an out-of-range month, a half-specified end
      period, or an end period before the start.
"""

from __future__ import annotations

from dataclasses import dataclass

from campaign_kernel.exceptions import InvalidPeriodError


@dataclass(frozen=True, order=True)
class Period:
    """A calendar month. Orders chronologically."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not isinstance(self.year, int) or isinstance(self.year, bool):
            raise InvalidPeriodError(f"year must be an integer, got {self.year!r}")
        if not isinstance(self.month, int) or isinstance(self.month, bool):
            raise InvalidPeriodError(f"month must be an integer, got {self.month!r}")
        if not 1 <= self.month <= 12:
            raise InvalidPeriodError(f"month must be between 1 and 12, got {self.month}")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def validate_campaign_period(
    start_year: int,
    start_month: int,
    end_year: int | None,
    end_month: int | None,
) -> tuple[Period, Period | None]:
    """
    Validate a campaign's start and optional end period.

    Postconditions:
        Returns (start, end) where end is None for open-ended campaigns.

    Raises:
        InvalidPeriodError: If a month is out of range, only one half of the
            end period is given, or end precedes start.
    """
    start = Period(start_year, start_month)

    if end_year is None and end_month is None:
        return start, None
    if end_year is None or end_month is None:
        raise InvalidPeriodError(
            "end year and end month must be given together",
            start=str(start),
        )

    end = Period(end_year, end_month)
    if end < start:
        raise InvalidPeriodError(
            f"end period {end} precedes start period {start}",
            start=str(start),
            end=str(end),
        )
    return start, end

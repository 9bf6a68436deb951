"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable records the selectors hand to the engines: campaign
    headers, budget lines with their team allocations, result lines and KPI
    records, plus the reconciliation period filter.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies.  ORM models convert themselves via ``to_dto()``;
    engines only ever see these types.

Invariants enforced:
    - All currency fields are Decimal.
    - ``PeriodFilter`` month is in 1..12 and requires a year.

Data flow:
    ORM rows -> selectors -> DTOs -> campaign_engines -> report DTOs
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from campaign_kernel.domain.period import Period
from campaign_kernel.exceptions import InvalidPeriodError

# (year, month, platform, operation_type, budget_type)
LineKey = tuple[int, int, str, str, str]


@dataclass(frozen=True)
class TeamAllocation:
    """One team's share of a budget line."""

    team_id: UUID
    allocation: Decimal
    budget_id: UUID | None = None
    team_name: str | None = None


@dataclass(frozen=True)
class CampaignInfo:
    """Campaign header used by rollups and reports."""

    id: UUID
    client_id: UUID
    name: str
    total_budget: Decimal
    start: Period
    end: Period | None = None
    status: str = "active"


@dataclass(frozen=True)
class BudgetLine:
    """A planned spend line for one campaign/period/platform/operation."""

    id: UUID
    campaign_id: UUID
    year: int
    month: int
    platform: str
    operation_type: str
    budget_type: str
    amount: Decimal
    target_kpi: str | None = None
    target_value: Decimal | None = None
    allocations: tuple[TeamAllocation, ...] = field(default_factory=tuple)

    @property
    def key(self) -> LineKey:
        return (self.year, self.month, self.platform, self.operation_type, self.budget_type)

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)


@dataclass(frozen=True)
class ResultLine:
    """An actual-performance line, correlated to budgets by key equality."""

    id: UUID
    campaign_id: UUID
    year: int
    month: int
    platform: str
    operation_type: str
    budget_type: str
    actual_spend: Decimal
    actual_result: Decimal

    @property
    def key(self) -> LineKey:
        return (self.year, self.month, self.platform, self.operation_type, self.budget_type)

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)


@dataclass(frozen=True)
class KpiRecord:
    """A campaign KPI target/actual pair."""

    id: UUID
    campaign_id: UUID
    kpi_type: str
    unit: str
    target_value: Decimal
    actual_value: Decimal | None = None
    priority: int = 0
    description: str | None = None


@dataclass(frozen=True)
class PeriodFilter:
    """
    Optional scope for budget-vs-result reconciliation.

    Guarantees:
        - month, when set, is in 1..12 and comes with a year.
    """

    year: int | None = None
    month: int | None = None
    platform: str | None = None

    def __post_init__(self) -> None:
        if self.month is not None:
            if self.year is None:
                raise InvalidPeriodError("a month filter requires a year")
            Period(self.year, self.month)
        elif self.year is not None and (
            not isinstance(self.year, int) or isinstance(self.year, bool)
        ):
            raise InvalidPeriodError(f"year must be an integer, got {self.year!r}")

    def matches(self, line: BudgetLine | ResultLine) -> bool:
        if self.year is not None and line.year != self.year:
            return False
        if self.month is not None and line.month != self.month:
            return False
        if self.platform is not None and line.platform != self.platform:
            return False
        return True


@dataclass(frozen=True)
class DivisionBudgetRow:
    """
    One budget line tagged with its client's business division.

    Campaigns without budget lines appear once with ``budget_id`` None and a
    zero amount so they still count toward their division.
    """

    business_division: str
    campaign_id: UUID
    budget_id: UUID | None
    amount: Decimal

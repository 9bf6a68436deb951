"""
Module: campaign_engines.allocation
Responsibility:
    Validate team sub-allocations of a budget line: every allocation is
    non-negative, each team appears at most once, and the allocations never
    sum to more than the budget line's amount.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by AllocationService, which supplies the locked budget amount
    and the existing BudgetTeam rows and persists only on success.

Invariants enforced:
    - ALLOCATION_CEILING: sum(allocation) <= budget amount.  The boundary is
      inclusive; an exact fit is valid.
    - ALLOCATION_UNIQUENESS: at most one allocation per team.
    - NON_NEGATIVE_AMOUNTS: every allocation >= 0.
    - DECIMAL_EXACTNESS: Decimal comparison only; floats raise TypeError.

Failure modes:
    - AllocationExceededError carrying the computed total and the amount.
    - NegativeAllocationError / DuplicateAllocationError on bad proposals.
    - NegativeAmountError if the budget amount itself is negative.

Usage:
    from campaign_engines.allocation import AllocationValidator

    check = AllocationValidator().validate(
        budget_id=budget.id,
        budget_amount=Decimal("1000"),
        existing=[TeamAllocation(team1, Decimal("600")), TeamAllocation(team2, Decimal("300"))],
        proposed=[TeamAllocation(team3, Decimal("100"))],
    )
    assert check.headroom == Decimal("0")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from campaign_engines.tracer import traced_engine
from campaign_kernel.db.types import ZERO, to_decimal
from campaign_kernel.domain.dtos import TeamAllocation
from campaign_kernel.exceptions import (
    AllocationExceededError,
    DuplicateAllocationError,
    NegativeAllocationError,
    NegativeAmountError,
)
from campaign_kernel.invariants import KernelInvariant
from campaign_kernel.logging_config import get_logger

logger = get_logger("engines.allocation")

ProposedAllocation = TeamAllocation | tuple[UUID, Any]


@dataclass(frozen=True)
class AllocationCheck:
    """
    Outcome of validating a budget line's team allocations.

    Guarantees:
        - ``rows`` is the full set of allocations that would exist after the
          change, ordered by team id.
        - ``total_allocated == sum(row.allocation for row in rows)``.
        - ``exceeds_amount`` is only ever True when the ceiling is not
          enforced.
    """

    budget_id: UUID | None
    budget_amount: Decimal
    total_allocated: Decimal
    rows: tuple[TeamAllocation, ...]
    exceeds_amount: bool = False

    @property
    def headroom(self) -> Decimal:
        """Unallocated remainder of the budget line (negative if exceeded)."""
        return self.budget_amount - self.total_allocated

    def allocation_for(self, team_id: UUID) -> Decimal | None:
        for row in self.rows:
            if row.team_id == team_id:
                return row.allocation
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "budget_id": str(self.budget_id) if self.budget_id else None,
            "budget_amount": str(self.budget_amount),
            "total_allocated": str(self.total_allocated),
            "headroom": str(self.headroom),
            "exceeds_amount": self.exceeds_amount,
            "rows": [
                {"team_id": str(r.team_id), "allocation": str(r.allocation)}
                for r in self.rows
            ],
        }


def _coerce(item: ProposedAllocation) -> TeamAllocation:
    if isinstance(item, TeamAllocation):
        return TeamAllocation(
            team_id=item.team_id,
            allocation=to_decimal(item.allocation, "allocation"),
            budget_id=item.budget_id,
            team_name=item.team_name,
        )
    team_id, allocation = item
    return TeamAllocation(team_id=team_id, allocation=to_decimal(allocation, "allocation"))


class AllocationValidator:
    """
    Pure validator for budget line team allocations.

    Contract:
        No I/O, no database access, fully deterministic.  The caller supplies
        the budget amount and the existing allocation rows read under a lock.
    Guarantees:
        - A proposed allocation for a team that already has a row replaces
          that row; other existing rows are kept unchanged.
        - With ``enforce_ceiling=True`` (default) an over-allocation raises
          AllocationExceededError.  With False it is flagged on the result
          and logged at WARNING.
    Non-goals:
        - Does not check that teams exist; AllocationService does.
    """

    def __init__(self, enforce_ceiling: bool = True):
        self._enforce_ceiling = enforce_ceiling

    @traced_engine(
        "allocation_validator",
        "1.0",
        fingerprint_fields=("budget_id", "budget_amount", "existing", "proposed"),
    )
    def validate(
        self,
        *,
        budget_id: UUID | None,
        budget_amount: Decimal,
        existing: Sequence[TeamAllocation] = (),
        proposed: Sequence[ProposedAllocation] = (),
    ) -> AllocationCheck:
        """
        Validate the allocations that would exist after applying ``proposed``.

        Preconditions:
            ``existing`` holds at most one row per team (DB unique constraint).

        Raises:
            InvalidAmountError: budget_amount or an allocation is NaN,
                Infinity or not a number.
            NegativeAmountError: budget_amount < 0.
            DuplicateAllocationError: a team appears twice in ``proposed``.
            NegativeAllocationError: any resulting allocation < 0.
            AllocationExceededError: total > budget_amount (when enforced).
        """
        amount = to_decimal(budget_amount, "budget_amount")
        if amount < ZERO:
            raise NegativeAmountError("budget_amount", amount)

        merged: dict[UUID, TeamAllocation] = {}
        for row in existing:
            merged[row.team_id] = _coerce(row)

        seen: set[UUID] = set()
        for item in proposed:
            row = _coerce(item)
            if row.team_id in seen:
                raise DuplicateAllocationError(str(row.team_id))
            seen.add(row.team_id)
            merged[row.team_id] = row

        rows = tuple(sorted(merged.values(), key=lambda r: str(r.team_id)))

        total = ZERO
        for row in rows:
            if row.allocation < ZERO:
                raise NegativeAllocationError(str(row.team_id), row.allocation)
            total += row.allocation

        exceeds = total > amount
        if exceeds:
            logger.warning(
                "allocation_ceiling_exceeded",
                extra={
                    "invariant": KernelInvariant.ALLOCATION_CEILING.value,
                    "budget_id": str(budget_id) if budget_id else None,
                    "total_allocated": str(total),
                    "budget_amount": str(amount),
                    "enforced": self._enforce_ceiling,
                },
            )
            if self._enforce_ceiling:
                raise AllocationExceededError(
                    total, amount, str(budget_id) if budget_id else None
                )

        logger.debug(
            "allocation_validated",
            extra={
                "budget_id": str(budget_id) if budget_id else None,
                "row_count": len(rows),
                "total_allocated": str(total),
                "budget_amount": str(amount),
            },
        )

        return AllocationCheck(
            budget_id=budget_id,
            budget_amount=amount,
            total_allocated=total,
            rows=rows,
            exceeds_amount=exceeds,
        )

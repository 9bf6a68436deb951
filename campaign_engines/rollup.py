"""
Module: campaign_engines.rollup
Responsibility:
    Derive campaign-level totals for dashboards: planned total vs. the
    campaign's total budget, total actual spend, and per-team allocation
    totals across all budget lines of the campaign.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - DECIMAL_EXACTNESS: every total is an exact Decimal sum; nothing is
      rounded.  ``planned_total`` equals the arithmetic sum of the budget
      line amounts.
    - ``over_planned`` is a soft warning (logged), never an error.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from campaign_engines.tracer import traced_engine
from campaign_kernel.db.types import ZERO
from campaign_kernel.domain.dtos import BudgetLine, CampaignInfo, ResultLine
from campaign_kernel.logging_config import get_logger

logger = get_logger("engines.rollup")


@dataclass(frozen=True)
class TeamAllocationTotal:
    """Sum of one team's allocations over a campaign's budget lines."""

    team_id: UUID
    total: Decimal
    team_name: str | None = None
    budget_count: int = 0


@dataclass(frozen=True)
class CampaignRollup:
    """Campaign-level aggregates."""

    campaign_id: UUID
    total_budget: Decimal
    planned_total: Decimal
    actual_total: Decimal
    actual_result_total: Decimal
    over_planned: bool
    team_allocation_totals: tuple[TeamAllocationTotal, ...]
    budget_line_count: int
    result_line_count: int

    @property
    def unplanned_budget(self) -> Decimal:
        """Part of the campaign budget not yet assigned to budget lines."""
        return self.total_budget - self.planned_total

    @property
    def remaining_budget(self) -> Decimal:
        """Campaign budget left after actual spend."""
        return self.total_budget - self.actual_total

    @property
    def allocated_total(self) -> Decimal:
        return sum((t.total for t in self.team_allocation_totals), ZERO)

    @property
    def unallocated_total(self) -> Decimal:
        """Planned amount not assigned to any team."""
        return self.planned_total - self.allocated_total

    def team_total(self, team_id: UUID) -> Decimal:
        for t in self.team_allocation_totals:
            if t.team_id == team_id:
                return t.total
        return ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "campaign_id": str(self.campaign_id),
            "total_budget": str(self.total_budget),
            "planned_total": str(self.planned_total),
            "actual_total": str(self.actual_total),
            "actual_result_total": str(self.actual_result_total),
            "over_planned": self.over_planned,
            "unplanned_budget": str(self.unplanned_budget),
            "remaining_budget": str(self.remaining_budget),
            "allocated_total": str(self.allocated_total),
            "unallocated_total": str(self.unallocated_total),
            "budget_line_count": self.budget_line_count,
            "result_line_count": self.result_line_count,
            "team_allocation_totals": [
                {
                    "team_id": str(t.team_id),
                    "team_name": t.team_name,
                    "total": str(t.total),
                    "budget_count": t.budget_count,
                }
                for t in self.team_allocation_totals
            ],
        }


class CampaignRollupCalculator:
    """
    Pure calculator for campaign rollups.

    Contract:
        No I/O, no database access, fully deterministic.  Budgets and
        results are expected to belong to ``campaign``; rows for other
        campaigns are ignored.
    """

    @traced_engine("rollup", "1.0", fingerprint_fields=("campaign", "budgets", "results"))
    def rollup(
        self,
        *,
        campaign: CampaignInfo,
        budgets: Sequence[BudgetLine],
        results: Sequence[ResultLine],
    ) -> CampaignRollup:
        own_budgets = [b for b in budgets if b.campaign_id == campaign.id]
        own_results = [r for r in results if r.campaign_id == campaign.id]

        planned = ZERO
        team_totals: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
        team_counts: dict[UUID, int] = defaultdict(int)
        team_names: dict[UUID, str | None] = {}
        for budget in own_budgets:
            planned += budget.amount
            for alloc in budget.allocations:
                team_totals[alloc.team_id] += alloc.allocation
                team_counts[alloc.team_id] += 1
                team_names.setdefault(alloc.team_id, alloc.team_name)

        actual = ZERO
        outcome = ZERO
        for result in own_results:
            actual += result.actual_spend
            outcome += result.actual_result

        over_planned = planned > campaign.total_budget
        if over_planned:
            logger.warning(
                "campaign_over_planned",
                extra={
                    "campaign_id": str(campaign.id),
                    "planned_total": str(planned),
                    "total_budget": str(campaign.total_budget),
                },
            )

        return CampaignRollup(
            campaign_id=campaign.id,
            total_budget=campaign.total_budget,
            planned_total=planned,
            actual_total=actual,
            actual_result_total=outcome,
            over_planned=over_planned,
            team_allocation_totals=tuple(
                TeamAllocationTotal(
                    team_id=team_id,
                    total=team_totals[team_id],
                    team_name=team_names[team_id],
                    budget_count=team_counts[team_id],
                )
                for team_id in sorted(team_totals, key=str)
            ),
            budget_line_count=len(own_budgets),
            result_line_count=len(own_results),
        )

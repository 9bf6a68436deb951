"""
Module: campaign_engines.overview
Responsibility:
    Cross-campaign summaries: the monthly overview (planned, spend and
    outcome totals for one month across every campaign) and the business
    division summary (planned budget per client division).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Exact Decimal totals.  Only the reported ROI and averages are rounded,
      through round_money().
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from campaign_engines.tracer import traced_engine
from campaign_kernel.db.types import ZERO, percent_of, round_money
from campaign_kernel.domain.dtos import BudgetLine, DivisionBudgetRow, ResultLine
from campaign_kernel.domain.period import Period
from campaign_kernel.logging_config import get_logger

logger = get_logger("engines.overview")


@dataclass(frozen=True)
class MonthlyOverview:
    """Totals for one calendar month across all campaigns."""

    period: Period
    total_budget: Decimal
    total_spend: Decimal
    total_result: Decimal
    budget_count: int
    result_count: int
    campaign_count: int
    roi: Decimal | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.period.year,
            "month": self.period.month,
            "total_budget": str(self.total_budget),
            "total_spend": str(self.total_spend),
            "total_result": str(self.total_result),
            "budget_count": self.budget_count,
            "result_count": self.result_count,
            "campaign_count": self.campaign_count,
            "roi": None if self.roi is None else str(self.roi),
        }


@dataclass(frozen=True)
class DivisionTotal:
    """Planned budget for one business division."""

    business_division: str
    campaign_count: int
    budget_count: int
    planned_total: Decimal
    average_per_campaign: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "business_division": self.business_division,
            "campaign_count": self.campaign_count,
            "budget_count": self.budget_count,
            "planned_total": str(self.planned_total),
            "average_per_campaign": str(self.average_per_campaign),
        }


class OverviewCalculator:
    """Pure calculator for cross-campaign summaries."""

    def __init__(self, percent_places: int = 2):
        self._percent_places = percent_places

    @traced_engine("monthly_overview", "1.0", fingerprint_fields=("period", "budgets", "results"))
    def monthly_overview(
        self,
        *,
        period: Period,
        budgets: Sequence[BudgetLine],
        results: Sequence[ResultLine],
    ) -> MonthlyOverview:
        """
        Summarize one month.  Rows outside ``period`` are ignored.

        ROI is ``(total_result - total_spend) / total_spend * 100``, None when
        nothing was spent.
        """
        month_budgets = [b for b in budgets if b.period == period]
        month_results = [r for r in results if r.period == period]

        total_budget = sum((b.amount for b in month_budgets), ZERO)
        total_spend = sum((r.actual_spend for r in month_results), ZERO)
        total_result = sum((r.actual_result for r in month_results), ZERO)
        campaigns = {b.campaign_id for b in month_budgets} | {
            r.campaign_id for r in month_results
        }

        return MonthlyOverview(
            period=period,
            total_budget=total_budget,
            total_spend=total_spend,
            total_result=total_result,
            budget_count=len(month_budgets),
            result_count=len(month_results),
            campaign_count=len(campaigns),
            roi=percent_of(total_result - total_spend, total_spend, self._percent_places),
        )

    @traced_engine("division_summary", "1.0", fingerprint_fields=("rows",))
    def division_summary(
        self,
        *,
        rows: Sequence[DivisionBudgetRow],
    ) -> tuple[DivisionTotal, ...]:
        """
        Planned budget per business division.

        Postconditions:
            Ordered by planned_total descending, then division name.
        """
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        campaigns: dict[str, set[UUID]] = defaultdict(set)
        budgets: dict[str, set[UUID]] = defaultdict(set)

        for row in rows:
            totals[row.business_division] += row.amount
            campaigns[row.business_division].add(row.campaign_id)
            if row.budget_id is not None:
                budgets[row.business_division].add(row.budget_id)

        summary = []
        for division, planned in totals.items():
            campaign_count = len(campaigns[division])
            average = (
                round_money(planned / campaign_count, self._percent_places)
                if campaign_count
                else ZERO
            )
            summary.append(
                DivisionTotal(
                    business_division=division,
                    campaign_count=campaign_count,
                    budget_count=len(budgets[division]),
                    planned_total=planned,
                    average_per_campaign=average,
                )
            )

        summary.sort(key=lambda d: (-d.planned_total, d.business_division))
        return tuple(summary)

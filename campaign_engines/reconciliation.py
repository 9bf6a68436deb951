"""
Module: campaign_engines.reconciliation
Responsibility:
    Compare planned figures against actuals for one campaign: budget lines
    against result lines grouped by (year, month, platform, operation_type,
    budget_type), and KPI targets against KPI actuals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Inputs are DTOs loaded by CampaignSelector; outputs are frozen report
    objects returned unchanged to callers.

Invariants enforced:
    - Deterministic ordering: variance lines sort by year, month, platform,
      operation_type (budget_type breaks remaining ties).  KPI lines sort by
      priority then kpi_type.
    - Idempotency: no input is mutated; identical inputs give equal reports.
    - Unmatched rows are statuses (ORPHAN_BUDGET / ORPHAN_RESULT), never
      errors.
    - An unmeasured KPI (actual None) or a zero target yields achievement
      None, never zero.
    - Decimal-only arithmetic.

Failure modes:
    - None for well-formed DTOs.  Period filter validation happens when the
      PeriodFilter is constructed.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from campaign_engines.tracer import traced_engine
from campaign_kernel.db.types import ZERO, percent_of
from campaign_kernel.domain.dtos import (
    BudgetLine,
    KpiRecord,
    LineKey,
    PeriodFilter,
    ResultLine,
    TeamAllocation,
)
from campaign_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")


class LineStatus(str, Enum):
    """How a key group pairs planned and actual rows."""

    MATCHED = "matched"
    ORPHAN_BUDGET = "orphan_budget"  # planned, no spend recorded yet
    ORPHAN_RESULT = "orphan_result"  # spend with no plan


@dataclass(frozen=True)
class VarianceLine:
    """
    Planned vs. actual for one (year, month, platform, operation, budget type).

    ``spend_variance = actual_spend - planned_amount``; a missing side counts
    as zero.  ``budget_utilization`` and ``roi`` are percentages, None when
    their denominator is zero.
    """

    year: int
    month: int
    platform: str
    operation_type: str
    budget_type: str
    status: LineStatus
    planned_amount: Decimal
    actual_spend: Decimal
    actual_result: Decimal
    spend_variance: Decimal
    budget_utilization: Decimal | None = None
    roi: Decimal | None = None
    target_kpi: str | None = None
    target_value: Decimal | None = None
    budget_ids: tuple[UUID, ...] = ()
    result_ids: tuple[UUID, ...] = ()
    team_allocations: tuple[TeamAllocation, ...] = ()

    @property
    def key(self) -> LineKey:
        return (self.year, self.month, self.platform, self.operation_type, self.budget_type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "platform": self.platform,
            "operation_type": self.operation_type,
            "budget_type": self.budget_type,
            "status": self.status.value,
            "planned_amount": str(self.planned_amount),
            "actual_spend": str(self.actual_spend),
            "actual_result": str(self.actual_result),
            "spend_variance": str(self.spend_variance),
            "budget_utilization": _opt_str(self.budget_utilization),
            "roi": _opt_str(self.roi),
            "target_kpi": self.target_kpi,
            "target_value": _opt_str(self.target_value),
            "budget_ids": [str(i) for i in self.budget_ids],
            "result_ids": [str(i) for i in self.result_ids],
            "team_allocations": [
                {
                    "team_id": str(a.team_id),
                    "team_name": a.team_name,
                    "allocation": str(a.allocation),
                }
                for a in self.team_allocations
            ],
        }


@dataclass(frozen=True)
class ReconciliationReport:
    """Budget-vs-result reconciliation for one campaign."""

    campaign_id: UUID
    lines: tuple[VarianceLine, ...]
    period_filter: PeriodFilter = field(default_factory=PeriodFilter)

    @property
    def planned_total(self) -> Decimal:
        return sum((line.planned_amount for line in self.lines), ZERO)

    @property
    def actual_spend_total(self) -> Decimal:
        return sum((line.actual_spend for line in self.lines), ZERO)

    @property
    def actual_result_total(self) -> Decimal:
        return sum((line.actual_result for line in self.lines), ZERO)

    @property
    def spend_variance_total(self) -> Decimal:
        return self.actual_spend_total - self.planned_total

    def count(self, status: LineStatus) -> int:
        return sum(1 for line in self.lines if line.status is status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "campaign_id": str(self.campaign_id),
            "filter": {
                "year": self.period_filter.year,
                "month": self.period_filter.month,
                "platform": self.period_filter.platform,
            },
            "lines": [line.to_dict() for line in self.lines],
            "summary": {
                "planned_total": str(self.planned_total),
                "actual_spend_total": str(self.actual_spend_total),
                "actual_result_total": str(self.actual_result_total),
                "spend_variance_total": str(self.spend_variance_total),
                "matched": self.count(LineStatus.MATCHED),
                "orphan_budgets": self.count(LineStatus.ORPHAN_BUDGET),
                "orphan_results": self.count(LineStatus.ORPHAN_RESULT),
            },
        }


@dataclass(frozen=True)
class KpiAchievement:
    """
    Target vs. actual for one campaign KPI.

    ``achievement = actual / target``; None when the KPI is unmeasured or the
    target is zero.  ``gap = target - actual``; None when unmeasured.
    """

    kpi_id: UUID
    kpi_type: str
    unit: str
    priority: int
    target_value: Decimal
    actual_value: Decimal | None
    achievement: Decimal | None
    gap: Decimal | None

    @property
    def is_measured(self) -> bool:
        return self.actual_value is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kpi_id": str(self.kpi_id),
            "kpi_type": self.kpi_type,
            "unit": self.unit,
            "priority": self.priority,
            "target_value": str(self.target_value),
            "actual_value": _opt_str(self.actual_value),
            "achievement": _opt_str(self.achievement),
            "gap": _opt_str(self.gap),
        }


@dataclass(frozen=True)
class KpiReport:
    """KPI reconciliation for one campaign."""

    campaign_id: UUID
    kpis: tuple[KpiAchievement, ...]

    @property
    def measured_count(self) -> int:
        return sum(1 for k in self.kpis if k.is_measured)

    def to_dict(self) -> dict[str, Any]:
        return {
            "campaign_id": str(self.campaign_id),
            "kpis": [k.to_dict() for k in self.kpis],
            "measured_count": self.measured_count,
        }


def _opt_str(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _merge_allocations(budgets: Sequence[BudgetLine]) -> tuple[TeamAllocation, ...]:
    totals: dict[UUID, Decimal] = defaultdict(lambda: ZERO)
    names: dict[UUID, str | None] = {}
    for budget in budgets:
        for alloc in budget.allocations:
            totals[alloc.team_id] += alloc.allocation
            names.setdefault(alloc.team_id, alloc.team_name)
    return tuple(
        TeamAllocation(team_id=team_id, allocation=totals[team_id], team_name=names[team_id])
        for team_id in sorted(totals, key=str)
    )


def _group_target(budgets: Sequence[BudgetLine]) -> tuple[str | None, Decimal | None]:
    kpis = {b.target_kpi for b in budgets if b.target_kpi is not None}
    if len(kpis) != 1:
        return None, None
    values = [b.target_value for b in budgets if b.target_value is not None]
    if not values:
        return kpis.pop(), None
    return kpis.pop(), sum(values, ZERO)


class ReconciliationEngine:
    """
    Pure engine for planned-vs-actual reconciliation.

    Contract:
        No I/O, no database access, fully deterministic.
    Guarantees:
        - Every key present in either input appears exactly once in the
          output.
        - Rows sharing a key are summed before comparison.
    Non-goals:
        - Does not load data or check that the campaign exists; the
          reporting service does.
    """

    def __init__(self, percent_places: int = 2):
        self._percent_places = percent_places

    @traced_engine(
        "reconciliation",
        "1.0",
        fingerprint_fields=("campaign_id", "budgets", "results", "period_filter"),
    )
    def reconcile_budget_vs_result(
        self,
        *,
        campaign_id: UUID,
        budgets: Sequence[BudgetLine],
        results: Sequence[ResultLine],
        period_filter: PeriodFilter | None = None,
    ) -> ReconciliationReport:
        """
        Group budgets and results by key and compute spend variance.

        Postconditions:
            Lines are ordered by (year, month, platform, operation_type,
            budget_type) ascending.
        """
        flt = period_filter or PeriodFilter()

        budget_groups: dict[LineKey, list[BudgetLine]] = defaultdict(list)
        for budget in budgets:
            if flt.matches(budget):
                budget_groups[budget.key].append(budget)

        result_groups: dict[LineKey, list[ResultLine]] = defaultdict(list)
        for result in results:
            if flt.matches(result):
                result_groups[result.key].append(result)

        lines: list[VarianceLine] = []
        for key in sorted(set(budget_groups) | set(result_groups)):
            group_budgets = sorted(budget_groups.get(key, ()), key=lambda b: str(b.id))
            group_results = sorted(result_groups.get(key, ()), key=lambda r: str(r.id))

            if group_budgets and group_results:
                status = LineStatus.MATCHED
            elif group_budgets:
                status = LineStatus.ORPHAN_BUDGET
            else:
                status = LineStatus.ORPHAN_RESULT

            planned = sum((b.amount for b in group_budgets), ZERO)
            spend = sum((r.actual_spend for r in group_results), ZERO)
            outcome = sum((r.actual_result for r in group_results), ZERO)
            target_kpi, target_value = _group_target(group_budgets)

            roi = None
            if group_results:
                roi = percent_of(outcome - spend, spend, self._percent_places)
            utilization = None
            if group_budgets and group_results:
                utilization = percent_of(spend, planned, self._percent_places)

            year, month, platform, operation_type, budget_type = key
            lines.append(
                VarianceLine(
                    year=year,
                    month=month,
                    platform=platform,
                    operation_type=operation_type,
                    budget_type=budget_type,
                    status=status,
                    planned_amount=planned,
                    actual_spend=spend,
                    actual_result=outcome,
                    spend_variance=spend - planned,
                    budget_utilization=utilization,
                    roi=roi,
                    target_kpi=target_kpi,
                    target_value=target_value,
                    budget_ids=tuple(b.id for b in group_budgets),
                    result_ids=tuple(r.id for r in group_results),
                    team_allocations=_merge_allocations(group_budgets),
                )
            )

        report = ReconciliationReport(
            campaign_id=campaign_id,
            lines=tuple(lines),
            period_filter=flt,
        )

        logger.info(
            "budget_result_reconciled",
            extra={
                "campaign_id": str(campaign_id),
                "line_count": len(report.lines),
                "matched": report.count(LineStatus.MATCHED),
                "orphan_budgets": report.count(LineStatus.ORPHAN_BUDGET),
                "orphan_results": report.count(LineStatus.ORPHAN_RESULT),
            },
        )
        return report

    @traced_engine("kpi_reconciliation", "1.0", fingerprint_fields=("campaign_id", "kpis"))
    def reconcile_kpis(
        self,
        *,
        campaign_id: UUID,
        kpis: Sequence[KpiRecord],
    ) -> KpiReport:
        """
        Compute achievement ratios for each KPI.

        Postconditions:
            Ordered by priority ascending, then kpi_type.  achievement is
            None (not zero) for unmeasured KPIs and zero targets.
        """
        ordered = sorted(kpis, key=lambda k: (k.priority, k.kpi_type, str(k.id)))
        rows: list[KpiAchievement] = []
        for kpi in ordered:
            achievement = None
            gap = None
            if kpi.actual_value is not None:
                gap = kpi.target_value - kpi.actual_value
                if kpi.target_value != ZERO:
                    achievement = kpi.actual_value / kpi.target_value
            rows.append(
                KpiAchievement(
                    kpi_id=kpi.id,
                    kpi_type=kpi.kpi_type,
                    unit=kpi.unit,
                    priority=kpi.priority,
                    target_value=kpi.target_value,
                    actual_value=kpi.actual_value,
                    achievement=achievement,
                    gap=gap,
                )
            )

        report = KpiReport(campaign_id=campaign_id, kpis=tuple(rows))
        logger.info(
            "kpis_reconciled",
            extra={
                "campaign_id": str(campaign_id),
                "kpi_count": len(rows),
                "measured_count": report.measured_count,
            },
        )
        return report

"""
Tests for the Reconciliation Engine.

Covers:
- Matched, orphan budget and orphan result lines
- Summing of rows that share a key
- Ordering and idempotency
- Period filter
- Utilization / ROI percentages
- KPI achievement, including unmeasured KPIs
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from campaign_engines.reconciliation import LineStatus, ReconciliationEngine
from campaign_kernel.domain.dtos import (
    BudgetLine,
    KpiRecord,
    PeriodFilter,
    ResultLine,
    TeamAllocation,
)

CAMPAIGN_ID = uuid4()


def budget(year, month, amount, platform="google", operation="search", budget_type="media", **kw):
    return BudgetLine(
        id=uuid4(),
        campaign_id=CAMPAIGN_ID,
        year=year,
        month=month,
        platform=platform,
        operation_type=operation,
        budget_type=budget_type,
        amount=Decimal(amount),
        **kw,
    )


def result(year, month, spend, outcome="0", platform="google", operation="search", budget_type="media"):
    return ResultLine(
        id=uuid4(),
        campaign_id=CAMPAIGN_ID,
        year=year,
        month=month,
        platform=platform,
        operation_type=operation,
        budget_type=budget_type,
        actual_spend=Decimal(spend),
        actual_result=Decimal(outcome),
    )


class TestBudgetVsResult:

    def setup_method(self):
        self.engine = ReconciliationEngine()

    def test_january_matched_february_orphan_budget(self):
        """Budgets Jan 1000 and Feb 500, one Jan result of 950."""
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[budget(2025, 1, "1000"), budget(2025, 2, "500")],
            results=[result(2025, 1, "950")],
        )

        assert len(report.lines) == 2
        jan, feb = report.lines
        assert (jan.year, jan.month) == (2025, 1)
        assert jan.status is LineStatus.MATCHED
        assert jan.spend_variance == Decimal("-50")

        assert (feb.year, feb.month) == (2025, 2)
        assert feb.status is LineStatus.ORPHAN_BUDGET
        assert feb.actual_spend == Decimal("0")
        assert feb.spend_variance == Decimal("-500")

    def test_orphan_result(self):
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[],
            results=[result(2025, 3, "120", platform="meta")],
        )
        (line,) = report.lines
        assert line.status is LineStatus.ORPHAN_RESULT
        assert line.planned_amount == Decimal("0")
        assert line.spend_variance == Decimal("120")
        assert line.budget_utilization is None

    def test_rows_sharing_a_key_are_summed(self):
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[budget(2025, 1, "400"), budget(2025, 1, "600")],
            results=[result(2025, 1, "300"), result(2025, 1, "200")],
        )
        (line,) = report.lines
        assert line.planned_amount == Decimal("1000")
        assert line.actual_spend == Decimal("500")
        assert len(line.budget_ids) == 2
        assert len(line.result_ids) == 2

    def test_ordering_by_period_then_platform(self):
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[
                budget(2025, 2, "1", platform="google"),
                budget(2025, 1, "1", platform="meta"),
                budget(2025, 1, "1", platform="google", operation="display"),
                budget(2024, 12, "1", platform="tiktok"),
            ],
            results=[],
        )
        keys = [(l.year, l.month, l.platform, l.operation_type) for l in report.lines]
        assert keys == [
            (2024, 12, "tiktok", "search"),
            (2025, 1, "google", "display"),
            (2025, 1, "meta", "search"),
            (2025, 2, "google", "search"),
        ]

    def test_idempotent(self):
        budgets = [budget(2025, 1, "1000"), budget(2025, 2, "500", platform="meta")]
        results = [result(2025, 1, "950", "1200"), result(2025, 3, "10")]
        first = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID, budgets=budgets, results=results
        )
        second = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID, budgets=list(reversed(budgets)), results=results
        )
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_empty_campaign(self):
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID, budgets=[], results=[]
        )
        assert report.lines == ()
        assert report.planned_total == Decimal("0")

    def test_period_filter(self):
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[budget(2025, 1, "1000"), budget(2025, 2, "500")],
            results=[result(2025, 1, "950")],
            period_filter=PeriodFilter(year=2025, month=2),
        )
        (line,) = report.lines
        assert line.month == 2

    def test_utilization_and_roi(self):
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[budget(2025, 1, "1000")],
            results=[result(2025, 1, "800", "1200")],
        )
        (line,) = report.lines
        assert line.budget_utilization == Decimal("80.00")
        assert line.roi == Decimal("50.00")

    def test_zero_spend_roi_is_none(self):
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[budget(2025, 1, "1000")],
            results=[result(2025, 1, "0", "0")],
        )
        assert report.lines[0].roi is None

    def test_team_allocations_are_carried(self):
        team = uuid4()
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[
                budget(2025, 1, "600", allocations=(TeamAllocation(team, Decimal("200")),)),
                budget(2025, 1, "400", allocations=(TeamAllocation(team, Decimal("100")),)),
            ],
            results=[],
        )
        (alloc,) = report.lines[0].team_allocations
        assert alloc.allocation == Decimal("300")

    def test_summary_totals(self):
        report = self.engine.reconcile_budget_vs_result(
            campaign_id=CAMPAIGN_ID,
            budgets=[budget(2025, 1, "1000"), budget(2025, 2, "500")],
            results=[result(2025, 1, "950"), result(2025, 3, "25")],
        )
        summary = report.to_dict()["summary"]
        assert summary["planned_total"] == "1500"
        assert summary["actual_spend_total"] == "975"
        assert summary["matched"] == 1
        assert summary["orphan_budgets"] == 1
        assert summary["orphan_results"] == 1


class TestKpis:

    def setup_method(self):
        self.engine = ReconciliationEngine()

    def kpi(self, target, actual=None, priority=0, kpi_type="conversions"):
        return KpiRecord(
            id=uuid4(),
            campaign_id=CAMPAIGN_ID,
            kpi_type=kpi_type,
            unit="count",
            target_value=Decimal(target),
            actual_value=None if actual is None else Decimal(actual),
            priority=priority,
        )

    def test_achievement_ratio(self):
        report = self.engine.reconcile_kpis(
            campaign_id=CAMPAIGN_ID, kpis=[self.kpi("100", "75")]
        )
        (row,) = report.kpis
        assert row.achievement == Decimal("0.75")
        assert row.gap == Decimal("25")

    def test_unmeasured_kpi_is_none_not_zero(self):
        report = self.engine.reconcile_kpis(
            campaign_id=CAMPAIGN_ID, kpis=[self.kpi("100")]
        )
        (row,) = report.kpis
        assert row.achievement is None
        assert row.gap is None
        assert report.measured_count == 0

    def test_zero_target(self):
        report = self.engine.reconcile_kpis(
            campaign_id=CAMPAIGN_ID, kpis=[self.kpi("0", "5")]
        )
        assert report.kpis[0].achievement is None

    def test_ordered_by_priority(self):
        report = self.engine.reconcile_kpis(
            campaign_id=CAMPAIGN_ID,
            kpis=[
                self.kpi("1", priority=2, kpi_type="clicks"),
                self.kpi("1", priority=1, kpi_type="reach"),
                self.kpi("1", priority=1, kpi_type="cpa"),
            ],
        )
        assert [k.kpi_type for k in report.kpis] == ["cpa", "reach", "clicks"]


def test_engine_invocation_is_traced(captured_logs):
    ReconciliationEngine().reconcile_budget_vs_result(
        campaign_id=CAMPAIGN_ID, budgets=[budget(2025, 1, "1")], results=[]
    )
    traces = [r for r in captured_logs() if r["message"] == "CAMPAIGN_ENGINE_TRACE"]
    assert traces
    assert traces[-1]["engine_name"] == "reconciliation"
    assert len(traces[-1]["input_fingerprint"]) == 16


@pytest.mark.parametrize("places,expected", [(0, Decimal("33")), (4, Decimal("33.3333"))])
def test_percent_places(places, expected):
    engine = ReconciliationEngine(percent_places=places)
    report = engine.reconcile_budget_vs_result(
        campaign_id=CAMPAIGN_ID,
        budgets=[budget(2025, 1, "3")],
        results=[result(2025, 1, "1")],
    )
    assert report.lines[0].budget_utilization == expected

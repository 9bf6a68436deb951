"""
Tests for CSV rendering of reconciliation reports.
"""

import csv
import io
from decimal import Decimal
from uuid import uuid4

from campaign_engines.export import RECONCILIATION_CSV_HEADERS, render_reconciliation_csv
from campaign_engines.reconciliation import ReconciliationEngine
from campaign_kernel.domain.dtos import BudgetLine, ResultLine


def test_renders_one_row_per_line():
    campaign_id = uuid4()
    budgets = [
        BudgetLine(
            id=uuid4(), campaign_id=campaign_id, year=2025, month=1,
            platform="google", operation_type="search", budget_type="media",
            amount=Decimal("1000"), target_kpi="cpa", target_value=Decimal("20"),
        ),
    ]
    results = [
        ResultLine(
            id=uuid4(), campaign_id=campaign_id, year=2025, month=2,
            platform="meta", operation_type="social", budget_type="media",
            actual_spend=Decimal("40"), actual_result=Decimal("60"),
        ),
    ]
    report = ReconciliationEngine().reconcile_budget_vs_result(
        campaign_id=campaign_id, budgets=budgets, results=results
    )

    rows = list(csv.DictReader(io.StringIO(render_reconciliation_csv(report, "Spring"))))

    assert len(rows) == 2
    assert tuple(rows[0].keys()) == RECONCILIATION_CSV_HEADERS

    planned, orphan = rows
    assert planned["campaignName"] == "Spring"
    assert planned["budgetAmount"] == "1000"
    assert planned["actualSpend"] == ""
    assert planned["targetKpi"] == "cpa"
    assert planned["status"] == "orphan_budget"

    assert orphan["budgetAmount"] == ""
    assert orphan["actualSpend"] == "40"
    assert orphan["roi"] == "50.00"
    assert orphan["variance"] == "40"

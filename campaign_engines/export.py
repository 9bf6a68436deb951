"""
Module: campaign_engines.export
Responsibility:
    Render reconciliation reports as CSV for spreadsheet users.

Architecture position:
    Engines -- pure rendering, writes to an in-memory buffer only.

Column layout follows the budget/results export: one row per variance line,
blank cells for values that do not apply (e.g. utilization on an orphan
result).
"""

from __future__ import annotations

import csv
import io
from decimal import Decimal

from campaign_engines.reconciliation import ReconciliationReport

RECONCILIATION_CSV_HEADERS = (
    "campaignId",
    "campaignName",
    "year",
    "month",
    "platform",
    "operationType",
    "budgetType",
    "budgetAmount",
    "targetKpi",
    "targetValue",
    "actualSpend",
    "actualResult",
    "budgetUtilization",
    "roi",
    "variance",
    "status",
    "teamAllocations",
)


def _cell(value: Decimal | str | int | None) -> str:
    return "" if value is None else str(value)


def render_reconciliation_csv(
    report: ReconciliationReport,
    campaign_name: str | None = None,
) -> str:
    """Return ``report`` as CSV text with a header row."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(RECONCILIATION_CSV_HEADERS)

    for line in report.lines:
        allocations = ";".join(
            f"{a.team_name or a.team_id}:{a.allocation}" for a in line.team_allocations
        )
        writer.writerow(
            [
                str(report.campaign_id),
                _cell(campaign_name),
                line.year,
                line.month,
                line.platform,
                line.operation_type,
                line.budget_type,
                _cell(line.planned_amount if line.budget_ids else None),
                _cell(line.target_kpi),
                _cell(line.target_value),
                _cell(line.actual_spend if line.result_ids else None),
                _cell(line.actual_result if line.result_ids else None),
                _cell(line.budget_utilization),
                _cell(line.roi),
                _cell(line.spend_variance),
                line.status.value,
                allocations,
            ]
        )

    return buf.getvalue()

"""
CampaignReportingService -- read-side facade over the reporting engines.

Responsibility:
    Loads DTOs through CampaignSelector and hands them to the pure engines:
    budget-vs-result reconciliation, KPI achievement, campaign rollup, the
    monthly overview and the division summary.

Architecture position:
    Kernel > Services.  Never writes; safe to call inside any transaction.

Failure modes:
    - CampaignNotFoundError for an unknown campaign (an empty campaign is
      not an error, it yields an empty report).
    - InvalidPeriodError for a malformed filter or overview month.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from campaign_engines.overview import DivisionTotal, MonthlyOverview, OverviewCalculator
from campaign_engines.reconciliation import KpiReport, ReconciliationEngine, ReconciliationReport
from campaign_engines.rollup import CampaignRollup, CampaignRollupCalculator
from campaign_kernel.domain.dtos import PeriodFilter
from campaign_kernel.domain.period import Period
from campaign_kernel.logging_config import LogContext
from campaign_kernel.models.campaign import Campaign
from campaign_kernel.selectors.campaign_selector import CampaignSelector
from campaign_kernel.services.base import BaseService


class CampaignReportingService(BaseService[Campaign]):
    """Campaign reports as frozen DTOs with ``to_dict()``."""

    def __init__(self, session: Session, percent_places: int = 2):
        super().__init__(session)
        self._selector = CampaignSelector(session)
        self._reconciliation = ReconciliationEngine(percent_places=percent_places)
        self._rollup = CampaignRollupCalculator()
        self._overview = OverviewCalculator(percent_places=percent_places)

    def reconcile_budget_vs_result(
        self,
        campaign_id: UUID,
        period_filter: PeriodFilter | None = None,
    ) -> ReconciliationReport:
        with LogContext.bind(campaign_id=str(campaign_id)):
            self._selector.require_campaign(campaign_id)
            return self._reconciliation.reconcile_budget_vs_result(
                campaign_id=campaign_id,
                budgets=self._selector.budget_lines(campaign_id, period_filter),
                results=self._selector.result_lines(campaign_id, period_filter),
                period_filter=period_filter,
            )

    def reconcile_kpis(self, campaign_id: UUID) -> KpiReport:
        with LogContext.bind(campaign_id=str(campaign_id)):
            self._selector.require_campaign(campaign_id)
            return self._reconciliation.reconcile_kpis(
                campaign_id=campaign_id,
                kpis=self._selector.kpi_records(campaign_id),
            )

    def rollup(self, campaign_id: UUID) -> CampaignRollup:
        with LogContext.bind(campaign_id=str(campaign_id)):
            campaign = self._selector.campaign_info(campaign_id)
            return self._rollup.rollup(
                campaign=campaign,
                budgets=self._selector.budget_lines(campaign_id),
                results=self._selector.result_lines(campaign_id),
            )

    def monthly_overview(self, year: int, month: int) -> MonthlyOverview:
        period = Period(year, month)
        return self._overview.monthly_overview(
            period=period,
            budgets=self._selector.budget_lines_for_period(period),
            results=self._selector.result_lines_for_period(period),
        )

    def division_summary(self) -> tuple[DivisionTotal, ...]:
        return self._overview.division_summary(rows=self._selector.division_rows())

    def campaign_name(self, campaign_id: UUID) -> str:
        return self._selector.campaign_info(campaign_id).name

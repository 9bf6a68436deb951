"""
Module: campaign_kernel.selectors.campaign_selector
Responsibility: Read-only campaign queries that feed the reporting engines:
    campaign headers, budget lines with their team allocations, result lines,
    KPI records, month-wide line sets and division-tagged budget rows.
Architecture position: Kernel > Selectors.  May import from models/, domain/
    and selectors/base.py.  MUST NOT import from services/ or campaign_engines.

Invariants enforced:
    - Selectors never sum money in SQL.  Amounts are returned as exact Decimal
      DTO fields and aggregated by the engines, so SQLite (string storage) and
      PostgreSQL (NUMERIC) report identical totals.

Failure modes:
    - CampaignNotFoundError from campaign_info() / require_campaign() when the
      campaign id does not exist.
"""

from uuid import UUID

from sqlalchemy import select

from campaign_kernel.db.types import ZERO
from campaign_kernel.domain.dtos import (
    BudgetLine,
    CampaignInfo,
    DivisionBudgetRow,
    KpiRecord,
    PeriodFilter,
    ResultLine,
)
from campaign_kernel.domain.period import Period
from campaign_kernel.exceptions import CampaignNotFoundError
from campaign_kernel.models.budget import Budget
from campaign_kernel.models.campaign import Campaign
from campaign_kernel.models.client import Client
from campaign_kernel.models.kpi import CampaignKpi
from campaign_kernel.models.result import Result
from campaign_kernel.selectors.base import BaseSelector


def _apply_filter(stmt, model, period_filter: PeriodFilter | None):
    if period_filter is None:
        return stmt
    if period_filter.year is not None:
        stmt = stmt.where(model.year == period_filter.year)
    if period_filter.month is not None:
        stmt = stmt.where(model.month == period_filter.month)
    if period_filter.platform is not None:
        stmt = stmt.where(model.platform == period_filter.platform)
    return stmt


def _line_order(model):
    return (
        model.year,
        model.month,
        model.platform,
        model.operation_type,
        model.budget_type,
        model.id,
    )


class CampaignSelector(BaseSelector[Campaign]):
    """
    Selector for campaign reporting inputs.

    All list methods return DTOs in a stable order: budget and result lines
    by (year, month, platform, operation_type, budget_type, id), KPIs by
    (priority, kpi_type, id).
    """

    def require_campaign(self, campaign_id: UUID) -> Campaign:
        """Load the campaign row or raise CampaignNotFoundError."""
        campaign = self.session.get(Campaign, campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(str(campaign_id))
        return campaign

    def campaign_info(self, campaign_id: UUID) -> CampaignInfo:
        return self.require_campaign(campaign_id).to_dto()

    def budget_lines(
        self,
        campaign_id: UUID,
        period_filter: PeriodFilter | None = None,
    ) -> list[BudgetLine]:
        stmt = select(Budget).where(Budget.campaign_id == campaign_id)
        stmt = _apply_filter(stmt, Budget, period_filter).order_by(*_line_order(Budget))
        return [b.to_dto() for b in self.session.scalars(stmt)]

    def result_lines(
        self,
        campaign_id: UUID,
        period_filter: PeriodFilter | None = None,
    ) -> list[ResultLine]:
        stmt = select(Result).where(Result.campaign_id == campaign_id)
        stmt = _apply_filter(stmt, Result, period_filter).order_by(*_line_order(Result))
        return [r.to_dto() for r in self.session.scalars(stmt)]

    def kpi_records(self, campaign_id: UUID) -> list[KpiRecord]:
        stmt = (
            select(CampaignKpi)
            .where(CampaignKpi.campaign_id == campaign_id)
            .order_by(CampaignKpi.priority, CampaignKpi.kpi_type, CampaignKpi.id)
        )
        return [k.to_dto() for k in self.session.scalars(stmt)]

    def budget_lines_for_period(self, period: Period) -> list[BudgetLine]:
        """Budget lines of every campaign for one month."""
        stmt = (
            select(Budget)
            .where(Budget.year == period.year, Budget.month == period.month)
            .order_by(Budget.campaign_id, *_line_order(Budget))
        )
        return [b.to_dto() for b in self.session.scalars(stmt)]

    def result_lines_for_period(self, period: Period) -> list[ResultLine]:
        """Result lines of every campaign for one month."""
        stmt = (
            select(Result)
            .where(Result.year == period.year, Result.month == period.month)
            .order_by(Result.campaign_id, *_line_order(Result))
        )
        return [r.to_dto() for r in self.session.scalars(stmt)]

    def division_rows(self) -> list[DivisionBudgetRow]:
        """
        One row per budget line, tagged with the owning client's division.

        Campaigns without budget lines yield a single zero-amount row with
        ``budget_id`` None.
        """
        stmt = (
            select(Client.business_division, Campaign.id, Budget.id, Budget.amount)
            .join(Campaign, Campaign.client_id == Client.id)
            .outerjoin(Budget, Budget.campaign_id == Campaign.id)
            .order_by(Client.business_division, Campaign.id, Budget.id)
        )
        rows: list[DivisionBudgetRow] = []
        for division, campaign_id, budget_id, amount in self.session.execute(stmt):
            rows.append(
                DivisionBudgetRow(
                    business_division=division,
                    campaign_id=campaign_id,
                    budget_id=budget_id,
                    amount=amount if amount is not None else ZERO,
                )
            )
        return rows

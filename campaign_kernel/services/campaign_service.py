"""
CampaignService -- maintenance of clients, campaigns, teams and their lines.

Responsibility:
    Creates and updates the entity graph the reports read: clients with
    their business classification, campaigns with a validated period,
    teams, budget lines, result lines, KPIs and team assignments.

Architecture position:
    Kernel > Services -- imperative shell.  Reads and writes through
    ``Repository`` instances; allocation checks are delegated to
    AllocationService so the ceiling is enforced in one place.

Invariants enforced:
    - CLIENT_CLASSIFICATION: business_division and sales_department are
      non-blank.
    - PERIOD_ORDER: a campaign's end month never precedes its start month.
    - NON_NEGATIVE_AMOUNTS: budget amounts, campaign budgets and result
      figures are >= 0.
    - ALLOCATION_CEILING: lowering a budget amount re-validates the
      existing allocations under the budget row lock.

Failure modes:
    - *NotFoundError for unknown parent ids.
    - MissingClassificationError, InvalidPeriodError, NegativeAmountError,
      DuplicateCampaignTeamError, AllocationExceededError.
    - InvalidAmountError for NaN, Infinity or unparseable amounts.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from campaign_kernel.db.types import ZERO, to_decimal
from campaign_kernel.domain.period import Period, validate_campaign_period
from campaign_kernel.exceptions import (
    BudgetNotFoundError,
    CampaignNotFoundError,
    ClientNotFoundError,
    DuplicateCampaignTeamError,
    KpiNotFoundError,
    MissingClassificationError,
    NegativeAmountError,
    TeamNotFoundError,
)
from campaign_kernel.logging_config import LogContext, get_logger
from campaign_kernel.models.budget import Budget
from campaign_kernel.models.campaign import Campaign, CampaignStatus
from campaign_kernel.models.client import Client
from campaign_kernel.models.kpi import CampaignKpi
from campaign_kernel.models.result import Result
from campaign_kernel.models.team import CampaignTeam, Team
from campaign_kernel.services.allocation_service import AllocationService
from campaign_kernel.services.base import BaseService
from campaign_kernel.services.repository import Repository

logger = get_logger("services.campaign")

_BUDGET_KEY_FIELDS = ("year", "month", "platform", "operation_type", "budget_type")


def _non_negative(field: str, value) -> Decimal:
    amount = to_decimal(value, field)
    if amount < ZERO:
        raise NegativeAmountError(field, amount)
    return amount


def _required_text(field: str, value: str | None) -> str:
    if value is None or not str(value).strip():
        raise MissingClassificationError(field)
    return str(value).strip()


class CampaignService(BaseService[Campaign]):
    """
    Service for maintaining campaign data.

    Returns ORM rows to callers inside the same unit of work; reports go
    through CampaignReportingService, which returns DTOs.
    """

    def __init__(self, session: Session, enforce_ceiling: bool = True):
        super().__init__(session)
        self.clients = Repository(session, Client, ClientNotFoundError)
        self.campaigns = Repository(session, Campaign, CampaignNotFoundError)
        self.budgets = Repository(session, Budget, BudgetNotFoundError)
        self.results = Repository(session, Result)
        self.teams = Repository(session, Team, TeamNotFoundError)
        self.kpis = Repository(session, CampaignKpi, KpiNotFoundError)
        self.campaign_teams = Repository(session, CampaignTeam)
        self._allocations = AllocationService(session, enforce_ceiling=enforce_ceiling)

    # ------------------------------------------------------------------
    # Clients and teams
    # ------------------------------------------------------------------

    def create_client(
        self,
        name: str,
        business_division: str,
        sales_department: str,
        *,
        manager_id: UUID | None = None,
        sales_channel: str | None = None,
        industry: str | None = None,
        priority: int = 0,
    ) -> Client:
        """
        Register a client.

        Raises:
            MissingClassificationError: blank business_division or
                sales_department.
        """
        client = self.clients.create(
            name=name,
            business_division=_required_text("business_division", business_division),
            sales_department=_required_text("sales_department", sales_department),
            manager_id=manager_id,
            sales_channel=sales_channel,
            industry=industry,
            priority=priority,
        )
        logger.info(
            "client_created",
            extra={"client_id": str(client.id), "business_division": client.business_division},
        )
        return client

    def create_team(
        self,
        name: str,
        *,
        description: str | None = None,
        color: str | None = None,
    ) -> Team:
        return self.teams.create(name=name, description=description, color=color)

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------

    def create_campaign(
        self,
        client_id: UUID,
        name: str,
        total_budget: Decimal | int | str,
        start_year: int,
        start_month: int,
        *,
        end_year: int | None = None,
        end_month: int | None = None,
        purpose: str | None = None,
        status: CampaignStatus = CampaignStatus.ACTIVE,
    ) -> Campaign:
        """
        Create a campaign for an existing client.

        Raises:
            ClientNotFoundError: unknown client_id.
            InvalidPeriodError: malformed months, half an end period, or an
                end before the start.
            NegativeAmountError: total_budget < 0.
        """
        self.clients.get(client_id)
        start, end = validate_campaign_period(start_year, start_month, end_year, end_month)
        campaign = self.campaigns.create(
            client_id=client_id,
            name=name,
            purpose=purpose,
            total_budget=_non_negative("total_budget", total_budget),
            start_year=start.year,
            start_month=start.month,
            end_year=end.year if end else None,
            end_month=end.month if end else None,
            status=CampaignStatus(status).value,
        )
        logger.info(
            "campaign_created",
            extra={
                "campaign_id": str(campaign.id),
                "client_id": str(client_id),
                "start": str(start),
                "end": str(end) if end else None,
            },
        )
        return campaign

    def update_campaign_period(
        self,
        campaign_id: UUID,
        start_year: int,
        start_month: int,
        end_year: int | None = None,
        end_month: int | None = None,
    ) -> Campaign:
        campaign = self.campaigns.get(campaign_id)
        start, end = validate_campaign_period(start_year, start_month, end_year, end_month)
        return self.campaigns.update(
            campaign,
            start_year=start.year,
            start_month=start.month,
            end_year=end.year if end else None,
            end_month=end.month if end else None,
        )

    def set_campaign_status(self, campaign_id: UUID, status: CampaignStatus) -> Campaign:
        campaign = self.campaigns.get(campaign_id)
        return self.campaigns.update(campaign, status=CampaignStatus(status).value)

    def assign_team(
        self,
        campaign_id: UUID,
        team_id: UUID,
        *,
        role: str | None = None,
        is_lead: bool = False,
    ) -> CampaignTeam:
        """
        Put a team on a campaign.

        Raises:
            DuplicateCampaignTeamError: the team is already assigned.
        """
        self.campaigns.get(campaign_id)
        self.teams.get(team_id)
        if self.campaign_teams.find_many({"campaign_id": campaign_id, "team_id": team_id}):
            raise DuplicateCampaignTeamError(str(campaign_id), str(team_id))
        return self.campaign_teams.create(
            campaign_id=campaign_id, team_id=team_id, role=role, is_lead=is_lead
        )

    # ------------------------------------------------------------------
    # Budget and result lines
    # ------------------------------------------------------------------

    def add_budget(
        self,
        campaign_id: UUID,
        year: int,
        month: int,
        platform: str,
        operation_type: str,
        budget_type: str,
        amount: Decimal | int | str,
        *,
        target_kpi: str | None = None,
        target_value: Decimal | int | str | None = None,
    ) -> Budget:
        """
        Add a planned line to a campaign.

        Raises:
            CampaignNotFoundError: unknown campaign_id.
            InvalidPeriodError: month outside 1..12.
            NegativeAmountError: amount < 0.
        """
        self.campaigns.get(campaign_id)
        period = Period(year, month)
        with LogContext.bind(campaign_id=str(campaign_id)):
            budget = self.budgets.create(
                campaign_id=campaign_id,
                year=period.year,
                month=period.month,
                platform=platform,
                operation_type=operation_type,
                budget_type=budget_type,
                amount=_non_negative("amount", amount),
                target_kpi=target_kpi,
                target_value=None if target_value is None else to_decimal(target_value, "target_value"),
            )
            logger.info(
                "budget_added",
                extra={"budget_id": str(budget.id), "amount": str(budget.amount)},
            )
        return budget

    def update_budget(self, budget_id: UUID, **changes) -> Budget:
        """
        Change fields of a budget line.

        A new ``amount`` is checked against the line's existing team
        allocations while the budget row is locked.

        Raises:
            BudgetNotFoundError: unknown budget_id.
            InvalidAmountError: amount is not a finite decimal.
            NegativeAmountError: amount < 0.
            AllocationExceededError: the allocations would exceed the new
                amount (when the ceiling is enforced).
        """
        budget = self.session.execute(
            select(Budget)
            .where(Budget.id == budget_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if budget is None:
            raise BudgetNotFoundError(str(budget_id))

        if "amount" in changes:
            changes["amount"] = _non_negative("amount", changes["amount"])
            self._allocations.revalidate_for_amount(budget, changes["amount"])
        if "target_value" in changes and changes["target_value"] is not None:
            changes["target_value"] = to_decimal(changes["target_value"], "target_value")
        if "year" in changes or "month" in changes:
            period = Period(changes.get("year", budget.year), changes.get("month", budget.month))
            changes["year"], changes["month"] = period.year, period.month

        return self.budgets.update(budget, **changes)

    def delete_budget(self, budget_id: UUID) -> None:
        self.budgets.delete(self.budgets.get(budget_id))

    def record_result(
        self,
        campaign_id: UUID,
        year: int,
        month: int,
        platform: str,
        operation_type: str,
        budget_type: str,
        actual_spend: Decimal | int | str,
        actual_result: Decimal | int | str = ZERO,
    ) -> Result:
        """Record an actual line; it pairs with budget lines of the same key."""
        self.campaigns.get(campaign_id)
        period = Period(year, month)
        result = self.results.create(
            campaign_id=campaign_id,
            year=period.year,
            month=period.month,
            platform=platform,
            operation_type=operation_type,
            budget_type=budget_type,
            actual_spend=_non_negative("actual_spend", actual_spend),
            actual_result=_non_negative("actual_result", actual_result),
        )
        logger.info(
            "result_recorded",
            extra={
                "campaign_id": str(campaign_id),
                "result_id": str(result.id),
                "actual_spend": str(result.actual_spend),
            },
        )
        return result

    # ------------------------------------------------------------------
    # KPIs
    # ------------------------------------------------------------------

    def add_kpi(
        self,
        campaign_id: UUID,
        kpi_type: str,
        unit: str,
        target_value: Decimal | int | str,
        *,
        priority: int = 0,
        description: str | None = None,
        actual_value: Decimal | int | str | None = None,
    ) -> CampaignKpi:
        self.campaigns.get(campaign_id)
        return self.kpis.create(
            campaign_id=campaign_id,
            kpi_type=kpi_type,
            unit=unit,
            target_value=to_decimal(target_value, "target_value"),
            actual_value=None if actual_value is None else to_decimal(actual_value, "actual_value"),
            priority=priority,
            description=description,
        )

    def record_kpi_actual(
        self,
        kpi_id: UUID,
        actual_value: Decimal | int | str | None,
    ) -> CampaignKpi:
        """Set (or clear, with None) the measured value of a KPI."""
        kpi = self.kpis.get(kpi_id)
        value = None if actual_value is None else to_decimal(actual_value, "actual_value")
        return self.kpis.update(kpi, actual_value=value)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def budgets_for_key(
        self,
        campaign_id: UUID,
        year: int,
        month: int,
        platform: str,
        operation_type: str,
        budget_type: str,
    ) -> list[Budget]:
        """Budget lines sharing one reconciliation key."""
        values = (year, month, platform, operation_type, budget_type)
        filters = dict(zip(_BUDGET_KEY_FIELDS, values))
        filters["campaign_id"] = campaign_id
        return self.budgets.find_many(filters)

"""ORM models for the campaign kernel."""

from campaign_kernel.models.budget import Budget, BudgetTeam
from campaign_kernel.models.campaign import Campaign, CampaignStatus
from campaign_kernel.models.client import Client
from campaign_kernel.models.kpi import CampaignKpi
from campaign_kernel.models.result import Result
from campaign_kernel.models.team import CampaignTeam, Team

__all__ = [
    "Budget",
    "BudgetTeam",
    "Campaign",
    "CampaignKpi",
    "CampaignStatus",
    "CampaignTeam",
    "Client",
    "Result",
    "Team",
]

"""
Pure domain layer.

Immutable DTOs and value objects with NO dependencies on the ORM, the
database, the clock or I/O.
"""

from campaign_kernel.domain.dtos import (
    BudgetLine,
    CampaignInfo,
    DivisionBudgetRow,
    KpiRecord,
    LineKey,
    PeriodFilter,
    ResultLine,
    TeamAllocation,
)
from campaign_kernel.domain.period import Period, validate_campaign_period

__all__ = [
    "BudgetLine",
    "CampaignInfo",
    "DivisionBudgetRow",
    "KpiRecord",
    "LineKey",
    "Period",
    "PeriodFilter",
    "ResultLine",
    "TeamAllocation",
    "validate_campaign_period",
]

"""Selectors for the campaign kernel (read side)."""

from campaign_kernel.selectors.base import BaseSelector
from campaign_kernel.selectors.campaign_selector import CampaignSelector

__all__ = [
    "BaseSelector",
    "CampaignSelector",
]

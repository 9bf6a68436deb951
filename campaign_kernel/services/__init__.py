"""Kernel services (write side and reporting facade)."""

from campaign_kernel.services.allocation_service import AllocationService
from campaign_kernel.services.base import BaseService
from campaign_kernel.services.campaign_service import CampaignService
from campaign_kernel.services.reporting_service import CampaignReportingService
from campaign_kernel.services.repository import Repository

__all__ = [
    "AllocationService",
    "BaseService",
    "CampaignReportingService",
    "CampaignService",
    "Repository",
]

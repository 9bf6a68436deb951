"""
Module: campaign_kernel.models.kpi
Responsibility: ORM persistence for campaign KPI targets and actuals.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ DTOs.

priority only drives display ordering; kpi_type is not unique per campaign.
actual_value stays NULL until the KPI has been measured.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campaign_kernel.db.base import TrackedBase
from campaign_kernel.domain.dtos import KpiRecord


class CampaignKpi(TrackedBase):
    """A named KPI target/actual pair."""

    __tablename__ = "campaign_kpis"

    __table_args__ = (
        Index("idx_campaign_kpi_campaign", "campaign_id"),
    )

    campaign_id: Mapped[UUID] = mapped_column(ForeignKey("campaigns.id"), nullable=False)
    kpi_type: Mapped[str] = mapped_column(String(100), nullable=False)
    unit: Mapped[str] = mapped_column(String(50), nullable=False)
    target_value: Mapped[Decimal] = mapped_column(nullable=False)
    actual_value: Mapped[Decimal | None] = mapped_column(nullable=True)
    priority: Mapped[int] = mapped_column(default=0, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    campaign: Mapped["Campaign"] = relationship("Campaign", back_populates="kpis")  # noqa: F821

    def to_dto(self) -> KpiRecord:
        return KpiRecord(
            id=self.id,
            campaign_id=self.campaign_id,
            kpi_type=self.kpi_type,
            unit=self.unit,
            target_value=self.target_value,
            actual_value=self.actual_value,
            priority=self.priority,
            description=self.description,
        )

    def __repr__(self) -> str:
        return f"<CampaignKpi {self.kpi_type} target={self.target_value} actual={self.actual_value}>"

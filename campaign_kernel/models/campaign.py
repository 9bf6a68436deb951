"""
Module: campaign_kernel.models.campaign
Responsibility: ORM persistence for campaigns -- the parent of budget lines,
    results, KPIs and team assignments.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ value objects.

Invariants enforced:
    - The end (year, month), when present, does not precede the start.
      Checked by CampaignService through validate_campaign_period().
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campaign_kernel.db.base import TrackedBase
from campaign_kernel.domain.dtos import CampaignInfo
from campaign_kernel.domain.period import Period


class CampaignStatus(str, Enum):
    """Lifecycle status of a campaign."""

    PLANNING = "planning"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Campaign(TrackedBase):
    """
    A marketing campaign for one client.

    Guarantees:
        - client_id is required.
        - total_budget is an exact Decimal.
    """

    __tablename__ = "campaigns"

    __table_args__ = (
        Index("idx_campaign_client", "client_id"),
        Index("idx_campaign_start", "start_year", "start_month"),
    )

    client_id: Mapped[UUID] = mapped_column(ForeignKey("clients.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    purpose: Mapped[str | None] = mapped_column(String(500), nullable=True)
    total_budget: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    start_year: Mapped[int] = mapped_column(nullable=False)
    start_month: Mapped[int] = mapped_column(nullable=False)
    end_year: Mapped[int | None] = mapped_column(nullable=True)
    end_month: Mapped[int | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=CampaignStatus.ACTIVE.value, nullable=False
    )

    client: Mapped["Client"] = relationship("Client", back_populates="campaigns")  # noqa: F821
    budgets: Mapped[list["Budget"]] = relationship(  # noqa: F821
        "Budget",
        back_populates="campaign",
        cascade="all, delete-orphan",
    )
    results: Mapped[list["Result"]] = relationship(  # noqa: F821
        "Result",
        back_populates="campaign",
        cascade="all, delete-orphan",
    )
    kpis: Mapped[list["CampaignKpi"]] = relationship(  # noqa: F821
        "CampaignKpi",
        back_populates="campaign",
        cascade="all, delete-orphan",
    )
    campaign_teams: Mapped[list["CampaignTeam"]] = relationship(  # noqa: F821
        "CampaignTeam",
        back_populates="campaign",
        cascade="all, delete-orphan",
    )

    def to_dto(self) -> CampaignInfo:
        end = None
        if self.end_year is not None and self.end_month is not None:
            end = Period(self.end_year, self.end_month)
        return CampaignInfo(
            id=self.id,
            client_id=self.client_id,
            name=self.name,
            total_budget=self.total_budget,
            start=Period(self.start_year, self.start_month),
            end=end,
            status=self.status,
        )

    def __repr__(self) -> str:
        return f"<Campaign {self.name} {self.start_year}-{self.start_month:02d}>"

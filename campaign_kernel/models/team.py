"""
Module: campaign_kernel.models.team
Responsibility: ORM persistence for teams and their campaign participation.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - CampaignTeam uniqueness: one row per (campaign_id, team_id).
"""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campaign_kernel.db.base import TrackedBase


class Team(TrackedBase):
    """A named group that receives budget allocations."""

    __tablename__ = "teams"

    __table_args__ = (
        UniqueConstraint("name", name="uq_team_name"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Team {self.name}>"


class CampaignTeam(TrackedBase):
    """A team's role on a campaign."""

    __tablename__ = "campaign_teams"

    __table_args__ = (
        UniqueConstraint("campaign_id", "team_id", name="uq_campaign_team"),
        Index("idx_campaign_team_team", "team_id"),
    )

    campaign_id: Mapped[UUID] = mapped_column(ForeignKey("campaigns.id"), nullable=False)
    team_id: Mapped[UUID] = mapped_column(ForeignKey("teams.id"), nullable=False)
    role: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_lead: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    campaign: Mapped["Campaign"] = relationship(  # noqa: F821
        "Campaign", back_populates="campaign_teams"
    )
    team: Mapped["Team"] = relationship("Team")

    def __repr__(self) -> str:
        lead = " lead" if self.is_lead else ""
        return f"<CampaignTeam campaign={self.campaign_id} team={self.team_id}{lead}>"

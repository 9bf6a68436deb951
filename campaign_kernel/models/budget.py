"""
Module: campaign_kernel.models.budget
Responsibility: ORM persistence for budget lines and their team allocations.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ DTOs.

Invariants enforced:
    - BudgetTeam uniqueness: one row per (budget_id, team_id) (DB constraint).
    - amount >= 0 and sum(allocation) <= amount are NOT database constraints;
      they are enforced by CampaignService and AllocationService, which lock
      the budget row before validating.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campaign_kernel.db.base import TrackedBase
from campaign_kernel.domain.dtos import BudgetLine, TeamAllocation


class Budget(TrackedBase):
    """
    One planned spending line of a campaign.

    Conceptually keyed by (campaign, year, month, platform, operation_type,
    budget_type); the key is not unique in the database, duplicate lines are
    summed by the reconciliation engine.
    """

    __tablename__ = "budgets"

    __table_args__ = (
        Index("idx_budget_campaign", "campaign_id"),
        Index("idx_budget_period", "year", "month"),
        Index("idx_budget_platform", "platform"),
    )

    campaign_id: Mapped[UUID] = mapped_column(ForeignKey("campaigns.id"), nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)
    platform: Mapped[str] = mapped_column(String(100), nullable=False)
    operation_type: Mapped[str] = mapped_column(String(100), nullable=False)
    budget_type: Mapped[str] = mapped_column(String(100), nullable=False)
    amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    target_kpi: Mapped[str | None] = mapped_column(String(100), nullable=True)
    target_value: Mapped[Decimal | None] = mapped_column(nullable=True)

    campaign: Mapped["Campaign"] = relationship("Campaign", back_populates="budgets")  # noqa: F821
    budget_teams: Mapped[list["BudgetTeam"]] = relationship(
        "BudgetTeam",
        back_populates="budget",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_dto(self) -> BudgetLine:
        allocations = tuple(
            sorted(
                (bt.to_dto() for bt in self.budget_teams),
                key=lambda a: str(a.team_id),
            )
        )
        return BudgetLine(
            id=self.id,
            campaign_id=self.campaign_id,
            year=self.year,
            month=self.month,
            platform=self.platform,
            operation_type=self.operation_type,
            budget_type=self.budget_type,
            amount=self.amount,
            target_kpi=self.target_kpi,
            target_value=self.target_value,
            allocations=allocations,
        )

    def __repr__(self) -> str:
        return (
            f"<Budget {self.year}-{self.month:02d} {self.platform}/"
            f"{self.operation_type}/{self.budget_type} {self.amount}>"
        )


class BudgetTeam(TrackedBase):
    """
    A team's allocation of one budget line.

    Guarantees:
        - (budget_id, team_id) is unique.
    """

    __tablename__ = "budget_teams"

    __table_args__ = (
        UniqueConstraint("budget_id", "team_id", name="uq_budget_team"),
        Index("idx_budget_team_team", "team_id"),
    )

    budget_id: Mapped[UUID] = mapped_column(ForeignKey("budgets.id"), nullable=False)
    team_id: Mapped[UUID] = mapped_column(ForeignKey("teams.id"), nullable=False)
    allocation: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    budget: Mapped["Budget"] = relationship("Budget", back_populates="budget_teams")
    team: Mapped["Team"] = relationship("Team", lazy="joined")  # noqa: F821

    def to_dto(self) -> TeamAllocation:
        return TeamAllocation(
            team_id=self.team_id,
            allocation=self.allocation,
            budget_id=self.budget_id,
            team_name=self.team.name if self.team is not None else None,
        )

    def __repr__(self) -> str:
        return f"<BudgetTeam budget={self.budget_id} team={self.team_id} {self.allocation}>"

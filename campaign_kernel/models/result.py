"""
Module: campaign_kernel.models.result
Responsibility: ORM persistence for actual-performance lines.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ DTOs.

Results pair with budget lines by attribute equality on (year, month,
platform, operation_type, budget_type); there is no foreign key between them
and an unmatched row on either side is a legitimate state.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campaign_kernel.db.base import TrackedBase
from campaign_kernel.domain.dtos import ResultLine


class Result(TrackedBase):
    """Actual spend and outcome for one campaign line and month."""

    __tablename__ = "results"

    __table_args__ = (
        Index("idx_result_campaign", "campaign_id"),
        Index("idx_result_period", "year", "month"),
    )

    campaign_id: Mapped[UUID] = mapped_column(ForeignKey("campaigns.id"), nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(nullable=False)
    platform: Mapped[str] = mapped_column(String(100), nullable=False)
    operation_type: Mapped[str] = mapped_column(String(100), nullable=False)
    budget_type: Mapped[str] = mapped_column(String(100), nullable=False)
    actual_spend: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
    actual_result: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    campaign: Mapped["Campaign"] = relationship("Campaign", back_populates="results")  # noqa: F821

    def to_dto(self) -> ResultLine:
        return ResultLine(
            id=self.id,
            campaign_id=self.campaign_id,
            year=self.year,
            month=self.month,
            platform=self.platform,
            operation_type=self.operation_type,
            budget_type=self.budget_type,
            actual_spend=self.actual_spend,
            actual_result=self.actual_result,
        )

    def __repr__(self) -> str:
        return f"<Result {self.year}-{self.month:02d} {self.platform} spend={self.actual_spend}>"

"""
Module: campaign_kernel.models.client
Responsibility: ORM persistence for commercial accounts (clients).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - business_division and sales_department are NOT NULL.  Blank values are
      rejected by CampaignService.create_client (MissingClassificationError).
"""

from uuid import UUID

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campaign_kernel.db.base import TrackedBase, UUIDString


class Client(TrackedBase):
    """
    A commercial account that owns campaigns.

    Guarantees:
        - business_division and sales_department are always present.
        - manager_id references an external identity record (no FK).
    """

    __tablename__ = "clients"

    __table_args__ = (
        Index("idx_client_division", "business_division"),
        Index("idx_client_department", "sales_department"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    manager_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    sales_channel: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sales_department: Mapped[str] = mapped_column(String(100), nullable=False)
    business_division: Mapped[str] = mapped_column(String(100), nullable=False)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    priority: Mapped[int] = mapped_column(default=0, nullable=False)

    campaigns: Mapped[list["Campaign"]] = relationship(  # noqa: F821
        "Campaign",
        back_populates="client",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Client {self.name} [{self.business_division}]>"

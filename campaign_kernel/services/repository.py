"""
Repository -- generic persistence collaborator for kernel models.

Responsibility:
    Minimal typed CRUD over one ORM model: lookup by id, lookup that raises
    the entity's NotFound error, equality-filtered listing with ordering,
    create, update and delete.  Relations between entities are loaded through
    explicit repository or selector calls rather than ad-hoc ORM traversal
    from outer layers.

Architecture position:
    Kernel > Services.  Used by CampaignService and AllocationService.

Invariants enforced:
    - Flush only; the caller owns the transaction.
    - ``find_many`` and ``update`` only accept mapped column names; unknown
      names raise ValueError rather than being silently ignored.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic
from uuid import UUID

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from campaign_kernel.exceptions import NotFoundError
from campaign_kernel.logging_config import get_logger
from campaign_kernel.services.base import BaseService, ModelType

logger = get_logger("services.repository")


class Repository(BaseService[ModelType], Generic[ModelType]):
    """
    CRUD for a single model class.

    Usage:
        budgets = Repository(session, Budget, BudgetNotFoundError)
        budget = budgets.get(budget_id)
        lines = budgets.find_many({"campaign_id": cid}, order_by=("year", "month"))
    """

    def __init__(
        self,
        session: Session,
        model: type[ModelType],
        not_found: type[NotFoundError] = NotFoundError,
    ):
        super().__init__(session)
        self.model = model
        self._not_found = not_found
        self._columns = frozenset(c.key for c in inspect(model).column_attrs)

    def _check_columns(self, names) -> None:
        unknown = sorted(set(names) - self._columns)
        if unknown:
            raise ValueError(
                f"{self.model.__name__} has no column(s): {', '.join(unknown)}"
            )

    def find_by_id(self, entity_id: UUID) -> ModelType | None:
        return self.session.get(self.model, entity_id)

    def get(self, entity_id: UUID) -> ModelType:
        """Return the row or raise the entity's NotFoundError subclass."""
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise self._not_found(str(entity_id))
        return entity

    def find_many(
        self,
        filters: Mapping[str, Any] | None = None,
        order_by: Sequence[str] = (),
    ) -> list[ModelType]:
        """Rows whose columns equal every value in ``filters``."""
        filters = dict(filters or {})
        self._check_columns(filters)
        self._check_columns(order_by)

        stmt = select(self.model)
        for name, value in filters.items():
            stmt = stmt.where(getattr(self.model, name) == value)
        if order_by:
            stmt = stmt.order_by(*(getattr(self.model, name) for name in order_by))
        stmt = stmt.order_by(self.model.id)
        return list(self.session.scalars(stmt))

    def create(self, **values: Any) -> ModelType:
        self._check_columns(values)
        entity = self.model(**values)
        self.session.add(entity)
        self.session.flush()
        logger.debug(
            "entity_created",
            extra={"model": self.model.__name__, "entity_id": str(entity.id)},
        )
        return entity

    def update(self, entity: ModelType, **values: Any) -> ModelType:
        self._check_columns(values)
        for name, value in values.items():
            setattr(entity, name, value)
        self.session.flush()
        return entity

    def delete(self, entity: ModelType) -> None:
        entity_id = entity.id
        self.session.delete(entity)
        self.session.flush()
        logger.debug(
            "entity_deleted",
            extra={"model": self.model.__name__, "entity_id": str(entity_id)},
        )

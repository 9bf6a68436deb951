"""
AllocationService -- locking write path for budget team allocations.

Responsibility:
    Reads a budget line and its BudgetTeam rows under a row lock, runs the
    pure AllocationValidator over the allocations that would exist after a
    change, and only then writes the BudgetTeam rows.

Architecture position:
    Kernel > Services -- imperative shell around campaign_engines.allocation.

Invariants enforced:
    - ALLOCATION_CEILING: sum(allocation) <= Budget.amount after every write.
      The database has no constraint for this; correctness under concurrency
      relies on ``SELECT ... FOR UPDATE`` on the Budget row, which serializes
      every writer of the same budget line (PostgreSQL).  SQLite ignores
      FOR UPDATE; a file database serializes writers with its database
      lock.  In-memory SQLite shares one connection across sessions and is
      only suitable for single-threaded use.
    - ALLOCATION_UNIQUENESS: one BudgetTeam per (budget, team), also backed
      by the uq_budget_team constraint.

Failure modes:
    - BudgetNotFoundError / TeamNotFoundError for unknown ids.
    - AllocationExceededError, NegativeAllocationError,
      DuplicateAllocationError from the validator.  Nothing is written when
      validation fails; the caller rolls back its transaction as usual.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from campaign_engines.allocation import AllocationCheck, AllocationValidator, ProposedAllocation
from campaign_kernel.domain.dtos import TeamAllocation
from campaign_kernel.exceptions import BudgetNotFoundError, TeamNotFoundError
from campaign_kernel.logging_config import LogContext, get_logger
from campaign_kernel.models.budget import Budget, BudgetTeam
from campaign_kernel.models.team import Team
from campaign_kernel.services.base import BaseService

logger = get_logger("services.allocation")


def _team_id_of(item: ProposedAllocation) -> UUID:
    if isinstance(item, TeamAllocation):
        return item.team_id
    return item[0]


class AllocationService(BaseService[BudgetTeam]):
    """
    Validate and persist team allocations of budget lines.

    Contract:
        Flushes within the caller's transaction and never commits.  The
        budget row lock taken by a write is held until the caller's
        transaction ends.
    """

    def __init__(self, session: Session, enforce_ceiling: bool = True):
        super().__init__(session)
        self._validator = AllocationValidator(enforce_ceiling=enforce_ceiling)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_budget(self, budget_id: UUID, *, lock: bool) -> Budget:
        stmt = select(Budget).where(Budget.id == budget_id)
        if lock:
            # Row-level lock serializing writers of this budget line.
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        budget = self.session.execute(stmt).scalar_one_or_none()
        if budget is None:
            raise BudgetNotFoundError(str(budget_id))
        return budget

    def _existing_rows(self, budget_id: UUID) -> list[BudgetTeam]:
        stmt = (
            select(BudgetTeam)
            .where(BudgetTeam.budget_id == budget_id)
            .execution_options(populate_existing=True)
        )
        return list(self.session.scalars(stmt))

    def _require_teams(self, proposed: Sequence[ProposedAllocation]) -> None:
        for item in proposed:
            team_id = _team_id_of(item)
            if self.session.get(Team, team_id) is None:
                raise TeamNotFoundError(str(team_id))

    def _check(
        self,
        budget: Budget,
        existing: Sequence[BudgetTeam],
        proposed: Sequence[ProposedAllocation],
        amount: Decimal | None = None,
    ) -> AllocationCheck:
        return self._validator.validate(
            budget_id=budget.id,
            budget_amount=budget.amount if amount is None else amount,
            existing=[row.to_dto() for row in existing],
            proposed=list(proposed),
        )

    # ------------------------------------------------------------------
    # Read-only validation
    # ------------------------------------------------------------------

    def validate_allocation(
        self,
        budget_id: UUID,
        proposed: Sequence[ProposedAllocation],
    ) -> AllocationCheck:
        """
        Check ``proposed`` against the budget line without writing.

        ``proposed`` holds TeamAllocation objects or ``(team_id, amount)``
        pairs; a team that already has a row is replaced by its proposal.
        """
        budget = self._load_budget(budget_id, lock=False)
        return self._check(budget, self._existing_rows(budget.id), proposed)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_allocation(
        self,
        budget_id: UUID,
        team_id: UUID,
        allocation: Decimal | int | str,
    ) -> AllocationCheck:
        """Create or replace one team's allocation of a budget line."""
        return self.set_allocations(budget_id, [(team_id, allocation)])

    def set_allocations(
        self,
        budget_id: UUID,
        proposed: Sequence[ProposedAllocation],
    ) -> AllocationCheck:
        """
        Create or replace several allocations of one budget line atomically.

        Postconditions:
            On success the BudgetTeam rows equal ``check.rows``.  On failure
            nothing has been written.
        """
        with LogContext.bind(budget_id=str(budget_id)):
            budget = self._load_budget(budget_id, lock=True)
            self._require_teams(proposed)
            existing = self._existing_rows(budget.id)
            check = self._check(budget, existing, proposed)

            by_team = {row.team_id: row for row in existing}
            written = 0
            for row in check.rows:
                current = by_team.get(row.team_id)
                if current is None:
                    self.session.add(
                        BudgetTeam(
                            budget_id=budget.id,
                            team_id=row.team_id,
                            allocation=row.allocation,
                        )
                    )
                    written += 1
                elif current.allocation != row.allocation:
                    current.allocation = row.allocation
                    written += 1

            self.session.flush()
            self.session.expire(budget, ["budget_teams"])

            logger.info(
                "allocations_set",
                extra={
                    "budget_id": str(budget.id),
                    "rows_written": written,
                    "total_allocated": str(check.total_allocated),
                    "budget_amount": str(check.budget_amount),
                    "exceeds_amount": check.exceeds_amount,
                },
            )
            return check

    def remove_allocation(self, budget_id: UUID, team_id: UUID) -> bool:
        """
        Delete a team's allocation.  Returns False when there was none.

        Removing can only lower the total, so it is always valid.
        """
        with LogContext.bind(budget_id=str(budget_id)):
            budget = self._load_budget(budget_id, lock=True)
            row = self.session.execute(
                select(BudgetTeam).where(
                    BudgetTeam.budget_id == budget.id,
                    BudgetTeam.team_id == team_id,
                )
            ).scalar_one_or_none()
            if row is None:
                return False

            self.session.delete(row)
            self.session.flush()
            self.session.expire(budget, ["budget_teams"])
            logger.info(
                "allocation_removed",
                extra={"budget_id": str(budget.id), "team_id": str(team_id)},
            )
            return True

    def revalidate_for_amount(self, budget: Budget, new_amount: Decimal) -> AllocationCheck:
        """
        Check the existing allocations of an already locked budget line
        against a new amount.  Used before changing ``Budget.amount``.
        """
        return self._check(budget, self._existing_rows(budget.id), (), amount=new_amount)

    def allocations(self, budget_id: UUID) -> list[TeamAllocation]:
        budget = self._load_budget(budget_id, lock=False)
        rows = sorted(self._existing_rows(budget.id), key=lambda r: str(r.team_id))
        return [row.to_dto() for row in rows]


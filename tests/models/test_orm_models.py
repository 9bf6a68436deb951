"""
Tests for ORM mappings: exact decimal storage, unique constraints and DTO
conversion.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, StatementError

from campaign_kernel.domain.dtos import BudgetLine
from campaign_kernel.models.budget import Budget, BudgetTeam
from campaign_kernel.models.team import CampaignTeam, Team


class TestExactDecimal:

    def test_round_trip_keeps_every_digit(self, session, campaign_service, campaign):
        budget = campaign_service.add_budget(
            campaign.id, 2025, 1, "g", "s", "m", Decimal("1234567.123456789")
        )
        session.expire_all()

        reloaded = session.get(Budget, budget.id)
        assert reloaded.amount == Decimal("1234567.123456789")
        assert isinstance(reloaded.amount, Decimal)

    def test_float_is_rejected_at_bind(self, session, campaign):
        session.add(
            Budget(
                campaign_id=campaign.id, year=2025, month=1, platform="g",
                operation_type="s", budget_type="m", amount=0.1,
            )
        )
        with pytest.raises((TypeError, StatementError)):
            session.flush()

    def test_non_finite_is_rejected_at_bind(self, session, campaign):
        session.add(
            Budget(
                campaign_id=campaign.id, year=2025, month=1, platform="g",
                operation_type="s", budget_type="m", amount=Decimal("NaN"),
            )
        )
        with pytest.raises((ValueError, StatementError)):
            session.flush()


class TestConstraints:

    def test_budget_team_unique(self, session, budget):
        team = Team(name="Solo")
        session.add(team)
        session.flush()
        session.add(BudgetTeam(budget_id=budget.id, team_id=team.id, allocation=Decimal("1")))
        session.add(BudgetTeam(budget_id=budget.id, team_id=team.id, allocation=Decimal("2")))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_campaign_team_unique(self, session, campaign):
        team = Team(name="Pair")
        session.add(team)
        session.flush()
        session.add(CampaignTeam(campaign_id=campaign.id, team_id=team.id))
        session.add(CampaignTeam(campaign_id=campaign.id, team_id=team.id))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_team_name_unique(self, session):
        session.add(Team(name="Dup"))
        session.add(Team(name="Dup"))
        with pytest.raises(IntegrityError):
            session.flush()


class TestDtos:

    def test_budget_to_dto(self, session, budget, allocation_service, make_team):
        team = make_team("Search Team")
        allocation_service.set_allocation(budget.id, team.id, Decimal("250"))

        dto = session.get(Budget, budget.id).to_dto()

        assert isinstance(dto, BudgetLine)
        assert dto.key == (2025, 1, "google", "search", "media")
        (alloc,) = dto.allocations
        assert alloc.team_name == "Search Team"
        assert alloc.allocation == Decimal("250")

    def test_campaign_to_dto(self, campaign):
        info = campaign.to_dto()
        assert str(info.start) == "2025-01"
        assert str(info.end) == "2025-06"

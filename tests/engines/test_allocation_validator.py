"""
Tests for the Allocation Validator.

Covers:
- Inclusive ceiling boundary
- Replacement of an existing team's row by its proposal
- Negative and duplicate proposals
- Relaxed ceiling (flag and warn)
- Float, NaN and Infinity rejection
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from campaign_engines.allocation import AllocationValidator
from campaign_kernel.domain.dtos import TeamAllocation
from campaign_kernel.exceptions import (
    AllocationExceededError,
    DuplicateAllocationError,
    InvalidAmountError,
    NegativeAllocationError,
    NegativeAmountError,
)


class TestCeilingBoundary:

    def setup_method(self):
        self.validator = AllocationValidator()
        self.budget_id = uuid4()

    def test_exact_fit_is_valid(self):
        check = self.validator.validate(
            budget_id=self.budget_id,
            budget_amount=Decimal("1000.00"),
            proposed=[(uuid4(), Decimal("1000.00"))],
        )
        assert check.total_allocated == Decimal("1000.00")
        assert check.headroom == Decimal("0")
        assert not check.exceeds_amount

    def test_one_cent_over_fails(self):
        with pytest.raises(AllocationExceededError) as exc_info:
            self.validator.validate(
                budget_id=self.budget_id,
                budget_amount=Decimal("1000.00"),
                proposed=[(uuid4(), Decimal("1000.01"))],
            )
        assert exc_info.value.total_allocated == Decimal("1000.01")
        assert exc_info.value.budget_amount == Decimal("1000.00")

    def test_empty_allocations_are_valid(self):
        check = self.validator.validate(budget_id=None, budget_amount=Decimal("0"))
        assert check.rows == ()
        assert check.total_allocated == Decimal("0")


class TestExistingAllocations:
    """Budget 1000 with team1=600 and team2=300 already allocated."""

    def setup_method(self):
        self.validator = AllocationValidator()
        self.team1, self.team2, self.team3 = uuid4(), uuid4(), uuid4()
        self.existing = [
            TeamAllocation(self.team1, Decimal("600")),
            TeamAllocation(self.team2, Decimal("300")),
        ]

    def test_adding_150_exceeds(self):
        with pytest.raises(AllocationExceededError) as exc_info:
            self.validator.validate(
                budget_id=uuid4(),
                budget_amount=Decimal("1000"),
                existing=self.existing,
                proposed=[(self.team3, Decimal("150"))],
            )
        assert exc_info.value.total_allocated == Decimal("1050")
        assert exc_info.value.budget_amount == Decimal("1000")

    def test_adding_100_fits(self):
        check = self.validator.validate(
            budget_id=uuid4(),
            budget_amount=Decimal("1000"),
            existing=self.existing,
            proposed=[(self.team3, Decimal("100"))],
        )
        assert check.total_allocated == Decimal("1000")
        assert check.allocation_for(self.team3) == Decimal("100")
        assert len(check.rows) == 3

    def test_proposal_replaces_existing_row(self):
        check = self.validator.validate(
            budget_id=uuid4(),
            budget_amount=Decimal("1000"),
            existing=self.existing,
            proposed=[(self.team1, Decimal("700"))],
        )
        assert check.total_allocated == Decimal("1000")
        assert check.allocation_for(self.team1) == Decimal("700")
        assert len(check.rows) == 2

    def test_lowering_amount_below_existing_total(self):
        with pytest.raises(AllocationExceededError) as exc_info:
            self.validator.validate(
                budget_id=uuid4(),
                budget_amount=Decimal("800"),
                existing=self.existing,
            )
        assert exc_info.value.total_allocated == Decimal("900")


class TestInvalidProposals:

    def setup_method(self):
        self.validator = AllocationValidator()

    def test_negative_allocation(self):
        team = uuid4()
        with pytest.raises(NegativeAllocationError) as exc_info:
            self.validator.validate(
                budget_id=uuid4(),
                budget_amount=Decimal("100"),
                proposed=[(team, Decimal("-1"))],
            )
        assert exc_info.value.team_id == str(team)

    def test_duplicate_team(self):
        team = uuid4()
        with pytest.raises(DuplicateAllocationError):
            self.validator.validate(
                budget_id=uuid4(),
                budget_amount=Decimal("100"),
                proposed=[(team, Decimal("10")), (team, Decimal("20"))],
            )

    def test_negative_budget_amount(self):
        with pytest.raises(NegativeAmountError):
            self.validator.validate(budget_id=uuid4(), budget_amount=Decimal("-5"))

    def test_float_allocation_rejected(self):
        with pytest.raises(TypeError):
            self.validator.validate(
                budget_id=uuid4(),
                budget_amount=Decimal("100"),
                proposed=[(uuid4(), 10.5)],
            )

    def test_nan_allocation_rejected(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            self.validator.validate(
                budget_id=uuid4(),
                budget_amount=Decimal("1000"),
                proposed=[(uuid4(), "NaN")],
            )
        assert exc_info.value.field == "allocation"

    def test_infinite_budget_amount_rejected(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            self.validator.validate(
                budget_id=uuid4(),
                budget_amount="Infinity",
                proposed=[(uuid4(), Decimal("1e30"))],
            )
        assert exc_info.value.field == "budget_amount"


class TestRelaxedCeiling:

    def test_over_allocation_is_flagged_and_logged(self, captured_logs):
        validator = AllocationValidator(enforce_ceiling=False)
        check = validator.validate(
            budget_id=uuid4(),
            budget_amount=Decimal("100"),
            proposed=[(uuid4(), Decimal("150"))],
        )
        assert check.exceeds_amount
        assert check.headroom == Decimal("-50")

        warnings = [
            r for r in captured_logs() if r["message"] == "allocation_ceiling_exceeded"
        ]
        assert len(warnings) == 1
        assert warnings[0]["level"] == "WARNING"
        assert warnings[0]["enforced"] is False


def test_rows_are_ordered_by_team_id():
    teams = [uuid4() for _ in range(5)]
    check = AllocationValidator().validate(
        budget_id=uuid4(),
        budget_amount=Decimal("100"),
        proposed=[(t, Decimal("1")) for t in teams],
    )
    assert [r.team_id for r in check.rows] == sorted(teams, key=str)

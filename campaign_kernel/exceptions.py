"""
Typed Exception Hierarchy for the Campaign Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Budget and allocation rules are business rules. Callers need to tell an
over-allocation apart from a missing campaign without parsing messages, and
API layers need a stable machine-readable code for each failure.

Every exception in this module:
  1. Has its own class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes (not just a message string)

Example:
    try:
        allocations.set_allocation(budget_id, team_id, Decimal("150"))
    except AllocationExceededError as e:
        return {
            "error": e.code,
            "total_allocated": str(e.total_allocated),
            "budget_amount": str(e.budget_amount),
        }

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CampaignKernelError (base)
    |
    +-- NotFoundError
    |   +-- ClientNotFoundError
    |   +-- CampaignNotFoundError
    |   +-- BudgetNotFoundError
    |   +-- TeamNotFoundError
    |   +-- KpiNotFoundError
    |
    +-- AllocationError
    |   +-- AllocationExceededError
    |   +-- NegativeAllocationError
    |   +-- DuplicateAllocationError
    |
    +-- PeriodError
    |   +-- InvalidPeriodError
    |
    +-- ValidationError
        +-- InvalidAmountError
        +-- NegativeAmountError
        +-- MissingClassificationError
        +-- DuplicateCampaignTeamError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                     | When Raised
-------------|--------------------------|------------------------------------------
Not found    | CLIENT_NOT_FOUND         | Client ID doesn't exist
             | CAMPAIGN_NOT_FOUND       | Campaign ID doesn't exist
             | BUDGET_NOT_FOUND         | Budget line ID doesn't exist
             | TEAM_NOT_FOUND           | Team ID doesn't exist
             | KPI_NOT_FOUND            | Campaign KPI ID doesn't exist
-------------|--------------------------|------------------------------------------
Allocation   | ALLOCATION_EXCEEDED      | Sum of team allocations > budget amount
             | NEGATIVE_ALLOCATION      | A team allocation is below zero
             | DUPLICATE_ALLOCATION     | Same team proposed twice for one budget
-------------|--------------------------|------------------------------------------
Period       | INVALID_PERIOD           | End precedes start, bad month, bad filter
-------------|--------------------------|------------------------------------------
Validation   | INVALID_AMOUNT           | Amount is not a finite number
             | NEGATIVE_AMOUNT          | Budget amount below zero
             | MISSING_CLASSIFICATION   | Client without division/department
             | DUPLICATE_CAMPAIGN_TEAM  | Team already assigned to campaign

All of these are deterministic business-rule violations. None of them is
retryable; the caller corrects the input.
"""

from decimal import Decimal


class CampaignKernelError(Exception):
    """
    Base exception for all campaign kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CAMPAIGN_KERNEL_ERROR"


# Lookup failures


class NotFoundError(CampaignKernelError):
    """Referenced entity does not exist."""

    code: str = "NOT_FOUND"
    entity: str = "entity"

    def __init__(self, entity_id: str):
        self.entity_id = str(entity_id)
        super().__init__(f"{self.entity.capitalize()} not found: {entity_id}")


class ClientNotFoundError(NotFoundError):
    code: str = "CLIENT_NOT_FOUND"
    entity: str = "client"


class CampaignNotFoundError(NotFoundError):
    code: str = "CAMPAIGN_NOT_FOUND"
    entity: str = "campaign"


class BudgetNotFoundError(NotFoundError):
    code: str = "BUDGET_NOT_FOUND"
    entity: str = "budget"


class TeamNotFoundError(NotFoundError):
    code: str = "TEAM_NOT_FOUND"
    entity: str = "team"


class KpiNotFoundError(NotFoundError):
    code: str = "KPI_NOT_FOUND"
    entity: str = "campaign kpi"


# Allocation exceptions


class AllocationError(CampaignKernelError):
    """Base exception for team allocation errors."""

    code: str = "ALLOCATION_ERROR"


class AllocationExceededError(AllocationError):
    """Sum of team allocations would exceed the budget line amount."""

    code: str = "ALLOCATION_EXCEEDED"

    def __init__(
        self,
        total_allocated: Decimal,
        budget_amount: Decimal,
        budget_id: str | None = None,
    ):
        self.total_allocated = total_allocated
        self.budget_amount = budget_amount
        self.budget_id = budget_id
        super().__init__(
            f"Allocation total {total_allocated} exceeds budget amount "
            f"{budget_amount}"
            + (f" for budget {budget_id}" if budget_id else "")
        )


class NegativeAllocationError(AllocationError):
    """A team allocation is negative."""

    code: str = "NEGATIVE_ALLOCATION"

    def __init__(self, team_id: str, allocation: Decimal):
        self.team_id = str(team_id)
        self.allocation = allocation
        super().__init__(
            f"Allocation for team {team_id} must not be negative: {allocation}"
        )


class DuplicateAllocationError(AllocationError):
    """The same team appears more than once in one proposal."""

    code: str = "DUPLICATE_ALLOCATION"

    def __init__(self, team_id: str):
        self.team_id = str(team_id)
        super().__init__(f"Team {team_id} is allocated more than once")


# Period exceptions


class PeriodError(CampaignKernelError):
    """Base exception for (year, month) period errors."""

    code: str = "PERIOD_ERROR"


class InvalidPeriodError(PeriodError):
    """
    A period is malformed or out of order.

    Raised when a campaign's end period precedes its start, when a month is
    outside 1..12, or when a reconciliation filter is inconsistent.
    """

    code: str = "INVALID_PERIOD"

    def __init__(self, reason: str, start: str | None = None, end: str | None = None):
        self.reason = reason
        self.start = start
        self.end = end
        super().__init__(f"Invalid period: {reason}")


# Input validation exceptions


class ValidationError(CampaignKernelError):
    """Base exception for write-time field validation."""

    code: str = "VALIDATION_ERROR"


class InvalidAmountError(ValidationError, ValueError):
    """An amount is not a finite decimal (unparseable, NaN or Infinity)."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value):
        self.field = field
        self.value = str(value)
        super().__init__(f"{field} is not a finite decimal: {value!r}")


class NegativeAmountError(ValidationError):
    """A budget line amount is negative."""

    code: str = "NEGATIVE_AMOUNT"

    def __init__(self, field: str, amount: Decimal):
        self.field = field
        self.amount = amount
        super().__init__(f"{field} must not be negative: {amount}")


class MissingClassificationError(ValidationError):
    """Client is missing its business division or sales department."""

    code: str = "MISSING_CLASSIFICATION"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Client classification '{field}' is required")


class DuplicateCampaignTeamError(ValidationError):
    """Team is already assigned to the campaign."""

    code: str = "DUPLICATE_CAMPAIGN_TEAM"

    def __init__(self, campaign_id: str, team_id: str):
        self.campaign_id = str(campaign_id)
        self.team_id = str(team_id)
        super().__init__(
            f"Team {team_id} is already assigned to campaign {campaign_id}"
        )

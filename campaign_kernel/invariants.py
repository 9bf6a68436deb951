"""
Kernel Invariants Contract.

These invariants are structural law for budget lines, team allocations and
reported aggregates. Configuration may relax how a violation is reported
(see ``campaign_config`` ``allocation.enforce_ceiling``) but never whether it
is detected.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across the allocation engine, AllocationService,
CampaignService and the period value object.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Invariants the campaign kernel guarantees.

    Each value names one structural guarantee. Services and engines refer to
    these names in log records so violations can be searched for by
    invariant rather than by message text.
    """

    ALLOCATION_CEILING = "allocation_ceiling"
    """Sum of BudgetTeam.allocation for a budget never exceeds the budget's
    amount. Enforced by AllocationValidator and AllocationService under a
    row lock on the budget."""

    ALLOCATION_UNIQUENESS = "allocation_uniqueness"
    """At most one BudgetTeam row per (budget, team). Enforced by a unique
    constraint and by proposal de-duplication in AllocationValidator."""

    NON_NEGATIVE_AMOUNTS = "non_negative_amounts"
    """Budget amounts and team allocations are >= 0."""

    PERIOD_ORDER = "period_order"
    """A campaign's end (year, month) never precedes its start."""

    CLIENT_CLASSIFICATION = "client_classification"
    """Every client carries a business division and a sales department."""

    DECIMAL_EXACTNESS = "decimal_exactness"
    """Currency values are Decimal end to end; floats are rejected at the
    engine boundary."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

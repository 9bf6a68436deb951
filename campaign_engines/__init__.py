"""
Module: campaign_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    campaign_kernel.services and the reporting scripts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import campaign_kernel.domain, campaign_kernel.db.types and
    sibling engine modules.  MUST NOT open sessions or touch ORM models.

Invariants enforced:
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``; floats
      are rejected with TypeError.
    - Determinism: identical inputs always produce identical outputs, in the
      same order.

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``campaign_engines.tracer``), emitting CAMPAIGN_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.

Usage:
    from campaign_engines.allocation import AllocationValidator
    from campaign_engines.reconciliation import ReconciliationEngine
    from campaign_engines.rollup import CampaignRollupCalculator
    from campaign_engines.overview import OverviewCalculator
    from campaign_engines.export import render_reconciliation_csv
"""

from campaign_kernel.logging_config import get_logger

logger = get_logger("engines")

from campaign_engines.allocation import (
    AllocationCheck,
    AllocationValidator,
)
from campaign_engines.export import (
    RECONCILIATION_CSV_HEADERS,
    render_reconciliation_csv,
)
from campaign_engines.overview import (
    DivisionTotal,
    MonthlyOverview,
    OverviewCalculator,
)
from campaign_engines.reconciliation import (
    KpiAchievement,
    KpiReport,
    LineStatus,
    ReconciliationEngine,
    ReconciliationReport,
    VarianceLine,
)
from campaign_engines.rollup import (
    CampaignRollup,
    CampaignRollupCalculator,
    TeamAllocationTotal,
)
from campaign_engines.tracer import (
    compute_input_fingerprint,
    traced_engine,
)

__all__ = [
    # Allocation
    "AllocationCheck",
    "AllocationValidator",
    # Export
    "RECONCILIATION_CSV_HEADERS",
    "render_reconciliation_csv",
    # Overview
    "DivisionTotal",
    "MonthlyOverview",
    "OverviewCalculator",
    # Reconciliation
    "KpiAchievement",
    "KpiReport",
    "LineStatus",
    "ReconciliationEngine",
    "ReconciliationReport",
    "VarianceLine",
    # Rollup
    "CampaignRollup",
    "CampaignRollupCalculator",
    "TeamAllocationTotal",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]

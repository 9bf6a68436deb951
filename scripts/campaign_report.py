#!/usr/bin/env python3
"""
Print campaign reports from persisted database data.

Connects to the configured database (DATABASE_URL or the settings file) and
prints one report as JSON, or the reconciliation as CSV.

Usage:
    python3 -m scripts.campaign_report rollup <campaign-id>
    python3 -m scripts.campaign_report reconcile <campaign-id> [--year Y --month M --platform P] [--csv]
    python3 -m scripts.campaign_report kpis <campaign-id>
    python3 -m scripts.campaign_report overview --year Y --month M
    python3 -m scripts.campaign_report divisions
"""

import argparse
import json
import sys
from pathlib import Path
from uuid import UUID, uuid4

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Campaign budget reports.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  python3 -m scripts.campaign_report rollup 7f0c...\n"
            "  python3 -m scripts.campaign_report reconcile 7f0c... --year 2025 --csv\n"
            "  python3 -m scripts.campaign_report overview --year 2025 --month 1\n"
        ),
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Settings YAML (default: CAMPAIGN_KERNEL_CONFIG or packaged defaults)",
    )
    parser.add_argument(
        "--db-url", type=str, default=None,
        help="Database URL, overrides the settings file",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    rollup = sub.add_parser("rollup", help="Campaign totals and team allocation totals")
    rollup.add_argument("campaign_id", type=UUID)

    reconcile = sub.add_parser("reconcile", help="Budget vs. result variance lines")
    reconcile.add_argument("campaign_id", type=UUID)
    reconcile.add_argument("--year", type=int, default=None)
    reconcile.add_argument("--month", type=int, default=None)
    reconcile.add_argument("--platform", type=str, default=None)
    reconcile.add_argument("--csv", action="store_true", help="Output CSV instead of JSON")

    kpis = sub.add_parser("kpis", help="KPI achievement")
    kpis.add_argument("campaign_id", type=UUID)

    overview = sub.add_parser("overview", help="Totals for one month across campaigns")
    overview.add_argument("--year", type=int, required=True)
    overview.add_argument("--month", type=int, required=True)

    sub.add_parser("divisions", help="Planned budget per business division")

    return parser


def run(
    args: argparse.Namespace,
    session,
    percent_places: int = 2,
    run_id: str | None = None,
) -> str:
    """Render the requested report as text, logging under one run_id."""
    from campaign_kernel.logging_config import LogContext

    with LogContext.bind(run_id=run_id or uuid4().hex, command=args.command):
        return _render_report(args, session, percent_places)


def _render_report(args: argparse.Namespace, session, percent_places: int) -> str:
    from campaign_engines.export import render_reconciliation_csv
    from campaign_kernel.domain.dtos import PeriodFilter
    from campaign_kernel.services.reporting_service import CampaignReportingService

    svc = CampaignReportingService(session, percent_places=percent_places)

    if args.command == "rollup":
        payload = svc.rollup(args.campaign_id).to_dict()
    elif args.command == "reconcile":
        flt = PeriodFilter(year=args.year, month=args.month, platform=args.platform)
        report = svc.reconcile_budget_vs_result(args.campaign_id, flt)
        if args.csv:
            return render_reconciliation_csv(report, svc.campaign_name(args.campaign_id))
        payload = report.to_dict()
    elif args.command == "kpis":
        payload = svc.reconcile_kpis(args.campaign_id).to_dict()
    elif args.command == "overview":
        payload = svc.monthly_overview(args.year, args.month).to_dict()
    else:
        payload = [d.to_dict() for d in svc.division_summary()]

    return json.dumps(payload, indent=2)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    from campaign_config import ConfigurationError, get_active_settings
    from campaign_kernel.db.engine import get_session, init_engine_from_url
    from campaign_kernel.exceptions import CampaignKernelError
    from campaign_kernel.logging_config import configure_logging

    try:
        settings = get_active_settings(args.config)
    except (OSError, ConfigurationError) as exc:
        print(f"  ERROR: Invalid configuration: {exc}", file=sys.stderr)
        return 1

    configure_logging(level=settings.logging.level)

    try:
        init_engine_from_url(
            args.db_url or settings.database.url,
            echo=settings.database.echo,
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
        )
    except Exception as exc:
        print(f"  ERROR: Cannot connect to database: {exc}", file=sys.stderr)
        return 1

    session = get_session()
    try:
        print(run(args, session, settings.reporting.percent_places))
        return 0
    except CampaignKernelError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())

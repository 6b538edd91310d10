#!/usr/bin/env python3
"""
Operator commands for monthly periods and the receivable ledger.

Usage:
    python3 scripts/periods.py [--db-url URL] [--config PATH] <command> [args]

Commands:
    recalculate [--year YEAR]     Recompute periods (all years when omitted).
    delete-period YEAR MONTH      Delete one period.
    delete-year YEAR              Delete every period of a year.
    summary YEAR                  Print the year summary from stored periods.
    resync-receivables [--year]   Create or refresh debts for every eligible
                                  reservation.
    outstanding                   Print outstanding balances per company.
    schedule [--year] [--urgent-first]
                                  Print upcoming reservations grouped by
                                  destination, flagging urgent groups.

Exit status is 1 when any unit failed.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

DB_URL = os.environ.get("TOUR_LEDGER_DB_URL", "sqlite:///tour_ledger.db")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recompute and delete monthly periods; resync the receivable ledger.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--db-url",
        default=DB_URL,
        help=f"Database URL (default: TOUR_LEDGER_DB_URL or {DB_URL!r}).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings override file (default: TOUR_LEDGER_CONFIG env).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    recalc = sub.add_parser("recalculate", help="Recompute periods from source records.")
    recalc.add_argument("--year", type=int, default=None)

    delete_period = sub.add_parser("delete-period", help="Delete one period.")
    delete_period.add_argument("year", type=int)
    delete_period.add_argument("month", type=int, choices=range(1, 13), metavar="MONTH")

    delete_year = sub.add_parser("delete-year", help="Delete every period of a year.")
    delete_year.add_argument("year", type=int)

    summary = sub.add_parser("summary", help="Year summary from stored periods.")
    summary.add_argument("year", type=int)

    resync = sub.add_parser("resync-receivables", help="Resync debts from reservations.")
    resync.add_argument("--year", type=int, default=None)

    sub.add_parser("outstanding", help="Outstanding balances per company.")

    schedule = sub.add_parser("schedule", help="Upcoming reservations by destination.")
    schedule.add_argument("--year", type=int, default=None)
    schedule.add_argument("--urgent-first", action="store_true")
    return parser.parse_args(argv)


def _print_failures(failures) -> None:
    for failure in failures:
        print(f"  FAILED {failure.unit}: [{failure.code}] {failure.message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from tour_config import load_settings
    from tour_engines.aggregation import format_totals
    from tour_kernel.db.engine import create_tables, init_engine_from_url, session_scope
    from tour_kernel.domain.clock import SystemClock
    from tour_services import (
        PeriodRollupService,
        ReceivableSyncService,
        ScheduleService,
        SqlAlchemyStore,
    )

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        print(f"ERROR: Failed to load settings: {e}", file=sys.stderr)
        return 1

    try:
        init_engine_from_url(args.db_url)
        create_tables()
    except Exception as e:
        print(f"ERROR: Database init failed: {e}", file=sys.stderr)
        return 1

    clock = SystemClock()
    with session_scope() as session:
        store = SqlAlchemyStore(session)
        periods = PeriodRollupService(store, store, clock=clock, settings=settings)
        receivables = ReceivableSyncService(
            store, clock=clock, settings=settings, reservations=store, sources=store
        )

        if args.command == "recalculate":
            result = periods.recompute(args.year)
            print(f"Recompute {result.scope}: {result.status.value}")
            print(f"  Written: {', '.join(result.affected) or '-'}")
            if result.removed:
                print(f"  Removed: {', '.join(result.removed)}")
            if result.pending:
                print(f"  Not written: {', '.join(result.pending)}")
            if result.error is not None and not result.failures:
                print(f"  ERROR: {result.error}", file=sys.stderr)
            _print_failures(result.failures)
            return 0 if result.ok else 1

        if args.command in ("delete-period", "delete-year"):
            if args.command == "delete-period":
                deleted = periods.delete_period(args.year, args.month)
            else:
                deleted = periods.delete_year(args.year)
            print(f"Deleted {len(deleted.deleted)} period(s): {', '.join(deleted.deleted) or '-'}")
            _print_failures(deleted.failures)
            return 0 if deleted.ok else 1

        if args.command == "summary":
            summary = periods.year_summary(args.year)
            print(f"Year {summary.year} ({len(summary.months)} periods)")
            print(f"  Income:   {format_totals(summary.total_income)}")
            print(f"  Expenses: {format_totals(summary.total_expenses)}")
            print(f"  Profit:   {format_totals(summary.net_profit)}")
            print(f"  Tours: {summary.tour_count}  Customers: {summary.customer_count}")
            return 0

        if args.command == "resync-receivables":
            report = receivables.resync_all(args.year)
            print(f"Checked {report.checked} reservation(s)")
            print(f"  Missing: {len(report.missing)}  Created: {len(report.created)}  "
                  f"Updated: {len(report.updated)}  Skipped: {len(report.skipped)}")
            _print_failures(report.failures)
            return 0 if report.ok else 1

        if args.command == "schedule":
            schedule = ScheduleService(store, clock=clock, settings=settings)
            groups = schedule.destination_groups(args.year, urgent_first=args.urgent_first)
            print(f"Urgent window: {schedule.window_days} day(s)")
            for group in groups:
                flag = f"  URGENT ({group.urgent_count})" if group.is_urgent else ""
                print(f"{group.name}: {len(group.reservations)} reservation(s){flag}")
                for r in group.reservations:
                    day = r.tour_date.isoformat() if r.tour_date else "undated"
                    print(f"  {day} {r.pickup_time or '--:--'} {r.serial_number or r.id}")
            return 0

        for company_id, balance in receivables.outstanding_by_company().items():
            print(f"{company_id}: {format_totals(balance.outstanding)} "
                  f"({balance.debt_count} debt(s))")
        return 0


if __name__ == "__main__":
    sys.exit(main())

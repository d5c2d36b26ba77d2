from __future__ import annotations

import argparse
import logging
from datetime import date
from pathlib import Path
from typing import Sequence

from config import LOG_FORMAT, config
from db.db import init_db
from db.repositories import BankDepositRepository, CountRecordRepository, DrawerSettingsRepository
from domain.filters import RecordFilters
from domain.reconciliation import DiscrepancyStatus, ReconciliationEngine
from services.analytics import CashAnalytics, build_cash_analytics
from utils.formatting import format_cents

logger = logging.getLogger(__name__)


def init(db_file: Path, *, reset: bool, seed_defaults: bool) -> None:
    logger.info("Initializing DB at %s", db_file)
    session = init_db(db_file=db_file, reset=reset)
    if seed_defaults:
        seeded = DrawerSettingsRepository(session).ensure_defaults()
        logger.info("Seeded %d default drawers", len(seeded))
    session.close()


def report(db_file: Path, filters: RecordFilters) -> CashAnalytics:
    session = init_db(db_file=db_file)
    counts = CountRecordRepository(session)
    deposits = BankDepositRepository(session)
    analytics = build_cash_analytics(
        counts.list(filters), deposits.list(filters.dates_only()), ReconciliationEngine(counts)
    )
    session.close()
    return analytics


def render_report(analytics: CashAnalytics) -> None:
    print("Drawer counts:")
    for total in analytics.drawer_totals:
        amount = format_cents(total.total_cash_cents)
        print(f"  {total.day}  {total.drawer_name:<28} {total.count_type:<8} {amount:>12}")

    print("Bank deposits:")
    for trend in analytics.deposit_trends:
        print(
            f"  {trend.day}  cash {format_cents(trend.cash_cents):>12}  checks {format_cents(trend.checks_cents):>12}"
        )

    print("Closing discrepancies:")
    for item in analytics.drawer_discrepancies:
        result = item.result
        if result.signed_discrepancy_cents is None or result.status is DiscrepancyStatus.BALANCED:
            verdict = str(result.status)
        else:
            verdict = f"{result.status} {format_cents(result.signed_discrepancy_cents)}"
        print(f"  {item.day}  {item.drawer_name:<28} count #{result.closing_record_id}: {verdict}")


def main(argv: Sequence[str] | None = None) -> None:
    settings = config()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    parser = argparse.ArgumentParser(description="Drawer cash counts and reconciliation.")
    parser.add_argument("--db", type=Path, default=settings.db_file)
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create tables and seed the default drawers.")
    init_parser.add_argument("--reset", action="store_true")
    init_parser.add_argument("--no-seed", action="store_true")

    report_parser = subparsers.add_parser("report", help="Print drawer totals, deposits and discrepancies.")
    report_parser.add_argument("--drawer")
    report_parser.add_argument("--start", type=date.fromisoformat)
    report_parser.add_argument("--end", type=date.fromisoformat)
    report_parser.add_argument("--user")

    args = parser.parse_args(argv)
    if args.command == "init-db":
        init(args.db, reset=args.reset, seed_defaults=settings.seed_default_drawers and not args.no_seed)
    elif args.command == "report":
        filters = RecordFilters(drawer_id=args.drawer, start_date=args.start, end_date=args.end, user_id=args.user)
        render_report(report(args.db, filters))


if __name__ == "__main__":
    main()

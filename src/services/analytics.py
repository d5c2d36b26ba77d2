from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Sequence

from pydantic import BaseModel

from domain.bank_deposit import BankDeposit
from domain.count_record import CountRecord, CountRecordId, CountType
from domain.reconciliation import DiscrepancyResult, ReconciliationEngine


class DrawerTotal(BaseModel):
    record_id: CountRecordId | None
    drawer_id: str
    drawer_name: str
    count_type: CountType
    total_cash_cents: int
    day: date


class DepositTrend(BaseModel):
    day: date
    cash_cents: int = 0
    checks_cents: int = 0

    @property
    def total_cents(self) -> int:
        return self.cash_cents + self.checks_cents


class DrawerDiscrepancy(BaseModel):
    drawer_id: str
    drawer_name: str
    day: date
    result: DiscrepancyResult


class CashAnalytics(BaseModel):
    drawer_totals: list[DrawerTotal]
    deposit_trends: list[DepositTrend]
    drawer_discrepancies: list[DrawerDiscrepancy]


def drawer_totals(counts: Iterable[CountRecord]) -> list[DrawerTotal]:
    return [
        DrawerTotal(
            record_id=record.id,
            drawer_id=record.drawer_id,
            drawer_name=record.drawer_name,
            count_type=record.count_type,
            total_cash_cents=record.total_cash_cents,
            day=record.timestamp.date(),
        )
        for record in counts
    ]


def deposit_trends(deposits: Iterable[BankDeposit]) -> list[DepositTrend]:
    """Deposited cash and checks per calendar day, oldest day first."""
    by_day: dict[date, list[int]] = defaultdict(lambda: [0, 0])
    for deposit in deposits:
        totals = by_day[deposit.timestamp.date()]
        totals[0] += deposit.total_cash_cents
        totals[1] += deposit.total_checks_cents
    return [
        DepositTrend(day=day, cash_cents=cash, checks_cents=checks)
        for day, (cash, checks) in sorted(by_day.items())
    ]


def drawer_discrepancies(counts: Sequence[CountRecord], engine: ReconciliationEngine) -> list[DrawerDiscrepancy]:
    # Baselines come from the engine's own lookup so an opening count outside the
    # reported date range still counts.
    return [
        DrawerDiscrepancy(
            drawer_id=record.drawer_id,
            drawer_name=record.drawer_name,
            day=record.timestamp.date(),
            result=engine.reconcile(record),
        )
        for record in counts
        if record.count_type is CountType.CLOSING
    ]


def build_cash_analytics(
    counts: Sequence[CountRecord],
    deposits: Sequence[BankDeposit],
    engine: ReconciliationEngine,
) -> CashAnalytics:
    return CashAnalytics(
        drawer_totals=drawer_totals(counts),
        deposit_trends=deposit_trends(deposits),
        drawer_discrepancies=drawer_discrepancies(counts, engine),
    )

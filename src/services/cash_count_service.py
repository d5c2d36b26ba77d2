from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Mapping

from db.repositories import CountRecordRepository, DrawerSettingsRepository
from domain.cash_out import CashOutPolicy
from domain.count_record import (
    CountRecord,
    CountRecordId,
    CountRecordNotFoundError,
    CountTotals,
    CountType,
    EmptyCountError,
    Submitter,
)
from domain.denominations import DenominationCount, coerce_denominations
from domain.drawer import DrawerId, DrawerNotFoundError, DrawerSettings
from domain.filters import RecordFilters
from domain.reconciliation import DiscrepancyResult, DrawerSummary, ReconciliationEngine, summarize_drawer
from utils.money import decimal_to_cents

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CashCountService:
    """Submission, editing and reconciliation of drawer counts.

    Derived amounts are computed once per write from the drawer's current target
    profile and stored with the record; reading a record never recomputes them.
    """

    def __init__(
        self,
        *,
        counts: CountRecordRepository,
        drawers: DrawerSettingsRepository,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._counts = counts
        self._drawers = drawers
        self._clock = clock
        self._policy = CashOutPolicy(drawers)
        self._engine = ReconciliationEngine(counts)

    def preview_totals(
        self,
        drawer_id: str,
        count_type: CountType | str,
        denominations: DenominationCount | Mapping[str, int],
    ) -> CountTotals:
        return self._policy.totals_for(drawer_id, count_type, denominations)

    def submit_count(
        self,
        *,
        drawer_id: str,
        count_type: CountType | str,
        denominations: DenominationCount | Mapping[str, int],
        sms_cash: Decimal | None = None,
        submitter: Submitter | None = None,
        timestamp: datetime | None = None,
    ) -> CountRecord:
        record = self._build_record(
            drawer_id=drawer_id,
            count_type=CountType(count_type),
            denominations=coerce_denominations(denominations),
            sms_cash=sms_cash,
            submitter=submitter or Submitter(),
            timestamp=timestamp or self._clock(),
        )
        created = self._counts.create(record)
        logger.info(
            "Saved %s count id=%s drawer=%s total_cash=%s total_for_deposit=%s",
            created.count_type,
            created.id,
            created.drawer_id,
            created.total_cash,
            created.total_for_deposit,
        )
        return created

    def update_count(
        self,
        record_id: int,
        *,
        drawer_id: str,
        count_type: CountType | str,
        denominations: DenominationCount | Mapping[str, int],
        sms_cash: Decimal | None = None,
        submitter: Submitter | None = None,
    ) -> CountRecord:
        """Replace a stored count wholesale; the original timestamp is kept."""
        existing = self.get_count(record_id)
        record = self._build_record(
            drawer_id=drawer_id,
            count_type=CountType(count_type),
            denominations=coerce_denominations(denominations),
            sms_cash=sms_cash,
            submitter=submitter or Submitter(),
            timestamp=existing.timestamp,
            record_id=existing.id,
        )
        updated = self._counts.replace(record_id, record)
        logger.info("Replaced %s count id=%s drawer=%s", updated.count_type, updated.id, updated.drawer_id)
        return updated

    def delete_count(self, record_id: int) -> None:
        self._counts.delete(record_id)
        logger.info("Deleted count id=%s", record_id)

    def get_count(self, record_id: int) -> CountRecord:
        record = self._counts.get(record_id)
        if record is None:
            raise CountRecordNotFoundError(record_id=record_id)
        return record

    def list_counts(self, filters: RecordFilters | None = None) -> list[CountRecord]:
        return self._counts.list(filters)

    def reconcile(self, record: CountRecord) -> DiscrepancyResult:
        result = self._engine.reconcile(record)
        if not result.is_reconciled:
            logger.info("Count id=%s drawer=%s cannot be reconciled: %s", record.id, record.drawer_id, result.status)
        return result

    def reconcile_count(self, record_id: int) -> DiscrepancyResult:
        return self.reconcile(self.get_count(record_id))

    def drawer_summary(self, drawer_id: str) -> DrawerSummary | None:
        history = self._counts.list(RecordFilters(drawer_id=drawer_id))
        return summarize_drawer(drawer_id, history)

    def _drawer(self, drawer_id: str) -> DrawerSettings:
        settings = self._drawers.get(drawer_id)
        if settings is None:
            raise DrawerNotFoundError(drawer_id=drawer_id)
        return settings

    def _build_record(
        self,
        *,
        drawer_id: str,
        count_type: CountType,
        denominations: DenominationCount,
        sms_cash: Decimal | None,
        submitter: Submitter,
        timestamp: datetime,
        record_id: CountRecordId | None = None,
    ) -> CountRecord:
        drawer = self._drawer(drawer_id)
        totals = self._policy.totals_for(drawer.id, count_type, denominations)
        if totals.total_cash_cents <= 0:
            raise EmptyCountError(drawer_id=drawer_id)

        sms_cash_cents = decimal_to_cents(sms_cash) if sms_cash is not None else None
        if count_type is CountType.OPENING and sms_cash_cents is not None:
            logger.info("Ignoring sms_cash on opening count for drawer=%s", drawer_id)
            sms_cash_cents = None

        return CountRecord.from_totals(
            drawer_id=DrawerId(drawer.id),
            drawer_name=drawer.name,
            count_type=count_type,
            denominations=denominations,
            totals=totals,
            sms_cash_cents=sms_cash_cents,
            timestamp=timestamp,
            submitter=submitter,
            record_id=record_id,
        )

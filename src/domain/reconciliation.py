"""Discrepancy verdicts for closing drawer counts.

A closing count is reconciled against the most recent opening count of the same
drawer taken at or before it, plus the side-channel ("SMS") cash declared on the
closing count::

    expected    = opening.total_cash + closing.sms_cash
    discrepancy = closing.total_cash - expected

Missing inputs are reported through ``DiscrepancyStatus`` instead of being raised,
so "cannot reconcile yet" is an ordinary result.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Protocol, Sequence

from pydantic import BaseModel, ConfigDict

from domain.count_record import CountRecord, CountRecordId, CountType, CountTypeError
from utils.money import cents_to_decimal


class DiscrepancyStatus(StrEnum):
    BALANCED = "balanced"
    OVER = "over"
    SHORT = "short"
    NO_BASELINE = "no_baseline"
    INSUFFICIENT_DATA = "insufficient_data"


class DiscrepancyResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: DiscrepancyStatus
    closing_record_id: CountRecordId | None = None
    opening_record_id: CountRecordId | None = None
    amount_cents: int | None = None
    expected_cents: int | None = None
    actual_cents: int | None = None
    opening_amount_cents: int | None = None
    sms_cash_cents: int | None = None

    @property
    def is_reconciled(self) -> bool:
        return self.status in (DiscrepancyStatus.BALANCED, DiscrepancyStatus.OVER, DiscrepancyStatus.SHORT)

    @property
    def amount(self) -> Decimal | None:
        return _as_money(self.amount_cents)

    @property
    def expected(self) -> Decimal | None:
        return _as_money(self.expected_cents)

    @property
    def actual(self) -> Decimal | None:
        return _as_money(self.actual_cents)

    @property
    def opening_amount(self) -> Decimal | None:
        return _as_money(self.opening_amount_cents)

    @property
    def sms_cash(self) -> Decimal | None:
        return _as_money(self.sms_cash_cents)

    @property
    def signed_discrepancy_cents(self) -> int | None:
        if self.amount_cents is None:
            return None
        return -self.amount_cents if self.status is DiscrepancyStatus.SHORT else self.amount_cents

    @property
    def signed_amount(self) -> Decimal | None:
        """Actual minus expected: negative when short, positive when over."""
        return _as_money(self.signed_discrepancy_cents)


def _as_money(cents: int | None) -> Decimal | None:
    return None if cents is None else cents_to_decimal(cents)


class OpeningCountSource(Protocol):
    """Indexed lookup of the baseline opening count for a drawer."""

    def latest_opening_at_or_before(self, drawer_id: str, timestamp: datetime) -> CountRecord | None: ...


def _require_closing(record: CountRecord) -> None:
    if record.count_type is not CountType.CLOSING:
        raise CountTypeError(record_id=record.id, expected=CountType.CLOSING, actual=record.count_type)


def select_baseline(closing: CountRecord, history: Sequence[CountRecord]) -> CountRecord | None:
    """Latest same-drawer opening count taken at or before ``closing``.

    Equal timestamps go to the most recently written record: the higher id, or for
    unsaved records the earlier position in the newest-first ``history``.
    """
    candidates = [
        (position, record)
        for position, record in enumerate(history)
        if record.drawer_id == closing.drawer_id
        and record.count_type is CountType.OPENING
        and record.timestamp <= closing.timestamp
    ]
    if not candidates:
        return None
    _, baseline = max(
        candidates,
        key=lambda item: (item[1].timestamp, item[1].id if item[1].id is not None else -1, -item[0]),
    )
    return baseline


def classify(closing: CountRecord, opening: CountRecord | None) -> DiscrepancyResult:
    _require_closing(closing)
    if opening is None:
        return DiscrepancyResult(status=DiscrepancyStatus.NO_BASELINE, closing_record_id=closing.id)

    if closing.sms_cash_cents is None:
        return DiscrepancyResult(
            status=DiscrepancyStatus.INSUFFICIENT_DATA,
            closing_record_id=closing.id,
            opening_record_id=opening.id,
            actual_cents=closing.total_cash_cents,
            opening_amount_cents=opening.total_cash_cents,
        )

    expected = opening.total_cash_cents + closing.sms_cash_cents
    actual = closing.total_cash_cents
    discrepancy = actual - expected
    if discrepancy == 0:
        status = DiscrepancyStatus.BALANCED
    elif discrepancy > 0:
        status = DiscrepancyStatus.OVER
    else:
        status = DiscrepancyStatus.SHORT

    return DiscrepancyResult(
        status=status,
        closing_record_id=closing.id,
        opening_record_id=opening.id,
        amount_cents=abs(discrepancy),
        expected_cents=expected,
        actual_cents=actual,
        opening_amount_cents=opening.total_cash_cents,
        sms_cash_cents=closing.sms_cash_cents,
    )


def compute_discrepancy(closing: CountRecord, history: Sequence[CountRecord]) -> DiscrepancyResult:
    """Reconcile ``closing`` against an already fetched drawer history."""
    _require_closing(closing)
    return classify(closing, select_baseline(closing, history))


class ReconciliationEngine:
    def __init__(self, openings: OpeningCountSource) -> None:
        self._openings = openings

    def baseline_for(self, closing: CountRecord) -> CountRecord | None:
        return self._openings.latest_opening_at_or_before(closing.drawer_id, closing.timestamp)

    def reconcile(self, closing: CountRecord) -> DiscrepancyResult:
        _require_closing(closing)
        return classify(closing, self.baseline_for(closing))


class DrawerSummary(BaseModel):
    """Latest opening against latest closing of one drawer.

    A convenience overview only; per-record reconciliation is the audited result.
    """

    model_config = ConfigDict(frozen=True)

    drawer_id: str
    opening_amount_cents: int
    closing_amount_cents: int
    sms_cash_cents: int
    opening_date: datetime
    closing_date: datetime

    @property
    def drawer_difference_cents(self) -> int:
        return self.closing_amount_cents - self.opening_amount_cents

    @property
    def discrepancy_cents(self) -> int:
        return self.drawer_difference_cents - self.sms_cash_cents

    @property
    def discrepancy(self) -> Decimal:
        return cents_to_decimal(self.discrepancy_cents)


def _latest(records: Sequence[CountRecord]) -> CountRecord | None:
    if not records:
        return None
    return max(records, key=lambda record: (record.timestamp, record.id if record.id is not None else -1))


def summarize_drawer(drawer_id: str, history: Sequence[CountRecord]) -> DrawerSummary | None:
    drawer_records = [record for record in history if record.drawer_id == drawer_id]
    latest_opening = _latest([r for r in drawer_records if r.count_type is CountType.OPENING])
    latest_closing = _latest([r for r in drawer_records if r.count_type is CountType.CLOSING])
    if latest_opening is None or latest_closing is None or latest_closing.sms_cash_cents is None:
        return None

    return DrawerSummary(
        drawer_id=drawer_id,
        opening_amount_cents=latest_opening.total_cash_cents,
        closing_amount_cents=latest_closing.total_cash_cents,
        sms_cash_cents=latest_closing.sms_cash_cents,
        opening_date=latest_opening.timestamp,
        closing_date=latest_closing.timestamp,
    )

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from random import Random
from typing import Callable

from domain.cash_out import compute_totals
from domain.count_record import CountRecord, CountRecordId, CountType, Submitter
from domain.denominations import DenominationCount
from domain.drawer import DrawerId, TargetProfile


@dataclass
class TimeGenerator:
    """Deterministic timestamp generator with random-ish gaps."""

    _current: datetime | None = None
    _rng: Random = Random(0)
    _seed: int = 0

    def __call__(self) -> datetime:
        return self.next()

    def next(self) -> datetime:
        if self._current is None:
            self._current = datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
        self._current += timedelta(minutes=self._rng.randint(5, 60))
        return self._current

    def reset(self) -> None:
        self._current = None
        self._rng = Random(self._seed)


DEFAULT_TIME_GEN = TimeGenerator()


def make_count(
    *,
    drawer_id: str,
    count_type: CountType,
    denominations: DenominationCount,
    target: TargetProfile | None = None,
    sms_cash_cents: int | None = None,
    timestamp: datetime | None = None,
    ts_gen: Callable[[], datetime] | None = None,
    record_id: int | None = None,
    submitter: Submitter | None = None,
) -> CountRecord:
    """Helper to create a CountRecord with derived totals and an auto-generated timestamp."""
    if timestamp is None:
        if ts_gen is None:
            ts_gen = DEFAULT_TIME_GEN
        timestamp = ts_gen()

    totals = compute_totals(denominations, target or DenominationCount.zero(), count_type)
    return CountRecord.from_totals(
        drawer_id=DrawerId(drawer_id),
        drawer_name=f"{drawer_id} drawer",
        count_type=count_type,
        denominations=denominations,
        totals=totals,
        sms_cash_cents=sms_cash_cents,
        timestamp=timestamp,
        submitter=submitter or Submitter(),
        record_id=CountRecordId(record_id) if record_id is not None else None,
    )

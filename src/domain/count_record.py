from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import NewType

from pydantic import BaseModel, ConfigDict, model_validator

from domain.denominations import DenominationCount, total_cents
from domain.drawer import DrawerId
from utils.money import cents_to_decimal

CountRecordId = NewType("CountRecordId", int)


class CountType(StrEnum):
    OPENING = "opening"
    CLOSING = "closing"


class CountRecordNotFoundError(Exception):
    def __init__(self, *, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"Drawer count not found: id={record_id}")


class CountTypeError(Exception):
    def __init__(self, *, record_id: int | None, expected: CountType, actual: CountType) -> None:
        self.record_id = record_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Drawer count id={record_id} is a {actual} count, expected a {expected} count")


class EmptyCountError(Exception):
    def __init__(self, *, drawer_id: str) -> None:
        self.drawer_id = drawer_id
        super().__init__(f"Total cash must be greater than zero for drawer={drawer_id}")


class Submitter(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str = "unknown"
    user_name: str = "Unknown User"


class CountTotals(BaseModel):
    """Derived amounts of a single count, in cents."""

    model_config = ConfigDict(frozen=True)

    total_cash_cents: int
    cash_out: DenominationCount
    total_for_deposit_cents: int

    @property
    def total_cash_out_cents(self) -> int:
        return total_cents(self.cash_out)

    @property
    def total_cash(self) -> Decimal:
        return cents_to_decimal(self.total_cash_cents)

    @property
    def total_cash_out(self) -> Decimal:
        return cents_to_decimal(self.total_cash_out_cents)

    @property
    def total_for_deposit(self) -> Decimal:
        return cents_to_decimal(self.total_for_deposit_cents)


class CountRecord(BaseModel):
    """One opening or closing snapshot of a drawer.

    Derived fields (``cash_out``, ``total_cash_cents``, ``total_for_deposit_cents``)
    are fixed at creation. An edit replaces the whole record, it never merges.
    ``sms_cash_cents`` is ``None`` until the side-channel amount is declared, which
    is different from a declared zero.
    """

    model_config = ConfigDict(frozen=True)

    id: CountRecordId | None = None
    drawer_id: DrawerId
    drawer_name: str = ""
    count_type: CountType
    denominations: DenominationCount
    cash_out: DenominationCount
    total_cash_cents: int
    total_for_deposit_cents: int
    sms_cash_cents: int | None = None
    timestamp: datetime
    user_id: str
    user_name: str

    @model_validator(mode="after")
    def _validate_fields(self) -> CountRecord:
        if not self.drawer_id:
            raise ValueError("CountRecord.drawer_id must be non-empty")
        if self.timestamp.tzinfo is None:
            raise ValueError("CountRecord.timestamp must be timezone-aware")
        if self.total_cash_cents != total_cents(self.denominations):
            raise ValueError("total_cash must equal the total of the counted denominations")
        if self.total_for_deposit_cents != self.total_cash_cents - total_cents(self.cash_out):
            raise ValueError("total_for_deposit must equal total_cash minus the cash-out total")
        if self.sms_cash_cents is not None:
            if self.count_type is CountType.OPENING:
                raise ValueError("sms_cash is only recorded on closing counts")
            if self.sms_cash_cents < 0:
                raise ValueError("sms_cash must be >= 0")
        return self

    @classmethod
    def from_totals(
        cls,
        *,
        drawer_id: DrawerId,
        drawer_name: str,
        count_type: CountType,
        denominations: DenominationCount,
        totals: CountTotals,
        sms_cash_cents: int | None,
        timestamp: datetime,
        submitter: Submitter,
        record_id: CountRecordId | None = None,
    ) -> CountRecord:
        return cls(
            id=record_id,
            drawer_id=drawer_id,
            drawer_name=drawer_name,
            count_type=count_type,
            denominations=denominations,
            cash_out=totals.cash_out,
            total_cash_cents=totals.total_cash_cents,
            total_for_deposit_cents=totals.total_for_deposit_cents,
            sms_cash_cents=sms_cash_cents if count_type is CountType.CLOSING else None,
            timestamp=timestamp,
            user_id=submitter.user_id,
            user_name=submitter.user_name,
        )

    @property
    def is_closing(self) -> bool:
        return self.count_type is CountType.CLOSING

    @property
    def total_cash_out_cents(self) -> int:
        return total_cents(self.cash_out)

    @property
    def total_cash(self) -> Decimal:
        return cents_to_decimal(self.total_cash_cents)

    @property
    def total_for_deposit(self) -> Decimal:
        return cents_to_decimal(self.total_for_deposit_cents)

    @property
    def sms_cash(self) -> Decimal | None:
        if self.sms_cash_cents is None:
            return None
        return cents_to_decimal(self.sms_cash_cents)

"""Denomination ledger: the fixed US cash value table and till summation.

All arithmetic is done in integer cents. Dollar amounts are produced only when a
caller asks for them (``total``), always rounded to two places.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from types import MappingProxyType
from typing import Annotated, Mapping

from pydantic import BaseModel, ConfigDict, Field

from utils.money import cents_to_decimal


class DenominationKey(StrEnum):
    PENNIES = "pennies"
    NICKELS = "nickels"
    DIMES = "dimes"
    QUARTERS = "quarters"
    ONES = "ones"
    FIVES = "fives"
    TENS = "tens"
    TWENTIES = "twenties"
    FIFTIES = "fifties"
    HUNDREDS = "hundreds"


DENOMINATION_CENTS: Mapping[DenominationKey, int] = MappingProxyType(
    {
        DenominationKey.PENNIES: 1,
        DenominationKey.NICKELS: 5,
        DenominationKey.DIMES: 10,
        DenominationKey.QUARTERS: 25,
        DenominationKey.ONES: 100,
        DenominationKey.FIVES: 500,
        DenominationKey.TENS: 1_000,
        DenominationKey.TWENTIES: 2_000,
        DenominationKey.FIFTIES: 5_000,
        DenominationKey.HUNDREDS: 10_000,
    }
)

DENOMINATION_VALUES: Mapping[DenominationKey, Decimal] = MappingProxyType(
    {key: cents_to_decimal(cents) for key, cents in DENOMINATION_CENTS.items()}
)

MAX_QUANTITY = 1_000_000

# Strict so that floats, numeric strings and booleans are rejected rather than coerced.
# The cap keeps every till total within a 64-bit integer of cents.
Quantity = Annotated[int, Field(ge=0, le=MAX_QUANTITY, strict=True)]


class DenominationCount(BaseModel):
    """Number of pieces held for every denomination.

    Keys left out on input default to zero, so an instance always carries all ten
    denominations. Unknown keys and negative counts are rejected.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    pennies: Quantity = 0
    nickels: Quantity = 0
    dimes: Quantity = 0
    quarters: Quantity = 0
    ones: Quantity = 0
    fives: Quantity = 0
    tens: Quantity = 0
    twenties: Quantity = 0
    fifties: Quantity = 0
    hundreds: Quantity = 0

    @classmethod
    def zero(cls) -> DenominationCount:
        return cls()

    @classmethod
    def from_mapping(cls, counts: Mapping[str, int]) -> DenominationCount:
        return cls.model_validate(dict(counts))

    def quantity(self, key: DenominationKey | str) -> int:
        return int(getattr(self, DenominationKey(key).value))

    def as_dict(self) -> dict[str, int]:
        return {key.value: self.quantity(key) for key in DenominationKey}

    def is_zero(self) -> bool:
        return all(self.quantity(key) == 0 for key in DenominationKey)


def coerce_denominations(denominations: DenominationCount | Mapping[str, int]) -> DenominationCount:
    if isinstance(denominations, DenominationCount):
        return denominations
    return DenominationCount.from_mapping(denominations)


def total_cents(denominations: DenominationCount | Mapping[str, int]) -> int:
    counts = coerce_denominations(denominations)
    return sum(counts.quantity(key) * cents for key, cents in DENOMINATION_CENTS.items())


def total(denominations: DenominationCount | Mapping[str, int]) -> Decimal:
    return cents_to_decimal(total_cents(denominations))

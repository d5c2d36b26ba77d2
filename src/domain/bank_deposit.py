from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import NewType

from pydantic import BaseModel, Field, model_validator

from utils.money import cents_to_decimal

BankDepositId = NewType("BankDepositId", int)


class BankDepositNotFoundError(Exception):
    def __init__(self, *, deposit_id: int) -> None:
        self.deposit_id = deposit_id
        super().__init__(f"Bank deposit not found: id={deposit_id}")


class BankDeposit(BaseModel):
    id: BankDepositId | None = None
    total_cash_cents: int = 0
    total_checks_cents: int = 0
    images: list[str] = Field(default_factory=list)
    notes: str = ""
    timestamp: datetime
    user_id: str
    user_name: str

    @model_validator(mode="after")
    def _validate_fields(self) -> BankDeposit:
        if self.total_cash_cents < 0:
            raise ValueError("total_cash must be >= 0")
        if self.total_checks_cents < 0:
            raise ValueError("total_checks must be >= 0")
        if self.timestamp.tzinfo is None:
            raise ValueError("BankDeposit.timestamp must be timezone-aware")
        return self

    @property
    def total_cents(self) -> int:
        return self.total_cash_cents + self.total_checks_cents

    @property
    def total_cash(self) -> Decimal:
        return cents_to_decimal(self.total_cash_cents)

    @property
    def total_checks(self) -> Decimal:
        return cents_to_decimal(self.total_checks_cents)

"""Request and response bodies of the HTTP API.

Amounts cross the wire as decimal dollars with two fractional digits; the
domain keeps integer cents.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from domain.bank_deposit import BankDeposit
from domain.count_record import CountRecord, CountTotals, CountType
from domain.denominations import DenominationCount
from domain.drawer import DrawerSettings
from domain.reconciliation import DiscrepancyResult, DiscrepancyStatus, DrawerSummary
from services.analytics import CashAnalytics
from utils.money import MAX_AMOUNT, cents_to_decimal, round_money

Money = Annotated[Decimal, Field(ge=0, le=MAX_AMOUNT), AfterValidator(round_money)]


class TotalsRequest(BaseModel):
    drawer_id: str
    count_type: CountType
    denominations: DenominationCount


class TotalsResponse(BaseModel):
    total_cash: Decimal
    cash_out: DenominationCount
    total_cash_out: Decimal
    total_for_deposit: Decimal

    @classmethod
    def from_domain(cls, totals: CountTotals) -> TotalsResponse:
        return cls(
            total_cash=totals.total_cash,
            cash_out=totals.cash_out,
            total_cash_out=totals.total_cash_out,
            total_for_deposit=totals.total_for_deposit,
        )


class CountSubmission(BaseModel):
    drawer_id: str
    count_type: CountType = CountType.OPENING
    denominations: DenominationCount
    sms_cash: Money | None = None


class CountRecordResponse(BaseModel):
    id: int
    drawer_id: str
    drawer_name: str
    count_type: CountType
    denominations: DenominationCount
    cash_out: DenominationCount
    total_cash: Decimal
    total_for_deposit: Decimal
    sms_cash: Decimal | None
    timestamp: datetime
    user_id: str
    user_name: str

    @classmethod
    def from_domain(cls, record: CountRecord) -> CountRecordResponse:
        assert record.id is not None
        return cls(
            id=record.id,
            drawer_id=record.drawer_id,
            drawer_name=record.drawer_name,
            count_type=record.count_type,
            denominations=record.denominations,
            cash_out=record.cash_out,
            total_cash=record.total_cash,
            total_for_deposit=record.total_for_deposit,
            sms_cash=record.sms_cash,
            timestamp=record.timestamp,
            user_id=record.user_id,
            user_name=record.user_name,
        )


class DiscrepancyResponse(BaseModel):
    status: DiscrepancyStatus
    amount: Decimal | None = None
    signed_amount: Decimal | None = None
    expected: Decimal | None = None
    actual: Decimal | None = None
    opening_amount: Decimal | None = None
    sms_cash: Decimal | None = None
    opening_record_id: int | None = None
    closing_record_id: int | None = None

    @classmethod
    def from_domain(cls, result: DiscrepancyResult) -> DiscrepancyResponse:
        return cls(
            status=result.status,
            amount=result.amount,
            signed_amount=result.signed_amount,
            expected=result.expected,
            actual=result.actual,
            opening_amount=result.opening_amount,
            sms_cash=result.sms_cash,
            opening_record_id=result.opening_record_id,
            closing_record_id=result.closing_record_id,
        )


class DrawerSummaryResponse(BaseModel):
    drawer_id: str
    opening_amount: Decimal
    closing_amount: Decimal
    drawer_difference: Decimal
    sms_cash: Decimal
    discrepancy: Decimal
    opening_date: datetime
    closing_date: datetime

    @classmethod
    def from_domain(cls, summary: DrawerSummary) -> DrawerSummaryResponse:
        return cls(
            drawer_id=summary.drawer_id,
            opening_amount=cents_to_decimal(summary.opening_amount_cents),
            closing_amount=cents_to_decimal(summary.closing_amount_cents),
            drawer_difference=cents_to_decimal(summary.drawer_difference_cents),
            sms_cash=cents_to_decimal(summary.sms_cash_cents),
            discrepancy=summary.discrepancy,
            opening_date=summary.opening_date,
            closing_date=summary.closing_date,
        )


class DrawerSettingsPayload(BaseModel):
    name: str
    target_denominations: DenominationCount = Field(default_factory=DenominationCount.zero)
    is_active: bool = True
    show_detailed_calculations: bool = False


class DrawerSettingsCreate(DrawerSettingsPayload):
    id: str


class DrawerSettingsResponse(BaseModel):
    id: str
    name: str
    target_denominations: DenominationCount
    total_amount: Decimal
    is_active: bool
    show_detailed_calculations: bool
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_domain(cls, settings: DrawerSettings) -> DrawerSettingsResponse:
        return cls(
            id=settings.id,
            name=settings.name,
            target_denominations=settings.target_denominations,
            total_amount=settings.total_amount,
            is_active=settings.is_active,
            show_detailed_calculations=settings.show_detailed_calculations,
            created_at=settings.created_at,
            updated_at=settings.updated_at,
        )


class BankDepositCreate(BaseModel):
    total_cash: Money = Decimal("0")
    total_checks: Money = Decimal("0")
    images: list[str] = Field(default_factory=list)
    notes: str = ""


class BankDepositResponse(BaseModel):
    id: int
    total_cash: Decimal
    total_checks: Decimal
    images: list[str]
    notes: str
    timestamp: datetime
    user_id: str
    user_name: str

    @classmethod
    def from_domain(cls, deposit: BankDeposit) -> BankDepositResponse:
        assert deposit.id is not None
        return cls(
            id=deposit.id,
            total_cash=deposit.total_cash,
            total_checks=deposit.total_checks,
            images=deposit.images,
            notes=deposit.notes,
            timestamp=deposit.timestamp,
            user_id=deposit.user_id,
            user_name=deposit.user_name,
        )


class DrawerTotalResponse(BaseModel):
    record_id: int | None
    drawer_id: str
    drawer_name: str
    count_type: CountType
    total_cash: Decimal
    day: date


class DepositTrendResponse(BaseModel):
    day: date
    cash: Decimal
    checks: Decimal
    total: Decimal


class DrawerDiscrepancyResponse(BaseModel):
    drawer_id: str
    drawer_name: str
    day: date
    discrepancy: DiscrepancyResponse


class AnalyticsResponse(BaseModel):
    drawer_totals: list[DrawerTotalResponse]
    deposit_trends: list[DepositTrendResponse]
    drawer_discrepancies: list[DrawerDiscrepancyResponse]

    @classmethod
    def from_domain(cls, analytics: CashAnalytics) -> AnalyticsResponse:
        return cls(
            drawer_totals=[
                DrawerTotalResponse(
                    record_id=total.record_id,
                    drawer_id=total.drawer_id,
                    drawer_name=total.drawer_name,
                    count_type=total.count_type,
                    total_cash=cents_to_decimal(total.total_cash_cents),
                    day=total.day,
                )
                for total in analytics.drawer_totals
            ],
            deposit_trends=[
                DepositTrendResponse(
                    day=trend.day,
                    cash=cents_to_decimal(trend.cash_cents),
                    checks=cents_to_decimal(trend.checks_cents),
                    total=cents_to_decimal(trend.total_cents),
                )
                for trend in analytics.deposit_trends
            ],
            drawer_discrepancies=[
                DrawerDiscrepancyResponse(
                    drawer_id=item.drawer_id,
                    drawer_name=item.drawer_name,
                    day=item.day,
                    discrepancy=DiscrepancyResponse.from_domain(item.result),
                )
                for item in analytics.drawer_discrepancies
            ],
        )

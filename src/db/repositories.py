from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from db import models
from domain.bank_deposit import BankDeposit, BankDepositId, BankDepositNotFoundError
from domain.count_record import CountRecord, CountRecordId, CountRecordNotFoundError, CountType
from domain.denominations import DenominationCount
from domain.drawer import DrawerId, DrawerNotFoundError, DrawerSettings, DuplicateDrawerError, default_drawer_settings
from domain.filters import RecordFilters

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DrawerSettingsRepository:
    def __init__(self, session: Session, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._session = session
        self._clock = clock

    def get(self, drawer_id: str) -> DrawerSettings | None:
        orm_settings = self._session.get(models.DrawerSettingsOrm, drawer_id)
        if orm_settings is None:
            return None
        return self._to_domain(orm_settings)

    def list(self) -> list[DrawerSettings]:
        orm_settings = (
            self._session.query(models.DrawerSettingsOrm)
            .order_by(models.DrawerSettingsOrm.created_at.asc(), models.DrawerSettingsOrm.id.asc())
            .all()
        )
        return [self._to_domain(settings) for settings in orm_settings]

    def create(self, settings: DrawerSettings) -> DrawerSettings:
        if self._session.get(models.DrawerSettingsOrm, settings.id) is not None:
            raise DuplicateDrawerError(field="id", value=settings.id)
        self._ensure_name_available(settings.name)

        now = self._clock()
        orm_settings = models.DrawerSettingsOrm(
            id=settings.id,
            name=settings.name,
            target_denominations=settings.target_denominations.as_dict(),
            is_active=settings.is_active,
            show_detailed_calculations=settings.show_detailed_calculations,
            created_at=settings.created_at or now,
            updated_at=settings.updated_at or now,
        )
        self._session.add(orm_settings)
        self._commit(settings)
        self._session.refresh(orm_settings)
        logger.info("Created drawer settings id=%s name=%s", settings.id, settings.name)
        return self._to_domain(orm_settings)

    def update(self, settings: DrawerSettings) -> DrawerSettings:
        orm_settings = self._session.get(models.DrawerSettingsOrm, settings.id)
        if orm_settings is None:
            raise DrawerNotFoundError(drawer_id=settings.id)
        self._ensure_name_available(settings.name, exclude_id=settings.id)

        orm_settings.name = settings.name
        orm_settings.target_denominations = settings.target_denominations.as_dict()
        orm_settings.is_active = settings.is_active
        orm_settings.show_detailed_calculations = settings.show_detailed_calculations
        orm_settings.updated_at = self._clock()
        self._commit(settings)
        self._session.refresh(orm_settings)
        logger.info("Updated drawer settings id=%s", settings.id)
        return self._to_domain(orm_settings)

    def delete(self, drawer_id: str) -> None:
        orm_settings = self._session.get(models.DrawerSettingsOrm, drawer_id)
        if orm_settings is None:
            raise DrawerNotFoundError(drawer_id=drawer_id)
        self._session.delete(orm_settings)
        self._session.commit()
        logger.info("Deleted drawer settings id=%s", drawer_id)

    def ensure_defaults(self) -> list[DrawerSettings]:
        """Seed the default drawers when no drawer has been configured yet."""
        if self._session.query(models.DrawerSettingsOrm).count() > 0:
            return []
        return [self.create(settings) for settings in default_drawer_settings()]

    def _ensure_name_available(self, name: str, *, exclude_id: str | None = None) -> None:
        query = self._session.query(models.DrawerSettingsOrm).filter(models.DrawerSettingsOrm.name == name)
        if exclude_id is not None:
            query = query.filter(models.DrawerSettingsOrm.id != exclude_id)
        if query.first() is not None:
            raise DuplicateDrawerError(field="name", value=name)

    def _commit(self, settings: DrawerSettings) -> None:
        try:
            self._session.commit()
        except IntegrityError as exc:
            self._session.rollback()
            raise DuplicateDrawerError(field="name", value=settings.name) from exc

    @staticmethod
    def _to_domain(orm_settings: models.DrawerSettingsOrm) -> DrawerSettings:
        return DrawerSettings(
            id=DrawerId(orm_settings.id),
            name=orm_settings.name,
            target_denominations=DenominationCount.from_mapping(orm_settings.target_denominations),
            is_active=orm_settings.is_active,
            show_detailed_calculations=orm_settings.show_detailed_calculations,
            created_at=orm_settings.created_at,
            updated_at=orm_settings.updated_at,
        )


class CountRecordRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, record: CountRecord) -> CountRecord:
        orm_record = models.DrawerCountOrm()
        self._apply(orm_record, record)
        self._session.add(orm_record)
        self._session.commit()
        self._session.refresh(orm_record)
        return self._to_domain(orm_record)

    def get(self, record_id: int) -> CountRecord | None:
        orm_record = self._session.get(models.DrawerCountOrm, record_id)
        if orm_record is None:
            return None
        return self._to_domain(orm_record)

    def list(self, filters: RecordFilters | None = None) -> list[CountRecord]:
        """Counts matching ``filters``, newest first."""
        query = self._session.query(models.DrawerCountOrm)
        if filters is not None:
            query = self._filtered(query, filters)
        orm_records = query.order_by(models.DrawerCountOrm.timestamp.desc(), models.DrawerCountOrm.id.desc()).all()
        return [self._to_domain(record) for record in orm_records]

    def replace(self, record_id: int, record: CountRecord) -> CountRecord:
        orm_record = self._session.get(models.DrawerCountOrm, record_id)
        if orm_record is None:
            raise CountRecordNotFoundError(record_id=record_id)
        self._apply(orm_record, record)
        self._session.commit()
        self._session.refresh(orm_record)
        return self._to_domain(orm_record)

    def delete(self, record_id: int) -> None:
        orm_record = self._session.get(models.DrawerCountOrm, record_id)
        if orm_record is None:
            raise CountRecordNotFoundError(record_id=record_id)
        self._session.delete(orm_record)
        self._session.commit()

    def latest_opening_at_or_before(self, drawer_id: str, timestamp: datetime) -> CountRecord | None:
        orm_record = (
            self._session.query(models.DrawerCountOrm)
            .filter(
                models.DrawerCountOrm.drawer_id == drawer_id,
                models.DrawerCountOrm.count_type == CountType.OPENING.value,
                models.DrawerCountOrm.timestamp <= timestamp,
            )
            .order_by(models.DrawerCountOrm.timestamp.desc(), models.DrawerCountOrm.id.desc())
            .first()
        )
        if orm_record is None:
            return None
        return self._to_domain(orm_record)

    @staticmethod
    def _filtered(query: Query[models.DrawerCountOrm], filters: RecordFilters) -> Query[models.DrawerCountOrm]:
        if filters.drawer_id:
            query = query.filter(models.DrawerCountOrm.drawer_id == filters.drawer_id)
        if filters.starts_at is not None:
            query = query.filter(models.DrawerCountOrm.timestamp >= filters.starts_at)
        if filters.ends_before is not None:
            query = query.filter(models.DrawerCountOrm.timestamp < filters.ends_before)
        if filters.user_id:
            query = query.filter(models.DrawerCountOrm.user_id == filters.user_id)
        return query

    @staticmethod
    def _apply(orm_record: models.DrawerCountOrm, record: CountRecord) -> None:
        orm_record.drawer_id = record.drawer_id
        orm_record.drawer_name = record.drawer_name
        orm_record.count_type = record.count_type.value
        orm_record.denominations = record.denominations.as_dict()
        orm_record.cash_out = record.cash_out.as_dict()
        orm_record.total_cash_cents = record.total_cash_cents
        orm_record.total_for_deposit_cents = record.total_for_deposit_cents
        orm_record.sms_cash_cents = record.sms_cash_cents
        orm_record.timestamp = record.timestamp
        orm_record.user_id = record.user_id
        orm_record.user_name = record.user_name

    @staticmethod
    def _to_domain(orm_record: models.DrawerCountOrm) -> CountRecord:
        return CountRecord(
            id=CountRecordId(orm_record.id),
            drawer_id=DrawerId(orm_record.drawer_id),
            drawer_name=orm_record.drawer_name,
            count_type=CountType(orm_record.count_type),
            denominations=DenominationCount.from_mapping(orm_record.denominations),
            cash_out=DenominationCount.from_mapping(orm_record.cash_out),
            total_cash_cents=orm_record.total_cash_cents,
            total_for_deposit_cents=orm_record.total_for_deposit_cents,
            sms_cash_cents=orm_record.sms_cash_cents,
            timestamp=orm_record.timestamp,
            user_id=orm_record.user_id,
            user_name=orm_record.user_name,
        )


class BankDepositRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, deposit: BankDeposit) -> BankDeposit:
        orm_deposit = models.BankDepositOrm(
            total_cash_cents=deposit.total_cash_cents,
            total_checks_cents=deposit.total_checks_cents,
            images=list(deposit.images),
            notes=deposit.notes,
            timestamp=deposit.timestamp,
            user_id=deposit.user_id,
            user_name=deposit.user_name,
        )
        self._session.add(orm_deposit)
        self._session.commit()
        self._session.refresh(orm_deposit)
        return self._to_domain(orm_deposit)

    def get(self, deposit_id: int) -> BankDeposit | None:
        orm_deposit = self._session.get(models.BankDepositOrm, deposit_id)
        if orm_deposit is None:
            return None
        return self._to_domain(orm_deposit)

    def list(self, filters: RecordFilters | None = None) -> list[BankDeposit]:
        query = self._session.query(models.BankDepositOrm)
        if filters is not None:
            if filters.starts_at is not None:
                query = query.filter(models.BankDepositOrm.timestamp >= filters.starts_at)
            if filters.ends_before is not None:
                query = query.filter(models.BankDepositOrm.timestamp < filters.ends_before)
            if filters.user_id:
                query = query.filter(models.BankDepositOrm.user_id == filters.user_id)
        orm_deposits = query.order_by(models.BankDepositOrm.timestamp.desc(), models.BankDepositOrm.id.desc()).all()
        return [self._to_domain(deposit) for deposit in orm_deposits]

    def delete(self, deposit_id: int) -> None:
        orm_deposit = self._session.get(models.BankDepositOrm, deposit_id)
        if orm_deposit is None:
            raise BankDepositNotFoundError(deposit_id=deposit_id)
        self._session.delete(orm_deposit)
        self._session.commit()

    @staticmethod
    def _to_domain(orm_deposit: models.BankDepositOrm) -> BankDeposit:
        return BankDeposit(
            id=BankDepositId(orm_deposit.id),
            total_cash_cents=orm_deposit.total_cash_cents,
            total_checks_cents=orm_deposit.total_checks_cents,
            images=list(orm_deposit.images),
            notes=orm_deposit.notes,
            timestamp=orm_deposit.timestamp,
            user_id=orm_deposit.user_id,
            user_name=orm_deposit.user_name,
        )

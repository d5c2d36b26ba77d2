from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UtcDateTime(TypeDecorator):
    """Timezone-aware datetimes stored as UTC.

    SQLite keeps no offset, so values are normalised on the way in and tagged as
    UTC on the way out. Comparisons in queries then stay consistent.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: object) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetimes cannot be stored")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect: object) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    pass


class DrawerSettingsOrm(Base):
    __tablename__ = "drawer_settings"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    target_denominations: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    show_detailed_calculations: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)


class DrawerCountOrm(Base):
    __tablename__ = "drawer_counts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Reference only; counts outlive the drawer settings they were taken against.
    drawer_id: Mapped[str] = mapped_column(String, nullable=False)
    drawer_name: Mapped[str] = mapped_column(String, nullable=False)
    count_type: Mapped[str] = mapped_column(String, nullable=False)
    denominations: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False)
    cash_out: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False)
    total_cash_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    total_for_deposit_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    sms_cash_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    user_name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        Index("ix_drawer_counts_baseline", "drawer_id", "count_type", "timestamp"),
        Index("ix_drawer_counts_timestamp", "timestamp"),
    )


class BankDepositOrm(Base):
    __tablename__ = "bank_deposits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    total_cash_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_checks_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    user_name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (Index("ix_bank_deposits_timestamp", "timestamp"),)

from datetime import date, datetime, timedelta, timezone

import pytest

from db.repositories import BankDepositRepository, CountRecordRepository, DrawerSettingsRepository
from domain.bank_deposit import BankDeposit, BankDepositNotFoundError
from domain.count_record import CountRecordNotFoundError, CountType
from domain.denominations import DenominationCount
from domain.drawer import DEFAULT_DRAWERS, DrawerId, DrawerNotFoundError, DrawerSettings, DuplicateDrawerError
from domain.filters import RecordFilters
from domain.reconciliation import compute_discrepancy
from tests.constants import BACK_DRAWER, CLOSING_340, CLOSING_345_50, FRONT_DRAWER, FRONT_TARGET, MANAGER, OPENING_300
from tests.helpers.time_utils import make_count

T0 = datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc)


def test_create_and_get_drawer_settings(drawer_repo: DrawerSettingsRepository) -> None:
    created = drawer_repo.create(DrawerSettings(id=FRONT_DRAWER, name="Front Counter", target_denominations=FRONT_TARGET))

    assert created.created_at is not None
    assert created.created_at.tzinfo is not None
    assert created.target_denominations == FRONT_TARGET

    fetched = drawer_repo.get(FRONT_DRAWER)
    assert fetched == created


def test_duplicate_drawer_name_is_rejected(drawer_repo: DrawerSettingsRepository) -> None:
    drawer_repo.create(DrawerSettings(id=FRONT_DRAWER, name="Front Counter"))

    with pytest.raises(DuplicateDrawerError) as exc_info:
        drawer_repo.create(DrawerSettings(id=BACK_DRAWER, name="Front Counter"))
    assert exc_info.value.field == "name"

    with pytest.raises(DuplicateDrawerError) as exc_info:
        drawer_repo.create(DrawerSettings(id=FRONT_DRAWER, name="Another"))
    assert exc_info.value.field == "id"


def test_update_drawer_settings_replaces_fields(drawer_repo: DrawerSettingsRepository) -> None:
    drawer_repo.create(DrawerSettings(id=FRONT_DRAWER, name="Front Counter"))
    drawer_repo.create(DrawerSettings(id=BACK_DRAWER, name="Back Office"))

    updated = drawer_repo.update(
        DrawerSettings(
            id=FRONT_DRAWER,
            name="Front Desk",
            target_denominations=DenominationCount(ones=20),
            is_active=False,
            show_detailed_calculations=True,
        )
    )

    assert updated.name == "Front Desk"
    assert updated.target_denominations.ones == 20
    assert not updated.is_active
    assert updated.show_detailed_calculations

    with pytest.raises(DuplicateDrawerError):
        drawer_repo.update(DrawerSettings(id=FRONT_DRAWER, name="Back Office"))
    with pytest.raises(DrawerNotFoundError):
        drawer_repo.update(DrawerSettings(id=DrawerId("nope"), name="Nope"))


def test_delete_drawer_settings(drawer_repo: DrawerSettingsRepository) -> None:
    drawer_repo.create(DrawerSettings(id=FRONT_DRAWER, name="Front Counter"))

    drawer_repo.delete(FRONT_DRAWER)

    assert drawer_repo.get(FRONT_DRAWER) is None
    with pytest.raises(DrawerNotFoundError):
        drawer_repo.delete(FRONT_DRAWER)


def test_ensure_defaults_seeds_only_empty_table(drawer_repo: DrawerSettingsRepository) -> None:
    seeded = drawer_repo.ensure_defaults()

    assert [(d.id, d.name) for d in seeded] == list(DEFAULT_DRAWERS)
    assert all(d.target_denominations.is_zero() for d in seeded)
    assert drawer_repo.ensure_defaults() == []
    assert len(drawer_repo.list()) == 2


def test_create_and_get_count_record(count_repo: CountRecordRepository) -> None:
    record = make_count(
        drawer_id=FRONT_DRAWER,
        count_type=CountType.CLOSING,
        denominations=CLOSING_345_50,
        target=FRONT_TARGET,
        sms_cash_cents=4550,
        timestamp=T0,
        submitter=MANAGER,
    )

    created = count_repo.create(record)

    assert created.id is not None
    assert created.model_copy(update={"id": None}) == record
    assert count_repo.get(created.id) == created


def test_timestamps_are_stored_as_utc(count_repo: CountRecordRepository) -> None:
    local = datetime(2024, 1, 2, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    record = make_count(drawer_id=FRONT_DRAWER, count_type=CountType.OPENING, denominations=OPENING_300, timestamp=local)

    created = count_repo.create(record)

    assert created.timestamp == local
    assert created.timestamp.tzinfo == timezone.utc
    assert count_repo.latest_opening_at_or_before(FRONT_DRAWER, datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc))
    assert count_repo.latest_opening_at_or_before(FRONT_DRAWER, datetime(2024, 1, 2, 7, 59, tzinfo=timezone.utc)) is None


def test_list_count_records_newest_first_with_filters(count_repo: CountRecordRepository) -> None:
    first = count_repo.create(
        make_count(drawer_id=FRONT_DRAWER, count_type=CountType.OPENING, denominations=OPENING_300, timestamp=T0)
    )
    second = count_repo.create(
        make_count(
            drawer_id=BACK_DRAWER,
            count_type=CountType.OPENING,
            denominations=OPENING_300,
            timestamp=T0 + timedelta(days=1),
            submitter=MANAGER,
        )
    )
    third = count_repo.create(
        make_count(
            drawer_id=FRONT_DRAWER,
            count_type=CountType.CLOSING,
            denominations=CLOSING_340,
            timestamp=T0 + timedelta(days=2),
        )
    )

    assert [r.id for r in count_repo.list()] == [third.id, second.id, first.id]
    assert [r.id for r in count_repo.list(RecordFilters(drawer_id=FRONT_DRAWER))] == [third.id, first.id]
    assert [r.id for r in count_repo.list(RecordFilters(user_id=MANAGER.user_id))] == [second.id]
    day_two = date(2024, 1, 3)
    assert [r.id for r in count_repo.list(RecordFilters(start_date=day_two, end_date=day_two))] == [second.id]
    assert [r.id for r in count_repo.list(RecordFilters(start_date=day_two))] == [third.id, second.id]


def test_replace_count_record_is_wholesale(count_repo: CountRecordRepository) -> None:
    created = count_repo.create(
        make_count(
            drawer_id=FRONT_DRAWER,
            count_type=CountType.CLOSING,
            denominations=CLOSING_345_50,
            sms_cash_cents=4550,
            timestamp=T0,
        )
    )
    replacement = make_count(
        drawer_id=FRONT_DRAWER, count_type=CountType.OPENING, denominations=OPENING_300, timestamp=T0
    )

    replaced = count_repo.replace(created.id, replacement)

    assert replaced.id == created.id
    assert replaced.count_type is CountType.OPENING
    assert replaced.sms_cash_cents is None
    assert replaced.total_cash_cents == 30_000

    with pytest.raises(CountRecordNotFoundError):
        count_repo.replace(9999, replacement)


def test_delete_count_record(count_repo: CountRecordRepository) -> None:
    created = count_repo.create(
        make_count(drawer_id=FRONT_DRAWER, count_type=CountType.OPENING, denominations=OPENING_300, timestamp=T0)
    )

    count_repo.delete(created.id)

    assert count_repo.get(created.id) is None
    with pytest.raises(CountRecordNotFoundError):
        count_repo.delete(created.id)


def test_latest_opening_query_agrees_with_history_scan(count_repo: CountRecordRepository) -> None:
    count_repo.create(make_count(drawer_id=FRONT_DRAWER, count_type=CountType.OPENING, denominations=CLOSING_340, timestamp=T0))
    tie_first = count_repo.create(
        make_count(drawer_id=FRONT_DRAWER, count_type=CountType.OPENING, denominations=CLOSING_340, timestamp=T0 + timedelta(hours=1))
    )
    tie_second = count_repo.create(
        make_count(drawer_id=FRONT_DRAWER, count_type=CountType.OPENING, denominations=OPENING_300, timestamp=T0 + timedelta(hours=1))
    )
    count_repo.create(make_count(drawer_id=BACK_DRAWER, count_type=CountType.OPENING, denominations=OPENING_300, timestamp=T0 + timedelta(hours=2)))
    closing = count_repo.create(
        make_count(
            drawer_id=FRONT_DRAWER,
            count_type=CountType.CLOSING,
            denominations=CLOSING_345_50,
            sms_cash_cents=4550,
            timestamp=T0 + timedelta(hours=9),
        )
    )
    count_repo.create(make_count(drawer_id=FRONT_DRAWER, count_type=CountType.OPENING, denominations=CLOSING_340, timestamp=T0 + timedelta(hours=10)))

    baseline = count_repo.latest_opening_at_or_before(FRONT_DRAWER, closing.timestamp)

    assert baseline is not None
    assert tie_second.id is not None and tie_first.id is not None and tie_second.id > tie_first.id
    assert baseline.id == tie_second.id
    assert compute_discrepancy(closing, count_repo.list()).opening_record_id == baseline.id


def test_bank_deposit_round_trip_and_filters(deposit_repo: BankDepositRepository) -> None:
    first = deposit_repo.create(
        BankDeposit(
            total_cash_cents=120_000,
            total_checks_cents=35_075,
            images=["deposit-1.jpg"],
            notes="Monday",
            timestamp=T0,
            user_id="a@example.com",
            user_name="A",
        )
    )
    second = deposit_repo.create(
        BankDeposit(total_cash_cents=5_000, timestamp=T0 + timedelta(days=1), user_id="b@example.com", user_name="B")
    )

    fetched = deposit_repo.get(first.id)
    assert fetched == first
    assert fetched.images == ["deposit-1.jpg"]
    assert fetched.total_cents == 155_075
    assert [d.id for d in deposit_repo.list()] == [second.id, first.id]
    assert [d.id for d in deposit_repo.list(RecordFilters(user_id="b@example.com"))] == [second.id]
    # Deposits are not tied to a drawer.
    assert len(deposit_repo.list(RecordFilters(drawer_id=FRONT_DRAWER))) == 2

    deposit_repo.delete(first.id)
    assert deposit_repo.get(first.id) is None
    with pytest.raises(BankDepositNotFoundError):
        deposit_repo.delete(first.id)

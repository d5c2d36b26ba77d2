from typing import Annotated, Generator

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from db.repositories import BankDepositRepository, CountRecordRepository, DrawerSettingsRepository
from domain.count_record import Submitter
from services.cash_count_service import CashCountService


def get_session(request: Request) -> Generator[Session, None, None]:
    with request.app.state.sessionmaker() as session:
        yield session


def get_drawer_settings_repository(session: Annotated[Session, Depends(get_session)]) -> DrawerSettingsRepository:
    return DrawerSettingsRepository(session)


def get_count_record_repository(session: Annotated[Session, Depends(get_session)]) -> CountRecordRepository:
    return CountRecordRepository(session)


def get_bank_deposit_repository(session: Annotated[Session, Depends(get_session)]) -> BankDepositRepository:
    return BankDepositRepository(session)


def get_cash_count_service(
    counts: Annotated[CountRecordRepository, Depends(get_count_record_repository)],
    drawers: Annotated[DrawerSettingsRepository, Depends(get_drawer_settings_repository)],
) -> CashCountService:
    return CashCountService(counts=counts, drawers=drawers)


def get_submitter(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_name: Annotated[str | None, Header()] = None,
) -> Submitter:
    # Authentication happens in front of this API; only the identity is recorded.
    return Submitter(user_id=x_user_id or "unknown", user_name=x_user_name or "Unknown User")

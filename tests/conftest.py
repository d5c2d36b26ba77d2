from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from api.api import create_app
from db.models import Base
from db.repositories import BankDepositRepository, CountRecordRepository, DrawerSettingsRepository
from domain.drawer import DrawerSettings
from services.cash_count_service import CashCountService
from tests.constants import FRONT_DRAWER, FRONT_TARGET
from tests.helpers.time_utils import DEFAULT_TIME_GEN

# One shared connection so the API's worker threads see the same in-memory database.
engine: Engine = create_engine(
    "sqlite:///:memory:", connect_args={"check_same_thread": False}, poolclass=StaticPool
)
session_factory = sessionmaker(engine)


@pytest.fixture(scope="function")
def test_session() -> Generator[Session, None, None]:
    with session_factory() as session:
        yield session


@pytest.fixture(scope="function", autouse=True)
def reset_db() -> Generator[None, None, None]:
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def _reset_default_time_gen() -> None:
    DEFAULT_TIME_GEN.reset()


@pytest.fixture(scope="function")
def drawer_repo(test_session: Session) -> DrawerSettingsRepository:
    return DrawerSettingsRepository(test_session)


@pytest.fixture(scope="function")
def count_repo(test_session: Session) -> CountRecordRepository:
    return CountRecordRepository(test_session)


@pytest.fixture(scope="function")
def deposit_repo(test_session: Session) -> BankDepositRepository:
    return BankDepositRepository(test_session)


@pytest.fixture(scope="function")
def front_drawer(drawer_repo: DrawerSettingsRepository) -> DrawerSettings:
    return drawer_repo.create(DrawerSettings(id=FRONT_DRAWER, name="Front Counter", target_denominations=FRONT_TARGET))


@pytest.fixture(scope="function")
def cash_count_service(
    count_repo: CountRecordRepository, drawer_repo: DrawerSettingsRepository
) -> CashCountService:
    return CashCountService(counts=count_repo, drawers=drawer_repo, clock=DEFAULT_TIME_GEN)


@pytest.fixture(scope="function")
def api_client() -> TestClient:
    return TestClient(create_app(session_factory, seed_defaults=False))

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from time import perf_counter
from typing import Annotated, AsyncGenerator, Awaitable, Callable

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker

from api.dependencies import (
    get_bank_deposit_repository,
    get_cash_count_service,
    get_count_record_repository,
    get_drawer_settings_repository,
    get_submitter,
)
from api.schemas import (
    AnalyticsResponse,
    BankDepositCreate,
    BankDepositResponse,
    CountRecordResponse,
    CountSubmission,
    DiscrepancyResponse,
    DrawerSettingsCreate,
    DrawerSettingsPayload,
    DrawerSettingsResponse,
    DrawerSummaryResponse,
    TotalsRequest,
    TotalsResponse,
)
from config import LOG_FORMAT, config
from db.db import create_db_engine
from db.repositories import BankDepositRepository, CountRecordRepository, DrawerSettingsRepository
from domain.bank_deposit import BankDeposit, BankDepositNotFoundError
from domain.count_record import CountRecordNotFoundError, CountTypeError, EmptyCountError, Submitter
from domain.drawer import DrawerId, DrawerNotFoundError, DrawerSettings, DuplicateDrawerError
from domain.filters import RecordFilters
from domain.reconciliation import ReconciliationEngine
from services.analytics import build_cash_analytics
from services.cash_count_service import CashCountService
from utils.money import decimal_to_cents

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cash-management")

NOT_FOUND_ERRORS = (DrawerNotFoundError, CountRecordNotFoundError, BankDepositNotFoundError)
BAD_REQUEST_ERRORS = (DuplicateDrawerError, CountTypeError, EmptyCountError)


def get_filters(
    drawer_id: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    user_id: str | None = None,
) -> RecordFilters:
    return RecordFilters(drawer_id=drawer_id, start_date=start_date, end_date=end_date, user_id=user_id)


# === Totals ===


@router.post("/totals")
def preview_totals(
    payload: TotalsRequest,
    service: Annotated[CashCountService, Depends(get_cash_count_service)],
) -> TotalsResponse:
    totals = service.preview_totals(payload.drawer_id, payload.count_type, payload.denominations)
    return TotalsResponse.from_domain(totals)


# === Drawer counts ===


@router.post("/drawer-counts")
def submit_drawer_count(
    payload: CountSubmission,
    service: Annotated[CashCountService, Depends(get_cash_count_service)],
    submitter: Annotated[Submitter, Depends(get_submitter)],
) -> CountRecordResponse:
    record = service.submit_count(
        drawer_id=payload.drawer_id,
        count_type=payload.count_type,
        denominations=payload.denominations,
        sms_cash=payload.sms_cash,
        submitter=submitter,
    )
    return CountRecordResponse.from_domain(record)


@router.get("/drawer-counts")
def list_drawer_counts(
    filters: Annotated[RecordFilters, Depends(get_filters)],
    service: Annotated[CashCountService, Depends(get_cash_count_service)],
) -> list[CountRecordResponse]:
    return [CountRecordResponse.from_domain(record) for record in service.list_counts(filters)]


@router.get("/drawer-counts/{record_id}")
def get_drawer_count(
    record_id: int,
    service: Annotated[CashCountService, Depends(get_cash_count_service)],
) -> CountRecordResponse:
    return CountRecordResponse.from_domain(service.get_count(record_id))


@router.put("/drawer-counts/{record_id}")
def update_drawer_count(
    record_id: int,
    payload: CountSubmission,
    service: Annotated[CashCountService, Depends(get_cash_count_service)],
    submitter: Annotated[Submitter, Depends(get_submitter)],
) -> CountRecordResponse:
    record = service.update_count(
        record_id,
        drawer_id=payload.drawer_id,
        count_type=payload.count_type,
        denominations=payload.denominations,
        sms_cash=payload.sms_cash,
        submitter=submitter,
    )
    return CountRecordResponse.from_domain(record)


@router.delete("/drawer-counts/{record_id}")
def delete_drawer_count(
    record_id: int,
    service: Annotated[CashCountService, Depends(get_cash_count_service)],
) -> dict[str, str]:
    service.delete_count(record_id)
    return {"message": "Drawer count deleted successfully"}


@router.get("/drawer-counts/{record_id}/discrepancy")
def get_drawer_count_discrepancy(
    record_id: int,
    service: Annotated[CashCountService, Depends(get_cash_count_service)],
) -> DiscrepancyResponse:
    return DiscrepancyResponse.from_domain(service.reconcile_count(record_id))


@router.get("/drawers/{drawer_id}/summary")
def get_drawer_summary(
    drawer_id: str,
    service: Annotated[CashCountService, Depends(get_cash_count_service)],
) -> DrawerSummaryResponse | None:
    summary = service.drawer_summary(drawer_id)
    if summary is None:
        return None
    return DrawerSummaryResponse.from_domain(summary)


# === Drawer settings ===


@router.get("/drawer-settings")
def list_drawer_settings(
    drawers: Annotated[DrawerSettingsRepository, Depends(get_drawer_settings_repository)],
) -> list[DrawerSettingsResponse]:
    return [DrawerSettingsResponse.from_domain(settings) for settings in drawers.list()]


@router.post("/drawer-settings")
def create_drawer_settings(
    payload: DrawerSettingsCreate,
    drawers: Annotated[DrawerSettingsRepository, Depends(get_drawer_settings_repository)],
) -> DrawerSettingsResponse:
    settings = DrawerSettings(
        id=DrawerId(payload.id),
        name=payload.name,
        target_denominations=payload.target_denominations,
        is_active=payload.is_active,
        show_detailed_calculations=payload.show_detailed_calculations,
    )
    return DrawerSettingsResponse.from_domain(drawers.create(settings))


@router.put("/drawer-settings/{drawer_id}")
def update_drawer_settings(
    drawer_id: str,
    payload: DrawerSettingsPayload,
    drawers: Annotated[DrawerSettingsRepository, Depends(get_drawer_settings_repository)],
) -> DrawerSettingsResponse:
    settings = DrawerSettings(
        id=DrawerId(drawer_id),
        name=payload.name,
        target_denominations=payload.target_denominations,
        is_active=payload.is_active,
        show_detailed_calculations=payload.show_detailed_calculations,
    )
    return DrawerSettingsResponse.from_domain(drawers.update(settings))


@router.delete("/drawer-settings/{drawer_id}")
def delete_drawer_settings(
    drawer_id: str,
    drawers: Annotated[DrawerSettingsRepository, Depends(get_drawer_settings_repository)],
) -> dict[str, str]:
    drawers.delete(drawer_id)
    return {"message": "Drawer settings deleted successfully"}


# === Bank deposits ===


@router.post("/bank-deposits")
def create_bank_deposit(
    payload: BankDepositCreate,
    deposits: Annotated[BankDepositRepository, Depends(get_bank_deposit_repository)],
    submitter: Annotated[Submitter, Depends(get_submitter)],
) -> BankDepositResponse:
    deposit = deposits.create(
        BankDeposit(
            total_cash_cents=decimal_to_cents(payload.total_cash),
            total_checks_cents=decimal_to_cents(payload.total_checks),
            images=payload.images,
            notes=payload.notes,
            timestamp=datetime.now(timezone.utc),
            user_id=submitter.user_id,
            user_name=submitter.user_name,
        )
    )
    logger.info("Saved bank deposit id=%s total=%s", deposit.id, deposit.total_cents)
    return BankDepositResponse.from_domain(deposit)


@router.get("/bank-deposits")
def list_bank_deposits(
    filters: Annotated[RecordFilters, Depends(get_filters)],
    deposits: Annotated[BankDepositRepository, Depends(get_bank_deposit_repository)],
) -> list[BankDepositResponse]:
    return [BankDepositResponse.from_domain(deposit) for deposit in deposits.list(filters)]


@router.get("/bank-deposits/{deposit_id}")
def get_bank_deposit(
    deposit_id: int,
    deposits: Annotated[BankDepositRepository, Depends(get_bank_deposit_repository)],
) -> BankDepositResponse:
    deposit = deposits.get(deposit_id)
    if deposit is None:
        raise BankDepositNotFoundError(deposit_id=deposit_id)
    return BankDepositResponse.from_domain(deposit)


@router.delete("/bank-deposits/{deposit_id}")
def delete_bank_deposit(
    deposit_id: int,
    deposits: Annotated[BankDepositRepository, Depends(get_bank_deposit_repository)],
) -> dict[str, str]:
    deposits.delete(deposit_id)
    return {"message": "Bank deposit deleted successfully"}


# === Analytics ===


@router.get("/analytics")
def get_analytics(
    filters: Annotated[RecordFilters, Depends(get_filters)],
    counts: Annotated[CountRecordRepository, Depends(get_count_record_repository)],
    deposits: Annotated[BankDepositRepository, Depends(get_bank_deposit_repository)],
) -> AnalyticsResponse:
    analytics = build_cash_analytics(
        counts.list(filters), deposits.list(filters.dates_only()), ReconciliationEngine(counts)
    )
    return AnalyticsResponse.from_domain(analytics)


def create_app(session_factory: sessionmaker[Session] | None = None, *, seed_defaults: bool | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
        settings = config()
        logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
        engine = None
        if session_factory is None:
            engine = create_db_engine(settings.db_file, echo=settings.db_echo)
            fastapi_app.state.sessionmaker = sessionmaker(engine)
        should_seed = settings.seed_default_drawers if seed_defaults is None else seed_defaults
        if should_seed:
            with fastapi_app.state.sessionmaker() as session:
                seeded = DrawerSettingsRepository(session).ensure_defaults()
                if seeded:
                    logger.info("Seeded %d default drawers", len(seeded))
        yield
        if engine is not None:
            engine.dispose()

    fastapi_app = FastAPI(lifespan=lifespan)
    if session_factory is not None:
        fastapi_app.state.sessionmaker = session_factory

    @fastapi_app.middleware("http")
    async def log_process_time(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        start_time = perf_counter()
        response = await call_next(request)
        process_time = perf_counter() - start_time
        logger.debug("Request time: %s %s: %.4fs", request.method, request.url, process_time)
        return response

    async def _handle_not_found(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    async def _handle_bad_request(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    for error_class in NOT_FOUND_ERRORS:
        fastapi_app.add_exception_handler(error_class, _handle_not_found)
    for error_class in BAD_REQUEST_ERRORS:
        fastapi_app.add_exception_handler(error_class, _handle_bad_request)

    @fastapi_app.exception_handler(ValidationError)
    async def _handle_validation(request: Request, exc: ValidationError) -> JSONResponse:
        detail = exc.errors(include_url=False, include_context=False, include_input=False)
        return JSONResponse(status_code=422, content={"error": "Invalid input", "detail": detail})

    fastapi_app.include_router(router)
    return fastapi_app


app = create_app()

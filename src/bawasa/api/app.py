"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from tortoise import Tortoise
from tortoise.exceptions import BaseORMException

from bawasa.api.routes import admin, cashier
from bawasa.config import settings
from bawasa.core.db import TORTOISE_ORM
from bawasa.core.repositories.billing import BillingRepository
from bawasa.core.repositories.consumer import ConsumerRepository
from bawasa.core.repositories.reading import ReadingRepository
from bawasa.services.billing import BillingError, BillingNotFound, BillingService
from bawasa.services.consumers import ConsumerError, ConsumerService
from bawasa.services.meter_change import (
    InvalidInput,
    MeterChangeService,
    StoreReadFailure,
    StoreWriteFailure,
)
from bawasa.services.readings import ConsumerNotFound, ReadingError, ReadingService
from bawasa.services.scheduler import SchedulerService

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _register_error_handlers(app: FastAPI) -> None:
    async def client_error(request: Request, exc: Exception):
        logger.warning(f"400 on {request.method} {request.url.path}: {exc}")
        return _error(400, str(exc))

    async def not_found(request: Request, exc: Exception):
        return _error(404, str(exc))

    async def store_error(request: Request, exc: Exception):
        # Store messages are passed through to the caller.
        return _error(500, str(exc))

    async def orm_error(request: Request, exc: Exception):
        logger.error(
            f"Store error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return _error(500, str(exc))

    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.warning(
            f"400 ValidationError on {request.method} {request.url.path} errors={errors}"
        )
        if not errors:
            return _error(400, "Invalid request body")
        first = errors[0]
        field = ".".join(
            str(part)
            for part in first.get("loc", ())
            if part not in ("body", "path", "query")
        )
        return _error(400, f"{field}: {first.get('msg')}" if field else first.get("msg"))

    for exc_class in (InvalidInput, ReadingError, BillingError, ConsumerError):
        app.add_exception_handler(exc_class, client_error)
    for exc_class in (ConsumerNotFound, BillingNotFound):
        app.add_exception_handler(exc_class, not_found)
    for exc_class in (StoreReadFailure, StoreWriteFailure):
        app.add_exception_handler(exc_class, store_error)
    app.add_exception_handler(BaseORMException, orm_error)
    app.add_exception_handler(RequestValidationError, validation_error)

    @app.middleware("http")
    async def unexpected_error(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception(f"Unhandled exception on {request.method} {request.url}")
            return _error(500, UNEXPECTED_ERROR)


def create_app(init_db: bool = True, start_scheduler: bool | None = None) -> FastAPI:
    """
    Builds the API application.

    Repositories and services are constructed once here and shared by all
    requests. With ``init_db`` the application lifespan opens and closes the
    Tortoise connections; the scheduler runs only when enabled.
    """
    if start_scheduler is None:
        start_scheduler = settings.SCHEDULER_ENABLED

    consumer_repo = ConsumerRepository()
    reading_repo = ReadingRepository()
    billing_repo = BillingRepository()

    reading_service = ReadingService(consumer_repo=consumer_repo, reading_repo=reading_repo)
    billing_service = BillingService(
        consumer_repo=consumer_repo,
        reading_repo=reading_repo,
        billing_repo=billing_repo,
    )
    scheduler_service = SchedulerService(
        reading_service=reading_service,
        billing_service=billing_service,
        scheduler=AsyncIOScheduler(),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_db:
            logger.info("Initializing database...")
            await Tortoise.init(config=TORTOISE_ORM)
            logger.info("Database initialized.")
        if start_scheduler:
            scheduler_service.start()
        logger.info("BAWASA API started.")
        yield
        logger.info("Shutting down...")
        scheduler_service.shutdown()
        if init_db:
            await Tortoise.close_connections()
        logger.info("Connections closed.")

    app = FastAPI(
        title="BAWASA API",
        version="0.1.0",
        description="Water billing administration and cashier API",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.consumer_service = ConsumerService(
        consumer_repo=consumer_repo, reading_repo=reading_repo
    )
    app.state.meter_change_service = MeterChangeService(reading_repo=reading_repo)
    app.state.reading_service = reading_service
    app.state.billing_service = billing_service

    _register_error_handlers(app)

    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
    app.include_router(cashier.router, prefix="/api/cashier", tags=["cashier"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app

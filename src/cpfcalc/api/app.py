"""FastAPI application with lifespan, router mounting and error mapping."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cpfcalc.api.routes import cpf, health
from cpfcalc.core.config import AppSettings
from cpfcalc.core.exceptions import (
    ConfigurationError,
    RecordNotFoundError,
    StorageError,
    ValidationError,
)
from cpfcalc.core.logging_config import configure_logging, get_logger
from cpfcalc.core.protocols import IRecordStore
from cpfcalc.engine.bulk import BulkProcessor
from cpfcalc.engine.calculator import ContributionCalculator
from cpfcalc.engine.rate_table import RateTable
from cpfcalc.engine.service import ContributionService
from cpfcalc.persistence import create_record_store

logger = get_logger("api")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        parts = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err["loc"] if p != "body")
            parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
        return _error(400, "; ".join(parts) or "Invalid input parameters")

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(RecordNotFoundError)
    async def not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
        return _error(404, str(exc))

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Rate table invariant violated: %s", exc, exc_info=exc)
        return _error(500, "CPF rate configuration error")

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Calculation record store failure: %s", exc, exc_info=exc)
        return _error(503, "CPF record storage unavailable")


def create_app(
    settings: AppSettings | None = None,
    store: IRecordStore | None = None,
    rate_table: RateTable | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``store`` and ``rate_table`` override the settings-driven defaults.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        app_settings = settings or AppSettings()
        configure_logging(app_settings.log_level, json_format=app_settings.log_json)

        service = ContributionService(
            rate_table=rate_table if rate_table is not None else RateTable(),
            store=store if store is not None else create_record_store(app_settings),
            calculator=ContributionCalculator(
                ordinary_wage_ceiling=app_settings.calculation.ordinary_wage_ceiling,
                additional_wage_ceiling=app_settings.calculation.additional_wage_ceiling,
            ),
        )
        app.state.settings = app_settings
        app.state.service = service
        app.state.bulk_processor = BulkProcessor(
            service,
            max_batch_size=app_settings.bulk.max_batch_size,
            max_concurrency=app_settings.bulk.max_concurrency,
        )
        logger.info(
            "CPF calculator started",
            extra={"environment": app_settings.environment, "storage": app_settings.storage_backend},
        )
        yield

    app = FastAPI(
        title="CPF Contribution Calculator",
        version="0.1.0",
        lifespan=lifespan,
    )
    _register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(cpf.router, prefix="/api/cpf")
    return app

"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timesheet_engine.api.routes import (
    attendance_router,
    health_router,
    invoices_router,
    periods_router,
)
from timesheet_engine.calculators.periods import PeriodCalculator
from timesheet_engine.clock import Clock, SystemClock
from timesheet_engine.config import Settings, configure_logging, get_settings
from timesheet_engine.database import SessionFactory, create_schema, init_db
from timesheet_engine.events import EventEmitter, register_default_handlers
from timesheet_engine.exceptions import (
    DuplicatePunchError,
    InvalidPeriodStartError,
    MissingRateConfigError,
    PeriodAlreadyClosedError,
    PeriodNotClosedError,
    TimesheetEngineError,
    UnknownEmployeeError,
)

logger = logging.getLogger(__name__)

# Exception type -> (HTTP status, error code)
ERROR_STATUS: dict[type[TimesheetEngineError], tuple[int, str]] = {
    UnknownEmployeeError: (status.HTTP_404_NOT_FOUND, "UNKNOWN_EMPLOYEE"),
    MissingRateConfigError: (status.HTTP_409_CONFLICT, "MISSING_RATE_CONFIG"),
    PeriodNotClosedError: (status.HTTP_409_CONFLICT, "PERIOD_NOT_CLOSED"),
    PeriodAlreadyClosedError: (status.HTTP_409_CONFLICT, "PERIOD_ALREADY_CLOSED"),
    DuplicatePunchError: (status.HTTP_409_CONFLICT, "DUPLICATE_PUNCH"),
    InvalidPeriodStartError: (422, "INVALID_PERIOD_START"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)

    engine = None
    if app.state.session_factory is None:
        engine, factory = init_db(settings.database_url)
        app.state.session_factory = factory
        register_default_handlers(app.state.emitter, factory)
        if settings.auto_create_schema:
            await create_schema(engine)

    PeriodCalculator(settings.anchor, settings.tz).check_anchor_change(
        settings.previous_anchor
    )
    logger.info(
        "Timesheet engine started (zone %s, period anchor %s v%s)",
        settings.timezone,
        settings.period_anchor,
        settings.period_anchor_version,
    )
    yield
    if engine is not None:
        await engine.dispose()


def create_app(
    settings: Settings | None = None,
    session_factory: SessionFactory | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Defaults to the environment
        session_factory: Bind an existing factory instead of creating an
            engine at startup
        clock: Source of "now" for punches and invoice dates
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Timesheet Engine API",
        description="Fortnightly attendance, timesheets and invoicing",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.clock = clock or SystemClock(settings.tz)
    app.state.emitter = EventEmitter()
    if session_factory is not None:
        register_default_handlers(app.state.emitter, session_factory)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(TimesheetEngineError)
    async def engine_exception_handler(
        request: Request, exc: TimesheetEngineError
    ) -> JSONResponse:
        """Map domain errors to HTTP responses."""
        for error_type, (status_code, code) in ERROR_STATUS.items():
            if isinstance(exc, error_type):
                return JSONResponse(
                    status_code=status_code,
                    content={"detail": str(exc), "code": code},
                )
        logger.error("Unhandled engine error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "code": "ENGINE_ERROR"},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(attendance_router, prefix="/api/v1")
    app.include_router(periods_router, prefix="/api/v1")
    app.include_router(invoices_router, prefix="/api/v1")

    return app

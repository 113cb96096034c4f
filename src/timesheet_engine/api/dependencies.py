"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet_engine.clock import Clock
from timesheet_engine.config import Settings
from timesheet_engine.database import SessionFactory
from timesheet_engine.events import EventEmitter
from timesheet_engine.services import InvoiceService, PunchService, TimesheetService


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_session_factory(request: Request) -> SessionFactory:
    """Session factory bound at startup (or injected by the caller)."""
    return request.app.state.session_factory


def get_emitter(request: Request) -> EventEmitter:
    return request.app.state.emitter


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Factory = Annotated[SessionFactory, Depends(get_session_factory)]
Emitter = Annotated[EventEmitter, Depends(get_emitter)]
AppClock = Annotated[Clock, Depends(get_clock)]


async def get_db_session(factory: Factory) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_punch_service(
    factory: Factory, settings: AppSettings, clock: AppClock, emitter: Emitter
) -> PunchService:
    return PunchService(factory, settings=settings, clock=clock, emitter=emitter)


def get_timesheet_service(
    factory: Factory, settings: AppSettings, clock: AppClock
) -> TimesheetService:
    return TimesheetService(factory, settings=settings, clock=clock)


def get_invoice_service(
    factory: Factory, settings: AppSettings, clock: AppClock, emitter: Emitter
) -> InvoiceService:
    return InvoiceService(factory, settings=settings, clock=clock, emitter=emitter)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Punches = Annotated[PunchService, Depends(get_punch_service)]
Timesheets = Annotated[TimesheetService, Depends(get_timesheet_service)]
Invoices = Annotated[InvoiceService, Depends(get_invoice_service)]

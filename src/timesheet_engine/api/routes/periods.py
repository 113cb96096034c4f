"""Period, timesheet and period close endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Body, Path, Query

from timesheet_engine.api.dependencies import Invoices, Timesheets
from timesheet_engine.api.schemas import (
    CloseRequest,
    CloseResponse,
    ErrorResponse,
    IssuedInvoiceResponse,
    PeriodListResponse,
    PeriodResponse,
    SkippedEmployeeResponse,
    TimesheetResponse,
    TimesheetRowResponse,
)
from timesheet_engine.calculators.periods import PayPeriod

router = APIRouter(tags=["periods"])


def period_response(period: PayPeriod) -> PeriodResponse:
    return PeriodResponse(start=period.start, last_day=period.last_day, label=period.label)


@router.get("/periods", response_model=PeriodListResponse)
async def list_periods(
    timesheets: Timesheets,
    count: Annotated[int, Query(ge=1, le=52)] = 6,
) -> PeriodListResponse:
    """The most recent pay periods, newest first."""
    periods = timesheets.list_periods(count)
    return PeriodListResponse(items=[period_response(p) for p in periods])


@router.get("/periods/active", response_model=PeriodListResponse)
async def active_periods(timesheets: Timesheets) -> PeriodListResponse:
    """Periods with attendance plus the current and next one, newest first."""
    periods = await timesheets.active_periods()
    return PeriodListResponse(items=[period_response(p) for p in periods])


@router.get(
    "/timesheet",
    response_model=TimesheetResponse,
    responses={422: {"model": ErrorResponse}},
)
async def get_timesheet(
    timesheets: Timesheets,
    period_start: Annotated[date, Query()],
    include_idle: Annotated[bool, Query()] = True,
) -> TimesheetResponse:
    """Hour grid of the active roster for one period."""
    grid = await timesheets.get_timesheet(period_start, include_idle=include_idle)
    return TimesheetResponse(
        period=period_response(grid.period),
        slot_dates=grid.slot_dates,
        rows=[
            TimesheetRowResponse(
                employee_id=row.employee_id,
                name=row.name,
                hours=row.hours,
                total=row.total,
            )
            for row in grid.rows
        ],
        daily_totals=grid.daily_totals,
        grand_total=grid.grand_total,
    )


@router.post(
    "/periods/{period_start}/close",
    response_model=CloseResponse,
    responses={422: {"model": ErrorResponse}},
)
async def close_period(
    invoices: Invoices,
    period_start: Annotated[date, Path()],
    payload: Annotated[CloseRequest | None, Body()] = None,
) -> CloseResponse:
    """Issue official invoices for the period. Safe to repeat."""
    payload = payload or CloseRequest()
    result = await invoices.close_period(
        period_start, employee_ids=payload.employee_ids, actor=payload.actor
    )
    return CloseResponse(
        period=period_response(result.period),
        issued=[IssuedInvoiceResponse.model_validate(i) for i in result.issued],
        skipped=[SkippedEmployeeResponse.model_validate(s) for s in result.skipped],
    )

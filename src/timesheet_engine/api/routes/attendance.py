"""Attendance API endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from timesheet_engine.api.dependencies import Punches
from timesheet_engine.api.schemas import (
    ErrorResponse,
    OverrideRequest,
    PunchOutcomeResponse,
    PunchRequest,
    PunchResponse,
    RemoveResponse,
)
from timesheet_engine.calculators.types import ShiftType
from timesheet_engine.services import PunchOutcome

router = APIRouter(prefix="/attendance", tags=["attendance"])


def _outcome_response(outcome: PunchOutcome) -> PunchOutcomeResponse:
    window = outcome.window
    return PunchOutcomeResponse(
        employee_id=outcome.employee_id,
        status=outcome.status,
        accepted=outcome.accepted,
        error=outcome.error,
        shift_type=window.shift_type if window else None,
        work_date=window.work_date if window else None,
        window_opens_at=window.opens_at if window else None,
        window_closes_at=window.closes_at if window else None,
        punched_at=outcome.punched_at,
    )


@router.get(
    "/status",
    response_model=PunchOutcomeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def punch_status(
    punches: Punches,
    employee_id: Annotated[int, Query()],
) -> PunchOutcomeResponse:
    """Whether the employee can punch right now."""
    outcome = await punches.get_status(employee_id)
    return _outcome_response(outcome)


@router.post(
    "/punch",
    response_model=PunchOutcomeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": PunchOutcomeResponse, "description": "Punch rejected"},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def punch(
    punches: Punches,
    payload: PunchRequest,
    response: Response,
) -> PunchOutcomeResponse:
    """Record a punch for the shift window open now.

    Rejections (outside any window, already punched) are answered with 200
    and ``accepted: false``.
    """
    outcome = await punches.punch(payload.employee_id)
    if not outcome.accepted:
        response.status_code = status.HTTP_200_OK
    return _outcome_response(outcome)


@router.put(
    "/override",
    response_model=PunchResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def override_punch(
    punches: Punches,
    payload: OverrideRequest,
) -> PunchResponse:
    """Write a punch directly (administrators only)."""
    punch = await punches.override_punch(
        payload.employee_id,
        payload.work_date,
        payload.shift_type,
        rate=payload.rate,
        actor=payload.actor,
    )
    return PunchResponse.model_validate(punch)


@router.delete(
    "/override",
    response_model=RemoveResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def remove_punch(
    punches: Punches,
    employee_id: Annotated[int, Query()],
    work_date: Annotated[date, Query()],
    shift_type: Annotated[ShiftType, Query()],
    actor: Annotated[str, Query()] = "admin",
) -> RemoveResponse:
    """Delete a punch (administrators only)."""
    removed = await punches.remove_punch(employee_id, work_date, shift_type, actor=actor)
    return RemoveResponse(removed=removed)

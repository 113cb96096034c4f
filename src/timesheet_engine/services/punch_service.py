"""Attendance punches: status queries, punch capture and admin overrides."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from timesheet_engine.calculators.invoice import round_money
from timesheet_engine.calculators.periods import PeriodCalculator
from timesheet_engine.calculators.shift_windows import ShiftWindowValidator
from timesheet_engine.calculators.types import (
    PunchStatus,
    ShiftType,
    ShiftWindow,
    credited_hours,
)
from timesheet_engine.clock import Clock, SystemClock, as_utc
from timesheet_engine.config import Settings, get_settings
from timesheet_engine.database import SessionFactory
from timesheet_engine.events import (
    EventEmitter,
    EventMetadata,
    PunchAccepted,
    PunchOverridden,
    PunchRejected,
)
from timesheet_engine.exceptions import (
    DuplicatePunchError,
    PeriodAlreadyClosedError,
    PunchError,
)
from timesheet_engine.models import AttendancePunch
from timesheet_engine.repositories import (
    EmployeeRepository,
    InvoiceLogRepository,
    PunchRepository,
)

logger = logging.getLogger(__name__)

MANUAL_CLOCK_TEXT = "Manual Admin"


@dataclass(frozen=True)
class PunchOutcome:
    """Result of a status query or a punch attempt."""

    status: PunchStatus
    employee_id: int
    window: ShiftWindow | None = None
    punched_at: datetime | None = None
    error: PunchError | None = None

    @property
    def accepted(self) -> bool:
        return self.status == PunchStatus.PUNCHED and self.error is None


class PunchService:
    """Service for attendance capture.

    A punch is accepted only from the ``ready`` state. The unique constraint
    on (employee, work date, shift type) is the arbiter when two requests race;
    the loser is reported as a duplicate carrying the winner's timestamp.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        settings: Settings | None = None,
        clock: Clock | None = None,
        emitter: EventEmitter | None = None,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock(self.settings.tz)
        self.emitter = emitter or EventEmitter()
        self.validator = ShiftWindowValidator(self.settings.tz)
        self.periods = PeriodCalculator(self.settings.anchor, self.settings.tz)

    async def get_status(
        self, employee_id: int, now: datetime | None = None
    ) -> PunchOutcome:
        """Report blocked, ready or punched for the employee at ``now``.

        Raises:
            UnknownEmployeeError: If the employee is missing or inactive
        """
        now = now or self.clock.now()
        async with self.session_factory() as session:
            await EmployeeRepository(session).require(employee_id)
            window = self.validator.classify(now)
            if window is None:
                return PunchOutcome(PunchStatus.BLOCKED, employee_id)

            existing = await PunchRepository(session).find_punch(
                employee_id, window.work_date, window.shift_type.value
            )

        if existing is None:
            return PunchOutcome(PunchStatus.READY, employee_id, window=window)
        return PunchOutcome(
            PunchStatus.PUNCHED,
            employee_id,
            window=window,
            punched_at=as_utc(existing.punched_at),
        )

    async def punch(
        self, employee_id: int, now: datetime | None = None
    ) -> PunchOutcome:
        """Record a punch for the window open at ``now``.

        Returns an outcome with ``error`` set for out-of-window attempts and
        duplicates; neither is raised.

        Raises:
            UnknownEmployeeError: If the employee is missing or inactive
            MissingRateConfigError: If the employee has no hourly rate
        """
        now = self.validator.localize(now or self.clock.now())
        window = self.validator.classify(now)

        if window is None:
            async with self.session_factory() as session:
                await EmployeeRepository(session).require(employee_id)
            logger.info("Punch by employee %s outside any shift window", employee_id)
            await self.emitter.emit(
                PunchRejected(
                    metadata=EventMetadata.create(actor=str(employee_id)),
                    employee_id=employee_id,
                    reason=PunchError.OUT_OF_WINDOW.value,
                    attempted_at=as_utc(now),
                )
            )
            return PunchOutcome(
                PunchStatus.BLOCKED, employee_id, error=PunchError.OUT_OF_WINDOW
            )

        try:
            async with self.session_factory() as session, session.begin():
                employees = EmployeeRepository(session)
                punches = PunchRepository(session)

                employee = await employees.require(employee_id)
                existing = await punches.find_punch(
                    employee_id, window.work_date, window.shift_type.value
                )
                if existing is not None:
                    return self._duplicate(employee_id, window, existing)

                rate = employees.rate_of(employee)
                punch = await punches.insert_punch(
                    AttendancePunch(
                        employee_id=employee_id,
                        work_date=window.work_date,
                        punched_at=as_utc(now),
                        shift_type=window.shift_type.value,
                        rate=rate,
                        duration=window.hours,
                        gross=round_money(window.hours * rate),
                        source="punch",
                        clock_text=f"{now:%I:%M %p}",
                    )
                )
        except DuplicatePunchError:
            # Lost the race to a concurrent punch; report the winner
            async with self.session_factory() as session:
                existing = await PunchRepository(session).find_punch(
                    employee_id, window.work_date, window.shift_type.value
                )
            if existing is None:
                raise
            return self._duplicate(employee_id, window, existing)

        logger.info(
            "Employee %s punched %s shift on %s",
            employee_id,
            window.shift_type.value,
            window.work_date,
        )
        await self.emitter.emit(
            PunchAccepted(
                metadata=EventMetadata.create(actor=str(employee_id)),
                employee_id=employee_id,
                work_date=window.work_date,
                shift_type=window.shift_type.value,
                punched_at=as_utc(punch.punched_at),
                rate=punch.rate,
            )
        )
        return PunchOutcome(
            PunchStatus.PUNCHED,
            employee_id,
            window=window,
            punched_at=as_utc(punch.punched_at),
        )

    async def override_punch(
        self,
        employee_id: int,
        work_date: date,
        shift_type: ShiftType | str,
        rate: Decimal | None = None,
        actor: str = "admin",
    ) -> AttendancePunch:
        """Write a punch directly, bypassing the shift window gate.

        An existing punch keeps its captured rate unless ``rate`` is given;
        a new punch captures the employee's current rate.

        Raises:
            UnknownEmployeeError: If the employee does not exist
            MissingRateConfigError: If no rate is given and none is configured
            PeriodAlreadyClosedError: If the period is already invoiced
        """
        shift = ShiftType(shift_type)
        hours = credited_hours(shift)
        now = datetime.now(timezone.utc)

        async with self.session_factory() as session, session.begin():
            employees = EmployeeRepository(session)
            punches = PunchRepository(session)

            employee = await employees.require(employee_id, active_only=False)
            await self._ensure_open(session, employee_id, work_date)

            punch = await punches.find_punch(employee_id, work_date, shift.value)
            if punch is None:
                effective_rate = rate if rate is not None else employees.rate_of(employee)
                punch = await punches.insert_punch(
                    AttendancePunch(
                        employee_id=employee_id,
                        work_date=work_date,
                        punched_at=now,
                        shift_type=shift.value,
                        rate=effective_rate,
                        duration=hours,
                        gross=round_money(hours * effective_rate),
                        source="manual",
                        clock_text=MANUAL_CLOCK_TEXT,
                    )
                )
            else:
                if rate is not None:
                    punch.rate = rate
                punch.punched_at = now
                punch.source = "manual"
                punch.clock_text = MANUAL_CLOCK_TEXT
                punch.duration = hours
                punch.gross = round_money(hours * Decimal(punch.rate))
                await session.flush()

        logger.info(
            "%s set %s shift of employee %s on %s",
            actor,
            shift.value,
            employee_id,
            work_date,
        )
        await self.emitter.emit(
            PunchOverridden(
                metadata=EventMetadata.create(actor=actor),
                employee_id=employee_id,
                work_date=work_date,
                shift_type=shift.value,
                action="upsert",
                rate=Decimal(punch.rate),
            )
        )
        return punch

    async def remove_punch(
        self,
        employee_id: int,
        work_date: date,
        shift_type: ShiftType | str,
        actor: str = "admin",
    ) -> bool:
        """Delete a punch. Returns False when there was nothing to delete.

        Raises:
            UnknownEmployeeError: If the employee does not exist
            PeriodAlreadyClosedError: If the period is already invoiced
        """
        shift = ShiftType(shift_type)
        async with self.session_factory() as session, session.begin():
            await EmployeeRepository(session).require(employee_id, active_only=False)
            await self._ensure_open(session, employee_id, work_date)
            removed = await PunchRepository(session).delete_punch(
                employee_id, work_date, shift.value
            )

        if removed:
            logger.info(
                "%s removed %s shift of employee %s on %s",
                actor,
                shift.value,
                employee_id,
                work_date,
            )
            await self.emitter.emit(
                PunchOverridden(
                    metadata=EventMetadata.create(actor=actor),
                    employee_id=employee_id,
                    work_date=work_date,
                    shift_type=shift.value,
                    action="remove",
                    rate=None,
                )
            )
        return removed

    async def _ensure_open(
        self, session: AsyncSession, employee_id: int, work_date: date
    ) -> None:
        period_start = self.periods.period_start(work_date)
        record = await InvoiceLogRepository(session).find_invoice(employee_id, period_start)
        if record is not None:
            raise PeriodAlreadyClosedError(
                employee_id, period_start, record.invoice_number
            )

    def _duplicate(
        self, employee_id: int, window: ShiftWindow, existing: AttendancePunch
    ) -> PunchOutcome:
        return PunchOutcome(
            PunchStatus.PUNCHED,
            employee_id,
            window=window,
            punched_at=as_utc(existing.punched_at),
            error=PunchError.DUPLICATE_PUNCH,
        )

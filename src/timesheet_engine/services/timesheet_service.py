"""Timesheet grid and period listing."""

from __future__ import annotations

from datetime import date, datetime

from timesheet_engine.calculators.periods import PayPeriod, PeriodCalculator
from timesheet_engine.calculators.timesheet import TimesheetAggregator, TimesheetGrid
from timesheet_engine.clock import Clock, SystemClock
from timesheet_engine.config import Settings, get_settings
from timesheet_engine.database import SessionFactory
from timesheet_engine.exceptions import InvalidPeriodStartError
from timesheet_engine.repositories import EmployeeRepository, PunchRepository


def require_period_start(calculator: PeriodCalculator, value: date) -> PayPeriod:
    """Return the period starting on ``value``.

    Raises:
        InvalidPeriodStartError: If ``value`` is not aligned to the anchor
    """
    if not calculator.is_period_start(value):
        raise InvalidPeriodStartError(value, calculator.period_start(value))
    return PayPeriod(value)


class TimesheetService:
    """Reads the roster and its punches and hands them to the aggregator."""

    def __init__(
        self,
        session_factory: SessionFactory,
        settings: Settings | None = None,
        clock: Clock | None = None,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock(self.settings.tz)
        self.periods = PeriodCalculator(self.settings.anchor, self.settings.tz)
        self.aggregator = TimesheetAggregator()

    async def get_timesheet(
        self, period_start: date, include_idle: bool = True
    ) -> TimesheetGrid:
        period = require_period_start(self.periods, period_start)
        async with self.session_factory() as session:
            employees = await EmployeeRepository(session).list_active()
            punches = await PunchRepository(session).list_punches(
                [e.employee_id for e in employees], period.start, period.end
            )
        return self.aggregator.build_grid(
            period.start, employees, punches, include_idle=include_idle
        )

    def list_periods(
        self, count: int = 6, reference: date | datetime | None = None
    ) -> list[PayPeriod]:
        """The ``count`` most recent periods, newest first."""
        return self.periods.period_options(count, reference or self.clock.now())

    async def active_periods(
        self, reference: date | datetime | None = None
    ) -> list[PayPeriod]:
        """Periods with recorded attendance plus the current and next one."""
        async with self.session_factory() as session:
            work_dates = await PunchRepository(session).distinct_work_dates()
        return self.periods.periods_with_activity(
            work_dates, reference or self.clock.now()
        )

"""Fortnight timesheet grid aggregation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from timesheet_engine.calculators.periods import PERIOD_DAYS, PayPeriod
from timesheet_engine.calculators.types import PunchRecord, RosterEntry, credited_hours

GRID_SLOTS = 12  # two weeks of six working days
NON_WORKING_WEEKDAY = 6  # Sunday
HOURS_QUANTUM = Decimal("0.1")


def slot_index(period_start: date, work_date: date) -> int | None:
    """Grid column for a work date, or None when it has no column.

    Each elapsed week removes one column, which folds the two Sundays of a
    Monday-anchored fortnight out of the 12 visible slots.
    """
    if work_date.weekday() == NON_WORKING_WEEKDAY:
        return None
    day_offset = (work_date - period_start).days
    weeks_passed = day_offset // 7
    index = day_offset - weeks_passed
    if 0 <= index < GRID_SLOTS:
        return index
    return None


def slot_dates(period_start: date) -> list[date | None]:
    """Calendar date shown above each grid column."""
    dates: list[date | None] = [None] * GRID_SLOTS
    for offset in range(PERIOD_DAYS):
        day = period_start + timedelta(days=offset)
        index = slot_index(period_start, day)
        if index is not None and dates[index] is None:
            dates[index] = day
    return dates


def round_hours(value: Decimal) -> Decimal:
    return value.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass
class TimesheetRow:
    """One employee's line on the grid."""

    employee_id: int
    name: str
    hours: list[Decimal | None] = field(default_factory=lambda: [None] * GRID_SLOTS)
    total: Decimal = Decimal("0.0")

    @property
    def has_entries(self) -> bool:
        return any(h is not None for h in self.hours)

    def credit(self, index: int, hours: Decimal) -> None:
        current = self.hours[index]
        self.hours[index] = hours if current is None else current + hours


@dataclass
class TimesheetGrid:
    """Aggregated hours for one period."""

    period: PayPeriod
    slot_dates: list[date | None]
    rows: list[TimesheetRow]

    @property
    def daily_totals(self) -> list[Decimal]:
        totals = [Decimal("0")] * GRID_SLOTS
        for row in self.rows:
            for index, hours in enumerate(row.hours):
                if hours is not None:
                    totals[index] += hours
        return totals

    @property
    def grand_total(self) -> Decimal:
        return round_hours(sum(self.daily_totals, Decimal("0")))

    def row_for(self, employee_id: int) -> TimesheetRow | None:
        for row in self.rows:
            if row.employee_id == employee_id:
                return row
        return None


class TimesheetAggregator:
    """Builds the fixed-width hour grid from raw punches."""

    def build_grid(
        self,
        period_start: date,
        employees: Iterable[RosterEntry],
        punches: Iterable[PunchRecord],
        include_idle: bool = True,
    ) -> TimesheetGrid:
        """Bucket punches into per-employee slot arrays.

        Args:
            period_start: First day of the period
            employees: Roster, in display order
            punches: Punches to aggregate; others' and out-of-period ones are ignored
            include_idle: Keep employees without any punch (roster view) or
                drop them (grid of who worked)
        """
        period = PayPeriod(period_start)
        rows: dict[int, TimesheetRow] = {}
        for employee in employees:
            rows[employee.employee_id] = TimesheetRow(
                employee_id=employee.employee_id,
                name=employee.display_name,
            )

        for punch in punches:
            row = rows.get(punch.employee_id)
            if row is None or not period.contains(punch.work_date):
                continue
            index = slot_index(period.start, punch.work_date)
            if index is None:
                continue
            row.credit(index, credited_hours(punch.shift_type))

        for row in rows.values():
            filled = [h for h in row.hours if h is not None]
            # Round the total once; slot sums stay exact
            row.total = round_hours(sum(filled, Decimal("0")))

        kept = [row for row in rows.values() if include_idle or row.has_entries]
        return TimesheetGrid(
            period=period,
            slot_dates=slot_dates(period.start),
            rows=kept,
        )

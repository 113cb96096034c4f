"""Type definitions shared by the calculators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Protocol


class ShiftType(str, Enum):
    """Shift classification of a punch."""

    STANDARD = "standard"
    OVERTIME = "overtime"


class PunchStatus(str, Enum):
    """Punch eligibility for an employee at a given moment."""

    BLOCKED = "blocked"
    READY = "ready"
    PUNCHED = "punched"


@dataclass(frozen=True)
class WeeklyWindow:
    """A recurring weekly time-of-day interval, half-open ``[start, end)``."""

    weekday: int  # Monday=0 ... Sunday=6
    start: time
    end: time

    def contains(self, moment: datetime) -> bool:
        if moment.weekday() != self.weekday:
            return False
        clock = moment.time().replace(tzinfo=None)
        return self.start <= clock < self.end


@dataclass(frozen=True)
class ShiftSpec:
    """Everything that depends on the shift type lives in one row."""

    shift_type: ShiftType
    label: str
    hours: Decimal
    windows: tuple[WeeklyWindow, ...]


_MORNING = (time(7, 0), time(10, 0))

SHIFT_SPECS: dict[ShiftType, ShiftSpec] = {
    ShiftType.STANDARD: ShiftSpec(
        shift_type=ShiftType.STANDARD,
        label="morning",
        hours=Decimal("2.0"),
        windows=tuple(WeeklyWindow(day, *_MORNING) for day in range(0, 5)),
    ),
    ShiftType.OVERTIME: ShiftSpec(
        shift_type=ShiftType.OVERTIME,
        label="evening",
        hours=Decimal("2.4"),
        windows=(
            WeeklyWindow(4, time(19, 30), time(22, 30)),
            WeeklyWindow(5, time(16, 30), time(19, 30)),
        ),
    ),
}


def credited_hours(shift_type: ShiftType | str) -> Decimal:
    """Hours credited for one punch of the given shift type."""
    return SHIFT_SPECS[ShiftType(shift_type)].hours


@dataclass(frozen=True)
class ShiftWindow:
    """A shift window that is open at a particular moment."""

    shift_type: ShiftType
    work_date: date
    opens_at: datetime
    closes_at: datetime

    @property
    def hours(self) -> Decimal:
        return credited_hours(self.shift_type)


class PunchRecord(Protocol):
    """What the calculators need from a stored punch."""

    employee_id: int
    work_date: date
    punched_at: datetime
    shift_type: str
    rate: Decimal


class RosterEntry(Protocol):
    """What the calculators need from an employee."""

    employee_id: int

    @property
    def display_name(self) -> str: ...

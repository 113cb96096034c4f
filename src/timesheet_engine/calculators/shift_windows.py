"""Shift window classification and the punch eligibility state machine."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from timesheet_engine.calculators.types import (
    SHIFT_SPECS,
    PunchStatus,
    ShiftSpec,
    ShiftType,
    ShiftWindow,
)


class ShiftWindowValidator:
    """Decides whether a punch is legal at a given moment.

    States per employee and moment:
    - blocked: no shift window is open (existing punches are irrelevant)
    - ready: a window is open and the employee has not punched for it today
    - punched: a window is open and today's punch for it already exists

    Everything is evaluated on wall-clock time in the configured zone.
    """

    def __init__(
        self,
        tz: ZoneInfo,
        specs: dict[ShiftType, ShiftSpec] | None = None,
    ):
        self.tz = tz
        self.specs = specs or SHIFT_SPECS

    def localize(self, moment: datetime) -> datetime:
        """Convert to the configured zone; naive values are already local."""
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment.astimezone(self.tz)

    def classify(self, moment: datetime) -> ShiftWindow | None:
        """Return the open shift window at ``moment``, or None when blocked."""
        local = self.localize(moment)
        for spec in self.specs.values():
            for window in spec.windows:
                if window.contains(local):
                    day = local.date()
                    return ShiftWindow(
                        shift_type=spec.shift_type,
                        work_date=day,
                        opens_at=datetime.combine(day, window.start, tzinfo=self.tz),
                        closes_at=datetime.combine(day, window.end, tzinfo=self.tz),
                    )
        return None

    @staticmethod
    def status_for(window: ShiftWindow | None, already_punched: bool) -> PunchStatus:
        if window is None:
            return PunchStatus.BLOCKED
        if already_punched:
            return PunchStatus.PUNCHED
        return PunchStatus.READY

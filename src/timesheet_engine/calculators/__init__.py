"""Pure period, shift-window, timesheet and invoice calculations."""

from timesheet_engine.calculators.periods import PayPeriod, PeriodAnchor, PeriodCalculator
from timesheet_engine.calculators.shift_windows import ShiftWindowValidator
from timesheet_engine.calculators.timesheet import TimesheetAggregator, TimesheetGrid
from timesheet_engine.calculators.invoice import InvoiceCalculator, InvoiceComputation
from timesheet_engine.calculators.types import PunchStatus, ShiftType

__all__ = [
    "PayPeriod",
    "PeriodAnchor",
    "PeriodCalculator",
    "ShiftWindowValidator",
    "TimesheetAggregator",
    "TimesheetGrid",
    "InvoiceCalculator",
    "InvoiceComputation",
    "PunchStatus",
    "ShiftType",
]

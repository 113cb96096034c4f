"""Error types for the timesheet engine.

Expected business outcomes (a punch outside any window, a punch that already
exists, an employee already invoiced for a period) are reported as typed
results by the services. The exceptions below either signal those outcomes
between a store and its service, or are fatal to the operation that hit them.
"""

from __future__ import annotations

from datetime import date
from enum import Enum


class PunchError(str, Enum):
    """Why a punch attempt was not accepted."""

    OUT_OF_WINDOW = "out_of_window"
    DUPLICATE_PUNCH = "duplicate_punch"


class SkipReason(str, Enum):
    """Why a period close did not issue an invoice to an employee."""

    ALREADY_INVOICED = "already_invoiced"
    NO_HOURS = "no_hours"


class TimesheetEngineError(Exception):
    """Base class for timesheet engine errors."""


class UnknownEmployeeError(TimesheetEngineError):
    """Raised when an employee id does not resolve to a usable employee."""

    def __init__(self, employee_id: int, reason: str = "not found"):
        self.employee_id = employee_id
        self.reason = reason
        super().__init__(f"Employee {employee_id} {reason}")


class MissingRateConfigError(TimesheetEngineError):
    """Raised when no hourly rate is available to price a shift."""

    def __init__(self, employee_id: int, detail: str | None = None):
        self.employee_id = employee_id
        self.detail = detail
        msg = f"No hourly rate configured for employee {employee_id}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class PeriodNotClosedError(TimesheetEngineError):
    """Raised when an official invoice is requested before the period is closed."""

    def __init__(self, employee_id: int, period_start: date):
        self.employee_id = employee_id
        self.period_start = period_start
        super().__init__(
            f"Period starting {period_start} is not closed for employee {employee_id}; "
            "only a draft is available"
        )


class PeriodAlreadyClosedError(TimesheetEngineError):
    """Raised when attendance is edited in a period that was already invoiced."""

    def __init__(self, employee_id: int, period_start: date, invoice_number: int):
        self.employee_id = employee_id
        self.period_start = period_start
        self.invoice_number = invoice_number
        super().__init__(
            f"Employee {employee_id} was issued invoice #{invoice_number} for the "
            f"period starting {period_start}; its attendance can no longer change"
        )


class InvalidPeriodStartError(TimesheetEngineError):
    """Raised when a date is used as a period start but is not one."""

    def __init__(self, value: date, expected: date):
        self.value = value
        self.expected = expected
        super().__init__(
            f"{value} is not a period start; the enclosing period starts on {expected}"
        )


class DuplicatePunchError(TimesheetEngineError):
    """Raised by the punch store when the (employee, date, shift) slot is taken."""

    def __init__(self, employee_id: int, work_date: date, shift_type: str):
        self.employee_id = employee_id
        self.work_date = work_date
        self.shift_type = shift_type
        super().__init__(
            f"Employee {employee_id} already has a {shift_type} punch on {work_date}"
        )


class AlreadyInvoicedError(TimesheetEngineError):
    """Raised by the invoice log when (employee, period) already has a record."""

    def __init__(self, employee_id: int, period_start: date):
        self.employee_id = employee_id
        self.period_start = period_start
        super().__init__(
            f"Employee {employee_id} is already invoiced for the period starting {period_start}"
        )


class InvoiceSequenceError(TimesheetEngineError):
    """Raised when the invoice counter moved under a close transaction."""

    def __init__(self, employee_id: int, expected: int, requested: int):
        self.employee_id = employee_id
        self.expected = expected
        self.requested = requested
        super().__init__(
            f"Invoice counter for employee {employee_id} was not {expected}; "
            f"refusing to set it to {requested}"
        )

"""Timesheet engine services."""

from timesheet_engine.services.punch_service import PunchOutcome, PunchService
from timesheet_engine.services.timesheet_service import TimesheetService, require_period_start
from timesheet_engine.services.invoice_service import (
    CloseResult,
    InvoiceDocument,
    InvoiceService,
    IssuedInvoice,
    PendingInvoice,
    SkippedEmployee,
)

__all__ = [
    "PunchOutcome",
    "PunchService",
    "TimesheetService",
    "require_period_start",
    "CloseResult",
    "InvoiceDocument",
    "InvoiceService",
    "IssuedInvoice",
    "PendingInvoice",
    "SkippedEmployee",
]

"""Store implementations backed by SQLAlchemy."""

from timesheet_engine.repositories.base import (
    EmployeeStore,
    InvoiceLogStore,
    InvoiceRenderer,
    PunchStore,
)
from timesheet_engine.repositories.employees import EmployeeRepository
from timesheet_engine.repositories.invoices import InvoiceLogRepository
from timesheet_engine.repositories.punches import PunchRepository

__all__ = [
    "EmployeeStore",
    "InvoiceLogStore",
    "InvoiceRenderer",
    "PunchStore",
    "EmployeeRepository",
    "InvoiceLogRepository",
    "PunchRepository",
]

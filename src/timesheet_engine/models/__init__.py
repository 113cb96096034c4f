"""ORM models."""

from timesheet_engine.models.base import Base, TimestampMixin
from timesheet_engine.models.employee import Employee
from timesheet_engine.models.attendance import AttendancePunch
from timesheet_engine.models.invoice import InvoiceRecord, SystemLog

__all__ = [
    "Base",
    "TimestampMixin",
    "Employee",
    "AttendancePunch",
    "InvoiceRecord",
    "SystemLog",
]

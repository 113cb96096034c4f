"""Domain events package.

This package provides:
- Typed domain events for attendance and invoicing
- Event emitter for publishing events
- Handlers that write the audit trail
"""

from timesheet_engine.events.types import (
    # Base
    DomainEvent,
    EventMetadata,
    EventCategory,
    # Attendance Events
    PunchAccepted,
    PunchRejected,
    PunchOverridden,
    # Invoicing Events
    InvoiceIssued,
    PeriodClosed,
)
from timesheet_engine.events.emitter import AuditSink, EventEmitter
from timesheet_engine.events.handlers import (
    LoggingHandler,
    SystemLogHandler,
    register_default_handlers,
)

__all__ = [
    # Base
    "DomainEvent",
    "EventMetadata",
    "EventCategory",
    # Attendance Events
    "PunchAccepted",
    "PunchRejected",
    "PunchOverridden",
    # Invoicing Events
    "InvoiceIssued",
    "PeriodClosed",
    # Emitter
    "AuditSink",
    "EventEmitter",
    # Handlers
    "LoggingHandler",
    "SystemLogHandler",
    "register_default_handlers",
]

"""Domain event types for attendance and invoicing.

All events are:
- Immutable (frozen dataclasses)
- Typed with explicit payloads
- Traceable via metadata
- Serializable for the audit log
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class EventCategory(str, Enum):
    """Area of the system an event belongs to."""

    ATTENDANCE = "attendance"
    INVOICING = "invoicing"


@dataclass(frozen=True)
class EventMetadata:
    """Metadata attached to every domain event."""

    event_id: UUID
    timestamp: datetime
    correlation_id: UUID  # Links related events
    actor: str  # employee id, admin name or 'system'
    source_service: str
    version: int = 1

    @classmethod
    def create(
        cls,
        actor: str = "system",
        correlation_id: UUID | None = None,
        source_service: str = "timesheet_engine",
    ) -> EventMetadata:
        """Create metadata with auto-generated fields."""
        return cls(
            event_id=uuid4(),
            timestamp=datetime.now(timezone.utc),
            correlation_id=correlation_id or uuid4(),
            actor=actor,
            source_service=source_service,
        )


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    metadata: EventMetadata

    @property
    def event_type(self) -> str:
        """Event type name for routing."""
        return self.__class__.__name__

    @property
    def category(self) -> EventCategory:
        """Event category, carried in the serialized event."""
        raise NotImplementedError("Subclasses must define category")

    @property
    def audit_action(self) -> str:
        """Action code recorded in the system log."""
        raise NotImplementedError("Subclasses must define audit_action")

    def describe(self) -> str:
        """Human readable summary for the system log."""
        return self.event_type

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to dictionary."""
        data = asdict(self)
        data["event_type"] = self.event_type
        data["category"] = self.category
        return _serialize_dict(data)

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict(), default=str)


def _serialize_dict(obj: Any) -> Any:
    """Recursively serialize objects for JSON compatibility."""
    if isinstance(obj, dict):
        return {k: _serialize_dict(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_serialize_dict(v) for v in obj]
    elif isinstance(obj, Enum):
        return obj.value
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, Decimal):
        return str(obj)
    return obj


# =============================================================================
# Attendance events
# =============================================================================


@dataclass(frozen=True)
class PunchAccepted(DomainEvent):
    """An employee punched inside an open shift window."""

    employee_id: int
    work_date: date
    shift_type: str
    punched_at: datetime
    rate: Decimal

    @property
    def category(self) -> EventCategory:
        return EventCategory.ATTENDANCE

    @property
    def audit_action(self) -> str:
        return "PUNCH"

    def describe(self) -> str:
        return (
            f"Employee {self.employee_id} punched {self.shift_type} shift on "
            f"{self.work_date} at rate {self.rate}"
        )


@dataclass(frozen=True)
class PunchRejected(DomainEvent):
    """A punch attempt was turned down."""

    employee_id: int
    reason: str
    attempted_at: datetime

    @property
    def category(self) -> EventCategory:
        return EventCategory.ATTENDANCE

    @property
    def audit_action(self) -> str:
        return "PUNCH_REJECTED"

    def describe(self) -> str:
        return f"Punch by employee {self.employee_id} rejected: {self.reason}"


@dataclass(frozen=True)
class PunchOverridden(DomainEvent):
    """An administrator wrote or removed a punch directly."""

    employee_id: int
    work_date: date
    shift_type: str
    action: str  # 'upsert' | 'remove'
    rate: Decimal | None

    @property
    def category(self) -> EventCategory:
        return EventCategory.ATTENDANCE

    @property
    def audit_action(self) -> str:
        return "UPDATE_TIMESHEET"

    def describe(self) -> str:
        if self.action == "remove":
            return (
                f"Removed {self.shift_type} shift of employee {self.employee_id} "
                f"on {self.work_date}"
            )
        return (
            f"Set {self.shift_type} shift of employee {self.employee_id} on "
            f"{self.work_date} at rate {self.rate}"
        )


# =============================================================================
# Invoicing events
# =============================================================================


@dataclass(frozen=True)
class InvoiceIssued(DomainEvent):
    """An official invoice number was assigned."""

    employee_id: int
    period_start: date
    invoice_number: int
    grand_total: Decimal

    @property
    def category(self) -> EventCategory:
        return EventCategory.INVOICING

    @property
    def audit_action(self) -> str:
        return "ISSUE_INVOICE"

    def describe(self) -> str:
        return (
            f"Invoice #{self.invoice_number} issued to employee {self.employee_id} "
            f"for period {self.period_start}: {self.grand_total}"
        )


@dataclass(frozen=True)
class PeriodClosed(DomainEvent):
    """A close run finished for a period."""

    period_start: date
    issued_count: int
    skipped_count: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.INVOICING

    @property
    def audit_action(self) -> str:
        return "CLOSE_PERIOD"

    def describe(self) -> str:
        return (
            f"Closed period {self.period_start}. {self.issued_count} invoice(s) issued, "
            f"{self.skipped_count} employee(s) skipped"
        )

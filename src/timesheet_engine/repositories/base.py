"""Store boundaries consumed by the services.

The SQLAlchemy repositories in this package implement these protocols; any
other backend has to honour the same uniqueness guarantees.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from timesheet_engine.models import AttendancePunch, Employee, InvoiceRecord
    from timesheet_engine.services.invoice_service import InvoiceDocument


class PunchStore(Protocol):
    """Attendance punches, unique per (employee, work date, shift type)."""

    async def find_punch(
        self, employee_id: int, work_date: date, shift_type: str
    ) -> AttendancePunch | None:
        ...

    async def insert_punch(self, punch: AttendancePunch) -> AttendancePunch:
        """Persist a new punch.

        Raises:
            DuplicatePunchError: If the (employee, date, shift) slot is taken
        """
        ...

    async def list_punches(
        self,
        employee_ids: Iterable[int] | None,
        start: date,
        end: date,
    ) -> list[AttendancePunch]:
        """Punches with ``start <= work_date < end``."""
        ...


class EmployeeStore(Protocol):
    """Employee profiles and their invoice counters."""

    async def list_active(self) -> list[Employee]:
        ...

    async def get_rate(self, employee_id: int) -> Decimal:
        """Current hourly rate.

        Raises:
            UnknownEmployeeError: If the employee does not exist
            MissingRateConfigError: If no rate is configured
        """
        ...

    async def get_last_invoice(self, employee_id: int) -> int:
        ...

    async def set_last_invoice(
        self, employee_id: int, number: int, expected: int | None = None
    ) -> None:
        ...


class InvoiceLogStore(Protocol):
    """Issued invoices, unique per (employee, period start)."""

    async def find_invoice(
        self, employee_id: int, period_start: date
    ) -> InvoiceRecord | None:
        ...

    async def insert_invoice(self, record: InvoiceRecord) -> InvoiceRecord:
        """Persist a new invoice record.

        Raises:
            AlreadyInvoicedError: If (employee, period start) already has one
        """
        ...


class InvoiceRenderer(Protocol):
    """Outbound collaborator that turns a computed invoice into a file."""

    def render(self, document: InvoiceDocument) -> bytes:
        ...

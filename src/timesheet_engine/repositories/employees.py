"""SQLAlchemy employee store."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet_engine.exceptions import (
    InvoiceSequenceError,
    MissingRateConfigError,
    UnknownEmployeeError,
)
from timesheet_engine.models import Employee


class EmployeeRepository:
    """Employee lookups and the per-employee invoice counter."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, employee_id: int) -> Employee | None:
        return await self.session.get(Employee, employee_id)

    async def require(self, employee_id: int, active_only: bool = True) -> Employee:
        """Load an employee or fail the operation.

        Raises:
            UnknownEmployeeError: If missing, or inactive when ``active_only``
        """
        employee = await self.get(employee_id)
        if employee is None:
            raise UnknownEmployeeError(employee_id)
        if active_only and not employee.active:
            raise UnknownEmployeeError(employee_id, "is not active")
        return employee

    async def lock(self, employee_id: int) -> Employee:
        """Load an employee holding a row lock until the transaction ends."""
        result = await self.session.execute(
            select(Employee)
            .where(Employee.employee_id == employee_id)
            .with_for_update()
        )
        employee = result.scalar_one_or_none()
        if employee is None:
            raise UnknownEmployeeError(employee_id)
        return employee

    async def list_active(self) -> list[Employee]:
        result = await self.session.execute(
            select(Employee)
            .where(Employee.active.is_(True))
            .order_by(Employee.surname, Employee.name, Employee.employee_id)
        )
        return list(result.scalars().all())

    async def list_by_ids(self, employee_ids: Iterable[int]) -> list[Employee]:
        ids = list(employee_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(Employee)
            .where(Employee.employee_id.in_(ids))
            .order_by(Employee.surname, Employee.name, Employee.employee_id)
        )
        return list(result.scalars().all())

    @staticmethod
    def rate_of(employee: Employee) -> Decimal:
        if employee.hourly_rate is None or employee.hourly_rate <= 0:
            raise MissingRateConfigError(employee.employee_id)
        return employee.hourly_rate

    async def get_rate(self, employee_id: int) -> Decimal:
        employee = await self.require(employee_id, active_only=False)
        return self.rate_of(employee)

    async def get_last_invoice(self, employee_id: int) -> int:
        result = await self.session.execute(
            select(Employee.last_invoice).where(Employee.employee_id == employee_id)
        )
        value = result.scalar_one_or_none()
        if value is None:
            raise UnknownEmployeeError(employee_id)
        return value

    async def set_last_invoice(
        self, employee_id: int, number: int, expected: int | None = None
    ) -> None:
        """Advance the invoice counter.

        With ``expected`` the write is a compare-and-set against that value;
        without it the counter may only move forward.

        Raises:
            InvoiceSequenceError: If the guard did not match
        """
        stmt = update(Employee).where(Employee.employee_id == employee_id)
        if expected is not None:
            stmt = stmt.where(Employee.last_invoice == expected)
        else:
            stmt = stmt.where(Employee.last_invoice < number)

        result = await self.session.execute(stmt.values(last_invoice=number))
        if (result.rowcount or 0) != 1:
            raise InvoiceSequenceError(
                employee_id,
                expected if expected is not None else number - 1,
                number,
            )

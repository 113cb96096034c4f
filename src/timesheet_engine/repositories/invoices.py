"""SQLAlchemy invoice log store."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet_engine.exceptions import AlreadyInvoicedError
from timesheet_engine.models import InvoiceRecord


class InvoiceLogRepository:
    """Append-only log of issued invoices."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_invoice(
        self, employee_id: int, period_start: date
    ) -> InvoiceRecord | None:
        result = await self.session.execute(
            select(InvoiceRecord).where(
                InvoiceRecord.employee_id == employee_id,
                InvoiceRecord.period_start == period_start,
            )
        )
        return result.scalar_one_or_none()

    async def insert_invoice(self, record: InvoiceRecord) -> InvoiceRecord:
        """Insert an invoice record.

        Raises:
            AlreadyInvoicedError: If the (employee, period) pair already has one
        """
        self.session.add(record)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise AlreadyInvoicedError(record.employee_id, record.period_start) from exc
        return record

    async def list_for_period(self, period_start: date) -> list[InvoiceRecord]:
        result = await self.session.execute(
            select(InvoiceRecord)
            .where(InvoiceRecord.period_start == period_start)
            .order_by(InvoiceRecord.employee_id)
        )
        return list(result.scalars().all())

    async def invoiced_employee_ids(self, period_start: date) -> set[int]:
        result = await self.session.execute(
            select(InvoiceRecord.employee_id).where(
                InvoiceRecord.period_start == period_start
            )
        )
        return set(result.scalars().all())

"""SQLAlchemy punch store."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet_engine.calculators.types import ShiftType
from timesheet_engine.exceptions import DuplicatePunchError
from timesheet_engine.models import AttendancePunch


class PunchRepository:
    """Reads and writes attendance punches within the caller's transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_punch(
        self, employee_id: int, work_date: date, shift_type: str
    ) -> AttendancePunch | None:
        result = await self.session.execute(
            select(AttendancePunch).where(
                AttendancePunch.employee_id == employee_id,
                AttendancePunch.work_date == work_date,
                AttendancePunch.shift_type == ShiftType(shift_type).value,
            )
        )
        return result.scalar_one_or_none()

    async def insert_punch(self, punch: AttendancePunch) -> AttendancePunch:
        """Insert a punch, relying on the unique constraint for races.

        Raises:
            DuplicatePunchError: If another writer already holds the slot
        """
        self.session.add(punch)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise DuplicatePunchError(
                punch.employee_id, punch.work_date, punch.shift_type
            ) from exc
        return punch

    async def list_punches(
        self,
        employee_ids: Iterable[int] | None,
        start: date,
        end: date,
    ) -> list[AttendancePunch]:
        query = select(AttendancePunch).where(
            AttendancePunch.work_date >= start,
            AttendancePunch.work_date < end,
        )
        if employee_ids is not None:
            ids = list(employee_ids)
            if not ids:
                return []
            query = query.where(AttendancePunch.employee_id.in_(ids))

        query = query.order_by(
            AttendancePunch.employee_id,
            AttendancePunch.work_date,
            AttendancePunch.punched_at,
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def distinct_work_dates(self) -> list[date]:
        """Every date that has at least one punch, newest first."""
        result = await self.session.execute(
            select(AttendancePunch.work_date)
            .distinct()
            .order_by(AttendancePunch.work_date.desc())
        )
        return list(result.scalars().all())

    async def delete_punch(
        self, employee_id: int, work_date: date, shift_type: str
    ) -> bool:
        result = await self.session.execute(
            delete(AttendancePunch).where(
                AttendancePunch.employee_id == employee_id,
                AttendancePunch.work_date == work_date,
                AttendancePunch.shift_type == ShiftType(shift_type).value,
            )
        )
        return (result.rowcount or 0) > 0

"""Attendance punch model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet_engine.calculators.types import ShiftType
from timesheet_engine.models.base import HOURS, MONEY, RATE, Base, TimestampMixin

if TYPE_CHECKING:
    from timesheet_engine.models.employee import Employee


class AttendancePunch(Base, TimestampMixin):
    """One accepted attendance event for one shift window.

    ``work_date`` is the calendar date in the configured zone and is what the
    timesheet buckets on; ``punched_at`` is the captured UTC instant. ``rate``
    is the hourly rate in effect when the shift was worked and is never
    recomputed from the employee's current rate.
    """

    __tablename__ = "attendance_punch"

    punch_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    punched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    shift_type: Mapped[str] = mapped_column(String, nullable=False)
    rate: Mapped[Decimal] = mapped_column(RATE, nullable=False)
    duration: Mapped[Decimal] = mapped_column(HOURS, nullable=False)
    gross: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    source: Mapped[str] = mapped_column(String, nullable=False, default="punch")
    clock_text: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "work_date",
            "shift_type",
            name="attendance_punch_employee_day_shift_unique",
        ),
        CheckConstraint(
            "shift_type IN ('standard', 'overtime')",
            name="attendance_punch_shift_type_check",
        ),
        CheckConstraint(
            "source IN ('punch', 'manual')",
            name="attendance_punch_source_check",
        ),
        Index("attendance_punch_work_date_idx", "work_date"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="punches")

    @property
    def shift(self) -> ShiftType:
        return ShiftType(self.shift_type)

"""Invoice log and system audit log models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet_engine.models.base import HOURS, MONEY, Base, TimestampMixin

if TYPE_CHECKING:
    from timesheet_engine.models.employee import Employee


class InvoiceRecord(Base):
    """Official invoice issued when a period is closed for an employee.

    Written exactly once per (employee, period); never updated.
    """

    __tablename__ = "invoice_log"

    invoice_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("employee.employee_id", ondelete="RESTRICT"),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    invoice_number: Mapped[int] = mapped_column(Integer, nullable=False)
    total_hours: Mapped[Decimal] = mapped_column(HOURS, nullable=False)
    grand_total: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "period_start", name="invoice_log_employee_period_unique"),
        UniqueConstraint("employee_id", "invoice_number", name="invoice_log_employee_number_unique"),
        CheckConstraint("invoice_number > 0", name="invoice_log_number_check"),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="invoices")


class SystemLog(Base, TimestampMixin):
    """Append-only audit trail of administrative and attendance actions."""

    __tablename__ = "system_log"

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(String, nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    actor: Mapped[str] = mapped_column(String, nullable=False, default="system")
    event_id: Mapped[str | None] = mapped_column(String, nullable=True)

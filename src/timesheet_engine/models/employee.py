"""Employee model."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from timesheet_engine.models.base import RATE, Base, TimestampMixin

if TYPE_CHECKING:
    from timesheet_engine.models.attendance import AttendancePunch
    from timesheet_engine.models.invoice import InvoiceRecord


class Employee(Base, TimestampMixin):
    """Hourly worker (or admin) on the roster.

    Employees are never deleted; ``active`` is cleared instead so that issued
    invoices keep pointing at a real row. ``last_invoice`` is the last invoice
    number issued to this employee and is only advanced by the period close.
    """

    __tablename__ = "employee"

    employee_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    surname: Mapped[str] = mapped_column(String, nullable=False, default="")
    hourly_rate: Mapped[Decimal | None] = mapped_column(RATE, nullable=True)
    role: Mapped[str] = mapped_column(String, nullable=False, default="worker")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_invoice: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Contact and payment details printed on invoices
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    telephone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    abn: Mapped[str | None] = mapped_column(String, nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String, nullable=True)
    account_name: Mapped[str | None] = mapped_column(String, nullable=True)
    account_type: Mapped[str | None] = mapped_column(String, nullable=True)
    bsb: Mapped[str | None] = mapped_column(String, nullable=True)
    account_number: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("role IN ('worker', 'admin')", name="employee_role_check"),
        CheckConstraint("last_invoice >= 0", name="employee_last_invoice_check"),
    )

    # Relationships
    punches: Mapped[list[AttendancePunch]] = relationship(back_populates="employee")
    invoices: Mapped[list[InvoiceRecord]] = relationship(back_populates="employee")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.name} {self.surname}".strip()

    @property
    def display_name(self) -> str:
        """Roster ordering name, "Surname, Name"."""
        if not self.surname:
            return self.name
        return f"{self.surname}, {self.name}"

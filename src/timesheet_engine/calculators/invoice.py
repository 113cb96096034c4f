"""Invoice computation for one employee over one period."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from timesheet_engine.calculators.periods import PayPeriod
from timesheet_engine.calculators.timesheet import round_hours
from timesheet_engine.calculators.types import PunchRecord, ShiftType, credited_hours
from timesheet_engine.clock import as_utc
from timesheet_engine.exceptions import MissingRateConfigError

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class InvoiceLine:
    """One worked shift on an invoice."""

    work_date: date
    shift_type: ShiftType
    duration: Decimal
    rate: Decimal  # captured at punch time
    gross: Decimal  # unrounded duration * rate
    punched_at: datetime | None = None


@dataclass(frozen=True)
class InvoiceComputation:
    """Priced shifts and totals for one employee and one period."""

    employee_id: int
    period: PayPeriod
    lines: tuple[InvoiceLine, ...]
    total_hours: Decimal
    grand_total: Decimal

    @property
    def is_billable(self) -> bool:
        return self.total_hours > 0


class InvoiceCalculator:
    """Prices shifts with the rate captured on each punch.

    The employee's current rate is never consulted, so a re-preview after a
    rate change reproduces what was earned at the time. Rounding happens once,
    on the totals.
    """

    def compute_invoice(
        self,
        employee_id: int,
        period_start: date,
        punches: Iterable[PunchRecord],
    ) -> InvoiceComputation:
        period = PayPeriod(period_start)
        lines: list[InvoiceLine] = []

        mine = [
            p for p in punches
            if p.employee_id == employee_id and period.contains(p.work_date)
        ]
        mine.sort(key=lambda p: (p.work_date, as_utc(p.punched_at)))

        for punch in mine:
            if punch.rate is None:
                raise MissingRateConfigError(
                    employee_id,
                    f"punch on {punch.work_date} has no captured rate",
                )
            duration = credited_hours(punch.shift_type)
            rate = Decimal(punch.rate)
            lines.append(
                InvoiceLine(
                    work_date=punch.work_date,
                    shift_type=ShiftType(punch.shift_type),
                    duration=duration,
                    rate=rate,
                    gross=duration * rate,
                    punched_at=punch.punched_at,
                )
            )

        total_hours = sum((line.duration for line in lines), Decimal("0"))
        grand_total = sum((line.gross for line in lines), Decimal("0"))

        return InvoiceComputation(
            employee_id=employee_id,
            period=period,
            lines=tuple(lines),
            total_hours=round_hours(total_hours),
            grand_total=round_money(grand_total),
        )

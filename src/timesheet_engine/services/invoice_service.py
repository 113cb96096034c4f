"""Invoice preview, period close and invoice documents.

Closing a period is the only operation that assigns invoice numbers. Each
employee is closed in a transaction of its own:

1. Lock the employee row
2. Re-check the invoice log for (employee, period)
3. Recompute the invoice from the captured punch rates
4. Insert the invoice record and advance ``last_invoice``

Both writes commit together or not at all, and a second close of the same
period finds the record and skips the employee.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any
from uuid import uuid4

from timesheet_engine.calculators.invoice import (
    InvoiceCalculator,
    InvoiceComputation,
    InvoiceLine,
)
from timesheet_engine.calculators.periods import PayPeriod, PeriodCalculator
from timesheet_engine.clock import Clock, SystemClock
from timesheet_engine.config import CompanyProfile, Settings, get_settings
from timesheet_engine.database import SessionFactory
from timesheet_engine.events import (
    EventEmitter,
    EventMetadata,
    InvoiceIssued,
    PeriodClosed,
)
from timesheet_engine.exceptions import (
    AlreadyInvoicedError,
    PeriodNotClosedError,
    SkipReason,
    UnknownEmployeeError,
)
from timesheet_engine.models import Employee, InvoiceRecord
from timesheet_engine.repositories import (
    EmployeeRepository,
    InvoiceLogRepository,
    PunchRepository,
)
from timesheet_engine.services.timesheet_service import require_period_start

logger = logging.getLogger(__name__)

DRAFT_NUMBER = "DRAFT"
PAYMENT_METHOD = "EFT [Electronic Funds Transfer]"


@dataclass(frozen=True)
class IssuedInvoice:
    """An invoice number assigned by a close run."""

    employee_id: int
    invoice_number: int
    total_hours: Decimal
    grand_total: Decimal


@dataclass(frozen=True)
class SkippedEmployee:
    """An employee a close run did not invoice."""

    employee_id: int
    reason: SkipReason
    invoice_number: int | None = None  # set when already invoiced


@dataclass
class CloseResult:
    """Outcome of closing a period."""

    period: PayPeriod
    issued: list[IssuedInvoice] = field(default_factory=list)
    skipped: list[SkippedEmployee] = field(default_factory=list)


@dataclass(frozen=True)
class PendingInvoice:
    """An employee that a close would invoice right now."""

    employee_id: int
    name: str
    total_hours: Decimal
    grand_total: Decimal


@dataclass(frozen=True)
class InvoiceDocument:
    """Everything an invoice renderer prints."""

    title: str
    invoice_number: str
    is_draft: bool
    issue_date: date
    due_date: date
    period: PayPeriod
    employee_id: int
    employee_name: str
    employee_email: str | None
    employee_telephone: str | None
    employee_address: str | None
    employee_abn: str | None
    bank_name: str | None
    account_name: str | None
    account_type: str | None
    bsb: str | None
    account_number: str | None
    company: CompanyProfile
    description: str
    lines: tuple[InvoiceLine, ...]
    total_hours: Decimal
    grand_total: Decimal
    payment_method: str = PAYMENT_METHOD

    @property
    def period_label(self) -> str:
        return self.period.label

    @property
    def file_name(self) -> str:
        prefix = "DRAFT_Invoice" if self.is_draft else "Invoice"
        label = self.period_label.replace("/", "-")
        return f"{prefix}_{self.employee_name.replace(' ', '_')}_{label}.pdf"

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "invoice_number": self.invoice_number,
            "is_draft": self.is_draft,
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "period_start": self.period.start.isoformat(),
            "period_label": self.period_label,
            "employee": {
                "employee_id": self.employee_id,
                "name": self.employee_name,
                "email": self.employee_email,
                "telephone": self.employee_telephone,
                "address": self.employee_address,
                "abn": self.employee_abn,
            },
            "bank": {
                "bank_name": self.bank_name,
                "account_name": self.account_name,
                "account_type": self.account_type,
                "bsb": self.bsb,
                "account_number": self.account_number,
            },
            "company": {
                "name": self.company.name,
                "email": self.company.email,
                "abn": self.company.abn,
                "telephone": self.company.telephone,
                "address": self.company.address,
            },
            "description": self.description,
            "lines": [
                {
                    "work_date": line.work_date.isoformat(),
                    "shift_type": line.shift_type.value,
                    "duration": str(line.duration),
                    "rate": str(line.rate),
                    "gross": str(line.gross),
                }
                for line in self.lines
            ],
            "total_hours": str(self.total_hours),
            "grand_total": str(self.grand_total),
            "payment_method": self.payment_method,
            "file_name": self.file_name,
        }


class InvoiceService:
    """Service for invoice previews, documents and period close."""

    def __init__(
        self,
        session_factory: SessionFactory,
        settings: Settings | None = None,
        clock: Clock | None = None,
        emitter: EventEmitter | None = None,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock(self.settings.tz)
        self.emitter = emitter or EventEmitter()
        self.periods = PeriodCalculator(self.settings.anchor, self.settings.tz)
        self.calculator = InvoiceCalculator()

    async def preview(self, employee_id: int, period_start: date) -> InvoiceComputation:
        """Compute an invoice without assigning a number.

        Raises:
            UnknownEmployeeError: If the employee does not exist
            InvalidPeriodStartError: If ``period_start`` is not a period start
        """
        period = require_period_start(self.periods, period_start)
        async with self.session_factory() as session:
            await EmployeeRepository(session).require(employee_id, active_only=False)
            punches = await PunchRepository(session).list_punches(
                [employee_id], period.start, period.end
            )
        return self.calculator.compute_invoice(employee_id, period.start, punches)

    async def pending_invoices(self, period_start: date) -> list[PendingInvoice]:
        """Active employees with hours and no invoice yet for the period."""
        period = require_period_start(self.periods, period_start)
        async with self.session_factory() as session:
            employees = await EmployeeRepository(session).list_active()
            invoiced = await InvoiceLogRepository(session).invoiced_employee_ids(
                period.start
            )
            punches = await PunchRepository(session).list_punches(
                [e.employee_id for e in employees], period.start, period.end
            )

        pending = []
        for employee in employees:
            if employee.employee_id in invoiced:
                continue
            computation = self.calculator.compute_invoice(
                employee.employee_id, period.start, punches
            )
            if computation.is_billable:
                pending.append(
                    PendingInvoice(
                        employee_id=employee.employee_id,
                        name=employee.display_name,
                        total_hours=computation.total_hours,
                        grand_total=computation.grand_total,
                    )
                )
        return pending

    async def close_period(
        self,
        period_start: date,
        employee_ids: list[int] | None = None,
        actor: str = "system",
    ) -> CloseResult:
        """Issue official invoices for every eligible employee.

        Args:
            period_start: First day of the period to close
            employee_ids: Restrict the run to these employees (inactive ones
                included); defaults to the active roster
            actor: Recorded on the audit events

        Raises:
            InvalidPeriodStartError: If ``period_start`` is not a period start
            UnknownEmployeeError: If any of ``employee_ids`` does not exist;
                nothing is issued in that case
        """
        period = require_period_start(self.periods, period_start)
        result = CloseResult(period=period)

        async with self.session_factory() as session:
            employees = EmployeeRepository(session)
            if employee_ids is None:
                roster = await employees.list_active()
            else:
                roster = await employees.list_by_ids(employee_ids)
                missing = set(employee_ids) - {e.employee_id for e in roster}
                if missing:
                    raise UnknownEmployeeError(min(missing))
            invoiced = await InvoiceLogRepository(session).invoiced_employee_ids(
                period.start
            )

        correlation_id = uuid4()
        for employee in roster:
            if employee.employee_id in invoiced:
                result.skipped.append(
                    SkippedEmployee(employee.employee_id, SkipReason.ALREADY_INVOICED)
                )
                continue
            outcome = await self._close_employee(employee.employee_id, period)
            if isinstance(outcome, SkippedEmployee):
                result.skipped.append(outcome)
                continue

            result.issued.append(outcome)
            # Published per employee, right after its own commit
            await self.emitter.emit(
                InvoiceIssued(
                    metadata=EventMetadata.create(
                        actor=actor, correlation_id=correlation_id
                    ),
                    employee_id=outcome.employee_id,
                    period_start=period.start,
                    invoice_number=outcome.invoice_number,
                    grand_total=outcome.grand_total,
                )
            )

        logger.info(
            "Closed period %s: %d issued, %d skipped",
            period.start,
            len(result.issued),
            len(result.skipped),
        )
        await self.emitter.emit(
            PeriodClosed(
                metadata=EventMetadata.create(
                    actor=actor, correlation_id=correlation_id
                ),
                period_start=period.start,
                issued_count=len(result.issued),
                skipped_count=len(result.skipped),
            )
        )
        return result

    async def _close_employee(
        self, employee_id: int, period: PayPeriod
    ) -> IssuedInvoice | SkippedEmployee:
        try:
            async with self.session_factory() as session, session.begin():
                employees = EmployeeRepository(session)
                invoices = InvoiceLogRepository(session)

                employee = await employees.lock(employee_id)
                existing = await invoices.find_invoice(employee_id, period.start)
                if existing is not None:
                    return SkippedEmployee(
                        employee_id,
                        SkipReason.ALREADY_INVOICED,
                        existing.invoice_number,
                    )

                punches = await PunchRepository(session).list_punches(
                    [employee_id], period.start, period.end
                )
                computation = self.calculator.compute_invoice(
                    employee_id, period.start, punches
                )
                if not computation.is_billable:
                    return SkippedEmployee(employee_id, SkipReason.NO_HOURS)

                last = employee.last_invoice
                number = last + 1
                await invoices.insert_invoice(
                    InvoiceRecord(
                        employee_id=employee_id,
                        period_start=period.start,
                        invoice_number=number,
                        total_hours=computation.total_hours,
                        grand_total=computation.grand_total,
                    )
                )
                await employees.set_last_invoice(employee_id, number, expected=last)
        except AlreadyInvoicedError:
            logger.info(
                "Employee %s was invoiced for %s by a concurrent close",
                employee_id,
                period.start,
            )
            return SkippedEmployee(employee_id, SkipReason.ALREADY_INVOICED)

        logger.info(
            "Issued invoice #%d to employee %s for period %s (%s)",
            number,
            employee_id,
            period.start,
            computation.grand_total,
        )
        return IssuedInvoice(
            employee_id=employee_id,
            invoice_number=number,
            total_hours=computation.total_hours,
            grand_total=computation.grand_total,
        )

    async def build_document(
        self,
        employee_id: int,
        period_start: date,
        official: bool = False,
        issue_date: date | None = None,
    ) -> InvoiceDocument:
        """Assemble the printable invoice.

        Drafts show the live computation and the placeholder number. Official
        documents need a closed period and show the stored number and totals.

        Raises:
            UnknownEmployeeError: If the employee does not exist
            InvalidPeriodStartError: If ``period_start`` is not a period start
            PeriodNotClosedError: If ``official`` and no invoice was issued
        """
        period = require_period_start(self.periods, period_start)
        async with self.session_factory() as session:
            employee = await EmployeeRepository(session).require(
                employee_id, active_only=False
            )
            punches = await PunchRepository(session).list_punches(
                [employee_id], period.start, period.end
            )
            record = await InvoiceLogRepository(session).find_invoice(
                employee_id, period.start
            )

        computation = self.calculator.compute_invoice(employee_id, period.start, punches)

        if official:
            if record is None:
                raise PeriodNotClosedError(employee_id, period.start)
            number = str(record.invoice_number)
            total_hours = Decimal(record.total_hours)
            grand_total = Decimal(record.grand_total)
        else:
            number = DRAFT_NUMBER
            total_hours = computation.total_hours
            grand_total = computation.grand_total

        issued_on = issue_date or self.periods.local_date(self.clock.now())
        return self._document(
            employee,
            period,
            computation,
            is_draft=not official,
            number=number,
            total_hours=total_hours,
            grand_total=grand_total,
            issue_date=issued_on,
        )

    def _document(
        self,
        employee: Employee,
        period: PayPeriod,
        computation: InvoiceComputation,
        *,
        is_draft: bool,
        number: str,
        total_hours: Decimal,
        grand_total: Decimal,
        issue_date: date,
    ) -> InvoiceDocument:
        company = self.settings.company
        return InvoiceDocument(
            title="INVOICE (DRAFT)" if is_draft else "INVOICE",
            invoice_number=number,
            is_draft=is_draft,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=self.settings.invoice_due_days),
            period=period,
            employee_id=employee.employee_id,
            employee_name=employee.full_name,
            employee_email=employee.email,
            employee_telephone=employee.telephone,
            employee_address=employee.address,
            employee_abn=employee.abn,
            bank_name=employee.bank_name,
            account_name=employee.account_name,
            account_type=employee.account_type,
            bsb=employee.bsb,
            account_number=employee.account_number,
            company=company,
            description=f"{company.service_description} {period.label}",
            lines=computation.lines,
            total_hours=total_hours,
            grand_total=grand_total,
        )

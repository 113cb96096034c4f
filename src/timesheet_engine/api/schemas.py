"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from timesheet_engine.calculators.types import PunchStatus, ShiftType
from timesheet_engine.exceptions import PunchError, SkipReason


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str
    code: str


# ============================================================================
# Attendance schemas
# ============================================================================


class PunchRequest(BaseModel):
    """Schema for a punch attempt."""

    employee_id: int


class PunchOutcomeResponse(BaseModel):
    """Punch eligibility or the result of a punch attempt."""

    employee_id: int
    status: PunchStatus
    accepted: bool
    error: PunchError | None = None
    shift_type: ShiftType | None = None
    work_date: date | None = None
    window_opens_at: datetime | None = None
    window_closes_at: datetime | None = None
    punched_at: datetime | None = None


class OverrideRequest(BaseModel):
    """Schema for writing a punch directly."""

    employee_id: int
    work_date: date
    shift_type: ShiftType
    rate: Decimal | None = Field(default=None, gt=0)
    actor: str = "admin"


class PunchResponse(BaseModel):
    """Schema for a stored punch."""

    model_config = ConfigDict(from_attributes=True)

    punch_id: int
    employee_id: int
    work_date: date
    shift_type: ShiftType
    punched_at: datetime
    rate: Decimal
    duration: Decimal
    gross: Decimal
    source: str
    clock_text: str | None = None


class RemoveResponse(BaseModel):
    """Schema for a punch removal."""

    removed: bool


# ============================================================================
# Period and timesheet schemas
# ============================================================================


class PeriodResponse(BaseModel):
    """Schema for a pay period."""

    start: date
    last_day: date
    label: str


class PeriodListResponse(BaseModel):
    """Schema for listing pay periods, newest first."""

    items: list[PeriodResponse]


class TimesheetRowResponse(BaseModel):
    """One employee's hours on the grid."""

    employee_id: int
    name: str
    hours: list[Decimal | None]
    total: Decimal


class TimesheetResponse(BaseModel):
    """Schema for the fortnight hour grid."""

    period: PeriodResponse
    slot_dates: list[date | None]
    rows: list[TimesheetRowResponse]
    daily_totals: list[Decimal]
    grand_total: Decimal


# ============================================================================
# Invoice schemas
# ============================================================================


class InvoiceLineResponse(BaseModel):
    """Schema for a priced shift."""

    work_date: date
    shift_type: ShiftType
    duration: Decimal
    rate: Decimal
    gross: Decimal


class PartyResponse(BaseModel):
    """Contact block printed on an invoice."""

    name: str
    email: str | None = None
    telephone: str | None = None
    address: str | None = None
    abn: str | None = None


class BankDetailsResponse(BaseModel):
    """Payee bank details."""

    bank_name: str | None = None
    account_name: str | None = None
    account_type: str | None = None
    bsb: str | None = None
    account_number: str | None = None


class InvoiceDocumentResponse(BaseModel):
    """Schema for a draft or official invoice."""

    title: str
    invoice_number: str
    is_draft: bool
    issue_date: date
    due_date: date
    period: PeriodResponse
    employee_id: int
    employee: PartyResponse
    bank: BankDetailsResponse
    company: PartyResponse
    description: str
    lines: list[InvoiceLineResponse]
    total_hours: Decimal
    grand_total: Decimal
    payment_method: str
    file_name: str


class PendingInvoiceResponse(BaseModel):
    """Schema for an employee awaiting an invoice."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    name: str
    total_hours: Decimal
    grand_total: Decimal


class PendingInvoiceListResponse(BaseModel):
    """Schema for listing pending invoices."""

    period: PeriodResponse
    items: list[PendingInvoiceResponse]
    total: int


# ============================================================================
# Close schemas
# ============================================================================


class CloseRequest(BaseModel):
    """Schema for closing a period."""

    employee_ids: list[int] | None = None
    actor: str = "system"


class IssuedInvoiceResponse(BaseModel):
    """Schema for an invoice issued by a close."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    invoice_number: int
    total_hours: Decimal
    grand_total: Decimal


class SkippedEmployeeResponse(BaseModel):
    """Schema for an employee skipped by a close."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    reason: SkipReason
    invoice_number: int | None = None


class CloseResponse(BaseModel):
    """Schema for the outcome of a period close."""

    period: PeriodResponse
    issued: list[IssuedInvoiceResponse]
    skipped: list[SkippedEmployeeResponse]

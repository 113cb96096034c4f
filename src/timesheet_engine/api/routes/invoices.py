"""Invoice API endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Path, Query

from timesheet_engine.api.dependencies import Invoices
from timesheet_engine.api.routes.periods import period_response
from timesheet_engine.api.schemas import (
    BankDetailsResponse,
    ErrorResponse,
    InvoiceDocumentResponse,
    InvoiceLineResponse,
    PartyResponse,
    PendingInvoiceListResponse,
    PendingInvoiceResponse,
)
from timesheet_engine.services import InvoiceDocument

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _document_response(document: InvoiceDocument) -> InvoiceDocumentResponse:
    company = document.company
    return InvoiceDocumentResponse(
        title=document.title,
        invoice_number=document.invoice_number,
        is_draft=document.is_draft,
        issue_date=document.issue_date,
        due_date=document.due_date,
        period=period_response(document.period),
        employee_id=document.employee_id,
        employee=PartyResponse(
            name=document.employee_name,
            email=document.employee_email,
            telephone=document.employee_telephone,
            address=document.employee_address,
            abn=document.employee_abn,
        ),
        bank=BankDetailsResponse(
            bank_name=document.bank_name,
            account_name=document.account_name,
            account_type=document.account_type,
            bsb=document.bsb,
            account_number=document.account_number,
        ),
        company=PartyResponse(
            name=company.name,
            email=company.email,
            telephone=company.telephone,
            address=company.address,
            abn=company.abn,
        ),
        description=document.description,
        lines=[
            InvoiceLineResponse(
                work_date=line.work_date,
                shift_type=line.shift_type,
                duration=line.duration,
                rate=line.rate,
                gross=line.gross,
            )
            for line in document.lines
        ],
        total_hours=document.total_hours,
        grand_total=document.grand_total,
        payment_method=document.payment_method,
        file_name=document.file_name,
    )


@router.get(
    "/pending",
    response_model=PendingInvoiceListResponse,
    responses={422: {"model": ErrorResponse}},
)
async def pending_invoices(
    invoices: Invoices,
    period_start: Annotated[date, Query()],
) -> PendingInvoiceListResponse:
    """Employees a close of the period would invoice now."""
    pending = await invoices.pending_invoices(period_start)
    items = [PendingInvoiceResponse.model_validate(p) for p in pending]
    return PendingInvoiceListResponse(
        period=period_response(invoices.periods.period_for(period_start)),
        items=items,
        total=len(items),
    )


@router.get(
    "/{employee_id}",
    response_model=InvoiceDocumentResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def get_invoice(
    invoices: Invoices,
    employee_id: Annotated[int, Path()],
    period_start: Annotated[date, Query()],
    official: Annotated[bool, Query()] = False,
) -> InvoiceDocumentResponse:
    """Draft invoice, or the official one once the period is closed."""
    document = await invoices.build_document(employee_id, period_start, official=official)
    return _document_response(document)

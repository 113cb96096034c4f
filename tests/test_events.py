"""Tests for domain events, the emitter and the audit handlers."""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from timesheet_engine.events import (
    EventCategory,
    EventEmitter,
    EventMetadata,
    InvoiceIssued,
    LoggingHandler,
    PeriodClosed,
    PunchAccepted,
    SystemLogHandler,
    register_default_handlers,
)
from timesheet_engine.models import SystemLog
from timesheet_engine.services import PunchService
from conftest import ALICE


def punch_event(actor: str = "1") -> PunchAccepted:
    return PunchAccepted(
        metadata=EventMetadata.create(actor=actor),
        employee_id=ALICE,
        work_date=date(2025, 12, 8),
        shift_type="standard",
        punched_at=datetime(2025, 12, 7, 22, 0, tzinfo=timezone.utc),
        rate=Decimal("25.00"),
    )


def invoice_event() -> InvoiceIssued:
    return InvoiceIssued(
        metadata=EventMetadata.create(actor="admin"),
        employee_id=ALICE,
        period_start=date(2025, 12, 8),
        invoice_number=3,
        grand_total=Decimal("110.00"),
    )


class TestDomainEvents:
    """Test event typing and serialization."""

    def test_routing_properties(self):
        event = punch_event()

        assert event.event_type == "PunchAccepted"
        assert event.category == EventCategory.ATTENDANCE
        assert event.audit_action == "PUNCH"
        assert invoice_event().category == EventCategory.INVOICING

    def test_to_json(self):
        data = json.loads(invoice_event().to_json())

        assert data["event_type"] == "InvoiceIssued"
        assert data["category"] == "invoicing"
        assert data["period_start"] == "2025-12-08"
        assert data["grand_total"] == "110.00"
        assert data["metadata"]["actor"] == "admin"

    def test_describe(self):
        assert invoice_event().describe() == (
            "Invoice #3 issued to employee 1 for period 2025-12-08: 110.00"
        )

    def test_events_are_immutable(self):
        event = punch_event()
        with pytest.raises(AttributeError):
            event.employee_id = 2


class TestEventEmitter:
    """Test delivery and sink isolation."""

    async def test_type_filtered_and_catch_all_sinks(self):
        emitter = EventEmitter()
        invoices, everything = [], []

        emitter.subscribe(invoices.append, InvoiceIssued)
        emitter.subscribe(everything.append)

        await emitter.emit(punch_event())
        await emitter.emit(invoice_event())

        assert [e.event_type for e in invoices] == ["InvoiceIssued"]
        assert [e.event_type for e in everything] == ["PunchAccepted", "InvoiceIssued"]

    async def test_async_sink_is_awaited(self):
        emitter = EventEmitter()
        received = []

        async def sink(event):
            received.append(event)

        emitter.subscribe(sink)
        await emitter.emit(punch_event())

        assert len(received) == 1

    async def test_sink_failure_is_isolated(self, caplog):
        emitter = EventEmitter()
        received = []

        async def broken(event):
            raise ValueError("boom")

        emitter.subscribe(broken, PunchAccepted)
        emitter.subscribe(received.append, PunchAccepted)

        with caplog.at_level(logging.ERROR):
            errors = await emitter.emit(punch_event())

        assert len(errors) == 1
        assert isinstance(errors[0], ValueError)
        assert len(received) == 1
        assert "failed for event PunchAccepted" in caplog.text


class TestAuditHandlers:
    """Test the system log and logging handlers."""

    async def test_system_log_handler_writes_row(self, session_factory):
        event = invoice_event()

        await SystemLogHandler(session_factory)(event)

        async with session_factory() as session:
            rows = (await session.execute(select(SystemLog))).scalars().all()
        assert len(rows) == 1
        assert rows[0].action == "ISSUE_INVOICE"
        assert rows[0].actor == "admin"
        assert rows[0].event_id == str(event.metadata.event_id)
        assert "Invoice #3" in rows[0].details

    def test_logging_handler(self, caplog):
        with caplog.at_level(logging.INFO):
            LoggingHandler()(punch_event())

        assert "PunchAccepted" in caplog.text
        assert '"shift_type": "standard"' in caplog.text

    async def test_punches_are_audited(
        self, session_factory, settings, clock, employees
    ):
        emitter = EventEmitter()
        register_default_handlers(emitter, session_factory)
        service = PunchService(session_factory, settings=settings, clock=clock, emitter=emitter)

        await service.punch(ALICE)
        clock.set(2025, 12, 8, 11, 0)
        await service.punch(ALICE)

        async with session_factory() as session:
            actions = (
                await session.execute(select(SystemLog.action).order_by(SystemLog.log_id))
            ).scalars().all()
        assert actions == ["PUNCH", "PUNCH_REJECTED"]

    async def test_close_is_audited(self, session_factory):
        emitter = EventEmitter()
        register_default_handlers(emitter, session_factory)

        await emitter.emit(
            PeriodClosed(
                metadata=EventMetadata.create(),
                period_start=date(2025, 12, 8),
                issued_count=2,
                skipped_count=1,
            )
        )

        async with session_factory() as session:
            row = (await session.execute(select(SystemLog))).scalar_one()
        assert row.action == "CLOSE_PERIOD"
        assert row.actor == "system"

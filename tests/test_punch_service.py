"""Tests for punch capture and admin overrides."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select, update

from timesheet_engine.calculators.types import PunchStatus, ShiftType
from timesheet_engine.events import PunchAccepted, PunchOverridden, PunchRejected
from timesheet_engine.exceptions import (
    MissingRateConfigError,
    PeriodAlreadyClosedError,
    PunchError,
    UnknownEmployeeError,
)
from timesheet_engine.models import AttendancePunch, Employee, InvoiceRecord
from timesheet_engine.repositories.punches import PunchRepository
from timesheet_engine.services import PunchService
from conftest import ALICE, BOB, CAROL, DAVE, PERIOD


pytestmark = pytest.mark.asyncio


@pytest.fixture
def service(session_factory, settings, clock, emitter) -> PunchService:
    return PunchService(session_factory, settings=settings, clock=clock, emitter=emitter)


async def count_punches(session_factory) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(AttendancePunch))


class TestStatus:
    """Test the blocked / ready / punched query."""

    async def test_ready_inside_window(self, service, employees):
        outcome = await service.get_status(ALICE)

        assert outcome.status == PunchStatus.READY
        assert outcome.window.shift_type == ShiftType.STANDARD
        assert outcome.window.work_date == date(2025, 12, 8)

    async def test_blocked_outside_window_even_with_punch(
        self, service, employees, clock, add_punch
    ):
        await add_punch(ALICE, date(2025, 12, 8))
        clock.set(2025, 12, 8, 10, 1)

        outcome = await service.get_status(ALICE)

        assert outcome.status == PunchStatus.BLOCKED
        assert outcome.punched_at is None

    async def test_punched_reports_existing_timestamp(self, service, employees, add_punch):
        await add_punch(ALICE, date(2025, 12, 8))

        outcome = await service.get_status(ALICE)

        assert outcome.status == PunchStatus.PUNCHED
        assert outcome.punched_at == datetime(2025, 12, 7, 22, 0, tzinfo=timezone.utc)

    async def test_unknown_and_inactive(self, service, employees):
        with pytest.raises(UnknownEmployeeError):
            await service.get_status(404)
        with pytest.raises(UnknownEmployeeError) as exc_info:
            await service.get_status(CAROL)
        assert exc_info.value.reason == "is not active"


class TestPunch:
    """Test punch acceptance."""

    async def test_accepts_and_captures_current_rate(
        self, service, employees, session_factory, emitter
    ):
        seen = []
        emitter.subscribe(seen.append, PunchAccepted)

        outcome = await service.punch(ALICE)

        assert outcome.accepted
        assert outcome.status == PunchStatus.PUNCHED
        assert outcome.punched_at == datetime(2025, 12, 7, 22, 0, tzinfo=timezone.utc)

        async with session_factory() as session:
            punch = await PunchRepository(session).find_punch(
                ALICE, date(2025, 12, 8), "standard"
            )
        assert punch.rate == Decimal("25.00")
        assert punch.duration == Decimal("2.0")
        assert punch.gross == Decimal("50.00")
        assert punch.source == "punch"
        assert punch.clock_text == "08:00 AM"

        assert len(seen) == 1
        assert seen[0].employee_id == ALICE
        assert seen[0].shift_type == "standard"

    async def test_naive_time_is_local_wall_clock(self, service, employees, session_factory):
        outcome = await service.punch(ALICE, datetime(2025, 12, 8, 8, 0))

        assert outcome.accepted
        assert outcome.punched_at == datetime(2025, 12, 7, 22, 0, tzinfo=timezone.utc)
        async with session_factory() as session:
            punch = await PunchRepository(session).find_punch(
                ALICE, date(2025, 12, 8), "standard"
            )
        assert punch.clock_text == "08:00 AM"

    async def test_rejection_records_local_attempt_time(self, service, employees, emitter):
        seen = []
        emitter.subscribe(seen.append, PunchRejected)

        await service.punch(ALICE, datetime(2025, 12, 8, 10, 30))

        assert seen[0].attempted_at == datetime(2025, 12, 8, 0, 30, tzinfo=timezone.utc)

    async def test_out_of_window(self, service, employees, clock, emitter, session_factory):
        seen = []
        emitter.subscribe(seen.append, PunchRejected)
        clock.set(2025, 12, 14, 8, 0)  # Sunday

        outcome = await service.punch(ALICE)

        assert not outcome.accepted
        assert outcome.status == PunchStatus.BLOCKED
        assert outcome.error == PunchError.OUT_OF_WINDOW
        assert await count_punches(session_factory) == 0
        assert seen[0].reason == "out_of_window"

    async def test_second_punch_is_duplicate(self, service, employees, clock, session_factory):
        first = await service.punch(ALICE)
        clock.set(2025, 12, 8, 9, 30)

        second = await service.punch(ALICE)

        assert not second.accepted
        assert second.error == PunchError.DUPLICATE_PUNCH
        assert second.punched_at == first.punched_at
        assert await count_punches(session_factory) == 1

    async def test_evening_punch_is_separate_from_morning(self, service, employees, clock):
        clock.set(2025, 12, 12, 7, 15)
        morning = await service.punch(BOB)
        clock.set(2025, 12, 12, 19, 45)
        evening = await service.punch(BOB)

        assert morning.accepted
        assert evening.accepted
        assert evening.window.shift_type == ShiftType.OVERTIME

    async def test_lost_race_reports_winner(
        self, service, employees, add_punch, monkeypatch, session_factory
    ):
        """A concurrent insert that wins the unique constraint turns into a duplicate."""
        winner = await add_punch(ALICE, date(2025, 12, 8), rate=Decimal("25.00"))
        original = PunchRepository.find_punch
        calls = []

        async def stale_find(self, employee_id, work_date, shift_type):
            calls.append(employee_id)
            if len(calls) == 1:
                return None
            return await original(self, employee_id, work_date, shift_type)

        monkeypatch.setattr(PunchRepository, "find_punch", stale_find)

        outcome = await service.punch(ALICE)

        assert outcome.error == PunchError.DUPLICATE_PUNCH
        assert outcome.punched_at == winner.punched_at
        assert await count_punches(session_factory) == 1

    async def test_missing_rate(self, service, employees):
        with pytest.raises(MissingRateConfigError):
            await service.punch(DAVE)

    async def test_rate_change_does_not_touch_captured_rate(
        self, service, employees, clock, session_factory
    ):
        await service.punch(ALICE)
        async with session_factory() as session, session.begin():
            await session.execute(
                update(Employee)
                .where(Employee.employee_id == ALICE)
                .values(hourly_rate=Decimal("30.00"))
            )
        clock.set(2025, 12, 9, 8, 0)
        await service.punch(ALICE)

        async with session_factory() as session:
            punches = await PunchRepository(session).list_punches(
                [ALICE], PERIOD, date(2025, 12, 22)
            )
        assert [p.rate for p in punches] == [Decimal("25.00"), Decimal("30.00")]


class TestOverride:
    """Test administrative edits."""

    async def test_creates_manual_punch_at_current_rate(self, service, employees, emitter):
        seen = []
        emitter.subscribe(seen.append, PunchOverridden)

        punch = await service.override_punch(BOB, date(2025, 12, 13), "overtime")

        assert punch.rate == Decimal("30.00")
        assert punch.duration == Decimal("2.4")
        assert punch.gross == Decimal("72.00")
        assert punch.source == "manual"
        assert punch.clock_text == "Manual Admin"
        assert seen[0].action == "upsert"

    async def test_existing_punch_keeps_rate_unless_given(
        self, service, employees, add_punch
    ):
        await add_punch(ALICE, date(2025, 12, 9), rate=Decimal("22.00"))

        kept = await service.override_punch(ALICE, date(2025, 12, 9), ShiftType.STANDARD)
        assert kept.rate == Decimal("22.00")

        changed = await service.override_punch(
            ALICE, date(2025, 12, 9), ShiftType.STANDARD, rate=Decimal("27.50")
        )
        assert changed.rate == Decimal("27.50")
        assert changed.gross == Decimal("55.00")

    async def test_remove(self, service, employees, add_punch, session_factory):
        await add_punch(ALICE, date(2025, 12, 9))

        assert await service.remove_punch(ALICE, date(2025, 12, 9), "standard")
        assert not await service.remove_punch(ALICE, date(2025, 12, 9), "standard")
        assert await count_punches(session_factory) == 0

    async def test_closed_period_refuses_edits(self, service, employees, session_factory):
        async with session_factory() as session, session.begin():
            session.add(
                InvoiceRecord(
                    employee_id=ALICE,
                    period_start=PERIOD,
                    invoice_number=1,
                    total_hours=Decimal("2.0"),
                    grand_total=Decimal("50.00"),
                )
            )

        with pytest.raises(PeriodAlreadyClosedError) as exc_info:
            await service.override_punch(ALICE, date(2025, 12, 10), "standard")
        assert exc_info.value.invoice_number == 1

        with pytest.raises(PeriodAlreadyClosedError):
            await service.remove_punch(ALICE, date(2025, 12, 10), "standard")

        # Other employees and other periods stay editable
        await service.override_punch(BOB, date(2025, 12, 10), "standard")
        await service.override_punch(ALICE, date(2025, 12, 22), "standard")

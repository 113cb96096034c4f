"""Pytest fixtures for timesheet engine tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from timesheet_engine.calculators.types import ShiftType, credited_hours
from timesheet_engine.config import CompanyProfile, Settings
from timesheet_engine.database import SessionFactory, make_session_factory
from timesheet_engine.events import EventEmitter
from timesheet_engine.models import AttendancePunch, Base, Employee

# In-memory SQLite shared by every session of a test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BRISBANE = ZoneInfo("Australia/Brisbane")
ANCHOR = date(2025, 9, 1)  # Monday
PERIOD = date(2025, 12, 8)  # Monday, anchor + 7 periods

ALICE = 1
BOB = 2
CAROL = 3  # inactive
DAVE = 4  # no rate configured


@dataclass
class FixedClock:
    """Clock frozen at a settable instant."""

    current: datetime
    tz: ZoneInfo = BRISBANE

    def now(self) -> datetime:
        return self.current

    def set(self, *args: int) -> None:
        self.current = datetime(*args, tzinfo=self.tz)


def local(*args: int) -> datetime:
    """Aware Brisbane wall-clock instant."""
    return datetime(*args, tzinfo=BRISBANE)


@pytest.fixture
def settings() -> Settings:
    """Settings for tests, independent of the environment."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        timezone="Australia/Brisbane",
        period_anchor=ANCHOR,
        period_anchor_version="1",
        previous_period_anchor=None,
        invoice_due_days=4,
        company=CompanyProfile(
            name="Sparkle Facilities Pty Ltd",
            email="accounts@sparkle.example",
            abn="12 345 678 901",
            telephone="07 3000 0000",
            address="1 Queen St, Brisbane QLD 4000",
            service_description="Cleaning Services",
        ),
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="INFO",
        auto_create_schema=False,
    )


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine with a fresh schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> SessionFactory:
    return make_session_factory(engine)


@pytest.fixture
def clock() -> FixedClock:
    """Monday 8 December 2025, 08:00 in Brisbane (morning window open)."""
    return FixedClock(local(2025, 12, 8, 8, 0))


@pytest.fixture
def emitter() -> EventEmitter:
    return EventEmitter()


@pytest_asyncio.fixture
async def employees(session_factory: SessionFactory) -> list[Employee]:
    """A small roster: two active workers, one inactive, one without a rate."""
    roster = [
        Employee(
            employee_id=ALICE,
            name="Alice",
            surname="Smith",
            hourly_rate=Decimal("25.00"),
            email="alice@example.com",
            telephone="0400 000 001",
            address="2 Ann St, Brisbane QLD 4000",
            abn="98 765 432 109",
            bank_name="Commonwealth Bank",
            account_name="A Smith",
            account_type="Savings",
            bsb="064-000",
            account_number="12345678",
        ),
        Employee(
            employee_id=BOB,
            name="Bob",
            surname="Jones",
            hourly_rate=Decimal("30.00"),
        ),
        Employee(
            employee_id=CAROL,
            name="Carol",
            surname="Brown",
            hourly_rate=Decimal("28.00"),
            active=False,
        ),
        Employee(
            employee_id=DAVE,
            name="Dave",
            surname="Wilson",
            hourly_rate=None,
        ),
    ]
    async with session_factory() as session, session.begin():
        session.add_all(roster)
    return roster


@pytest.fixture
def add_punch(session_factory: SessionFactory):
    """Insert a punch directly, the way a past request would have stored it."""

    async def _add(
        employee_id: int,
        work_date: date,
        shift_type: ShiftType = ShiftType.STANDARD,
        rate: Decimal = Decimal("25.00"),
        punched_at: datetime | None = None,
    ) -> AttendancePunch:
        hours = credited_hours(shift_type)
        if punched_at is None:
            hour = 8 if shift_type == ShiftType.STANDARD else 20
            punched_at = datetime(
                work_date.year, work_date.month, work_date.day, hour, 0, tzinfo=BRISBANE
            )
        punch = AttendancePunch(
            employee_id=employee_id,
            work_date=work_date,
            punched_at=punched_at.astimezone(timezone.utc),
            shift_type=ShiftType(shift_type).value,
            rate=rate,
            duration=hours,
            gross=(hours * rate).quantize(Decimal("0.01")),
            source="punch",
        )
        async with session_factory() as session, session.begin():
            session.add(punch)
        return punch

    return _add

"""API endpoint tests.

Tests the FastAPI endpoints against an in-memory database.
"""

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from timesheet_engine.api.app import create_app
from timesheet_engine.models import SystemLog
from conftest import ALICE, BOB, CAROL, DAVE, PERIOD


pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(settings, session_factory, clock, employees) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to an app that shares the test database."""
    app = create_app(settings=settings, session_factory=session_factory, clock=clock)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should return 200."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"

    async def test_readiness_and_liveness(self, client: AsyncClient):
        assert (await client.get("/ready")).json()["status"] == "ready"
        assert (await client.get("/live")).json()["status"] == "alive"


class TestAttendanceEndpoints:
    """Test punch endpoints."""

    async def test_status_then_punch(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/attendance/status", params={"employee_id": ALICE}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert response.json()["shift_type"] == "standard"

        response = await client.post("/api/v1/attendance/punch", json={"employee_id": ALICE})
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["accepted"] is True
        assert data["status"] == "punched"
        assert data["work_date"] == "2025-12-08"

        response = await client.get(
            "/api/v1/attendance/status", params={"employee_id": ALICE}
        )
        assert response.json()["status"] == "punched"

    async def test_duplicate_punch_is_typed_rejection(self, client: AsyncClient):
        await client.post("/api/v1/attendance/punch", json={"employee_id": ALICE})

        response = await client.post("/api/v1/attendance/punch", json={"employee_id": ALICE})

        assert response.status_code == 200
        assert response.json()["accepted"] is False
        assert response.json()["error"] == "duplicate_punch"
        assert response.json()["punched_at"] is not None

    async def test_out_of_window(self, client: AsyncClient, clock):
        clock.set(2025, 12, 8, 10, 0)

        response = await client.post("/api/v1/attendance/punch", json={"employee_id": BOB})

        assert response.status_code == 200
        assert response.json()["error"] == "out_of_window"
        assert response.json()["status"] == "blocked"

    async def test_unknown_employee(self, client: AsyncClient):
        response = await client.post("/api/v1/attendance/punch", json={"employee_id": 404})

        assert response.status_code == 404
        assert response.json()["code"] == "UNKNOWN_EMPLOYEE"

    async def test_inactive_employee(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/attendance/status", params={"employee_id": CAROL}
        )

        assert response.status_code == 404

    async def test_missing_rate(self, client: AsyncClient):
        response = await client.post("/api/v1/attendance/punch", json={"employee_id": DAVE})

        assert response.status_code == 409
        assert response.json()["code"] == "MISSING_RATE_CONFIG"

    async def test_override_and_remove(self, client: AsyncClient):
        response = await client.put(
            "/api/v1/attendance/override",
            json={
                "employee_id": BOB,
                "work_date": "2025-12-13",
                "shift_type": "overtime",
                "rate": "32.50",
            },
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["source"] == "manual"
        assert Decimal(data["gross"]) == Decimal("78.00")

        response = await client.delete(
            "/api/v1/attendance/override",
            params={"employee_id": BOB, "work_date": "2025-12-13", "shift_type": "overtime"},
        )
        assert response.status_code == 200
        assert response.json()["removed"] is True

    async def test_override_rejects_non_positive_rate(self, client: AsyncClient):
        response = await client.put(
            "/api/v1/attendance/override",
            json={
                "employee_id": BOB,
                "work_date": "2025-12-13",
                "shift_type": "overtime",
                "rate": "0",
            },
        )

        assert response.status_code == 422


class TestPeriodEndpoints:
    """Test period listing, timesheet and close endpoints."""

    async def test_list_periods(self, client: AsyncClient):
        response = await client.get("/api/v1/periods", params={"count": 2})

        assert response.status_code == 200
        items = response.json()["items"]
        assert [i["start"] for i in items] == ["2025-12-08", "2025-11-24"]
        assert items[0]["label"] == "08/12/2025 - 21/12/2025"

    async def test_active_periods(self, client: AsyncClient):
        response = await client.get("/api/v1/periods/active")

        assert [i["start"] for i in response.json()["items"]] == [
            "2025-12-22",
            "2025-12-08",
        ]

    async def test_timesheet(self, client: AsyncClient, add_punch):
        await add_punch(ALICE, date(2025, 12, 8))
        await add_punch(ALICE, date(2025, 12, 20), "overtime")

        response = await client.get(
            "/api/v1/timesheet",
            params={"period_start": "2025-12-08", "include_idle": "false"},
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert len(data["slot_dates"]) == 12
        row = data["rows"][0]
        assert row["employee_id"] == ALICE
        assert Decimal(row["hours"][0]) == Decimal("2.0")
        assert row["hours"][1] is None
        assert Decimal(row["hours"][11]) == Decimal("2.4")
        assert Decimal(row["total"]) == Decimal("4.4")

    async def test_timesheet_rejects_misaligned_start(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/timesheet", params={"period_start": "2025-12-09"}
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_PERIOD_START"

    async def test_close_twice(self, client: AsyncClient, add_punch, session_factory):
        await add_punch(ALICE, date(2025, 12, 8))

        first = await client.post("/api/v1/periods/2025-12-08/close")
        second = await client.post(
            "/api/v1/periods/2025-12-08/close", json={"actor": "admin"}
        )

        assert first.status_code == 200, first.text
        assert first.json()["issued"][0]["invoice_number"] == 1
        assert second.json()["issued"] == []
        assert {"employee_id": ALICE, "reason": "already_invoiced", "invoice_number": None} in (
            second.json()["skipped"]
        )

        async with session_factory() as session:
            actions = (await session.execute(select(SystemLog.action))).scalars().all()
        assert actions.count("ISSUE_INVOICE") == 1
        assert actions.count("CLOSE_PERIOD") == 2


    async def test_close_with_unknown_employee(self, client: AsyncClient, add_punch):
        await add_punch(ALICE, date(2025, 12, 8))

        response = await client.post(
            "/api/v1/periods/2025-12-08/close", json={"employee_ids": [ALICE, 999]}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "UNKNOWN_EMPLOYEE"


class TestInvoiceEndpoints:
    """Test invoice document and pending endpoints."""

    async def test_draft_then_official(self, client: AsyncClient, add_punch):
        await add_punch(ALICE, date(2025, 12, 8))

        draft = await client.get(
            f"/api/v1/invoices/{ALICE}", params={"period_start": "2025-12-08"}
        )
        assert draft.status_code == 200, draft.text
        assert draft.json()["invoice_number"] == "DRAFT"
        assert draft.json()["due_date"] == "2025-12-12"
        assert draft.json()["bank"]["bsb"] == "064-000"

        not_closed = await client.get(
            f"/api/v1/invoices/{ALICE}",
            params={"period_start": "2025-12-08", "official": "true"},
        )
        assert not_closed.status_code == 409
        assert not_closed.json()["code"] == "PERIOD_NOT_CLOSED"

        await client.post("/api/v1/periods/2025-12-08/close")
        official = await client.get(
            f"/api/v1/invoices/{ALICE}",
            params={"period_start": "2025-12-08", "official": "true"},
        )
        assert official.status_code == 200
        assert official.json()["invoice_number"] == "1"
        assert Decimal(official.json()["grand_total"]) == Decimal("50.00")

    async def test_pending(self, client: AsyncClient, add_punch):
        await add_punch(BOB, date(2025, 12, 9), rate=Decimal("30.00"))

        response = await client.get(
            "/api/v1/invoices/pending", params={"period_start": PERIOD.isoformat()}
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["employee_id"] == BOB
        assert Decimal(data["items"][0]["grand_total"]) == Decimal("60.00")

    async def test_unknown_employee_invoice(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/invoices/404", params={"period_start": "2025-12-08"}
        )

        assert response.status_code == 404

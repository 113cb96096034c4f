"""API routes."""

from timesheet_engine.api.routes.attendance import router as attendance_router
from timesheet_engine.api.routes.health import router as health_router
from timesheet_engine.api.routes.invoices import router as invoices_router
from timesheet_engine.api.routes.periods import router as periods_router

__all__ = ["attendance_router", "health_router", "invoices_router", "periods_router"]

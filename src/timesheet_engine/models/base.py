"""Declarative base and shared column types for the timesheet tables."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Hourly rates and amounts in dollars, credited hours to one decimal place
RATE = Numeric(10, 2)
MONEY = Numeric(12, 2)
HOURS = Numeric(6, 1)


class Base(DeclarativeBase):
    """Base class for all ORM models.

    ``date`` columns hold calendar days in the business time zone; ``datetime``
    columns hold UTC instants.
    """

    type_annotation_map = {
        date: Date,
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Row creation time, set by the database."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

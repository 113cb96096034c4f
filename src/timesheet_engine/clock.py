"""Clock abstraction supplying "now" in the configured zone."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current instant."""

    tz: ZoneInfo

    def now(self) -> datetime:
        """Current timezone-aware instant."""
        ...


@dataclass(frozen=True)
class SystemClock:
    """Wall clock of the host, expressed in ``tz``."""

    tz: ZoneInfo

    def now(self) -> datetime:
        return datetime.now(self.tz)


def as_utc(value: datetime) -> datetime:
    """Normalize a stored instant to aware UTC.

    Backends without timezone support hand back naive values; those were
    written as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

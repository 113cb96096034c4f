"""Fortnightly pay period arithmetic.

Pay periods are 14-day half-open intervals ``[start, start + 14)`` that tile
the calendar from a fixed anchor date. Nothing here is persisted; every
period is derived from the anchor.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

PERIOD_DAYS = 14


@dataclass(frozen=True)
class PeriodAnchor:
    """Reference start date of the period tiling, tagged with a version."""

    anchor: date
    version: str = "1"


@dataclass(frozen=True, order=True)
class PayPeriod:
    """A single fortnight."""

    start: date

    @property
    def end(self) -> date:
        """Exclusive end of the period."""
        return self.start + timedelta(days=PERIOD_DAYS)

    @property
    def last_day(self) -> date:
        return self.start + timedelta(days=PERIOD_DAYS - 1)

    @property
    def label(self) -> str:
        return f"{self.start:%d/%m/%Y} - {self.last_day:%d/%m/%Y}"

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range(PERIOD_DAYS)]

    def next(self) -> PayPeriod:
        return PayPeriod(self.end)

    def previous(self) -> PayPeriod:
        return PayPeriod(self.start - timedelta(days=PERIOD_DAYS))


def to_local_date(value: date | datetime, tz: ZoneInfo | None = None) -> date:
    """Reduce a date or instant to its calendar date in ``tz``.

    Naive datetimes are taken to already be wall-clock time in ``tz``.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def period_start(value: date | datetime, anchor: date) -> date:
    """Start of the period containing ``value``.

    Floor division keeps dates before the anchor in the correct earlier
    period instead of truncating toward zero.
    """
    k = (to_local_date(value) - anchor).days // PERIOD_DAYS
    return anchor + timedelta(days=PERIOD_DAYS * k)


def period_options(n: int, anchor: date, reference_date: date) -> list[PayPeriod]:
    """The ``n`` most recent periods up to the reference date's period, newest first."""
    current = PayPeriod(period_start(reference_date, anchor))
    options = []
    for _ in range(max(n, 0)):
        options.append(current)
        current = current.previous()
    return options


def anchor_discontinuity(previous: date, current: date) -> int:
    """Day offset between two period tilings; 0 means the boundaries coincide."""
    return (current - previous).days % PERIOD_DAYS


class PeriodCalculator:
    """Period math bound to one anchor and one time zone."""

    def __init__(self, anchor: PeriodAnchor | date, tz: ZoneInfo | None = None):
        if isinstance(anchor, date):
            anchor = PeriodAnchor(anchor)
        self.anchor = anchor
        self.tz = tz

    def local_date(self, value: date | datetime) -> date:
        return to_local_date(value, self.tz)

    def period_start(self, value: date | datetime) -> date:
        return period_start(self.local_date(value), self.anchor.anchor)

    def period_for(self, value: date | datetime) -> PayPeriod:
        return PayPeriod(self.period_start(value))

    def is_period_start(self, value: date) -> bool:
        return self.period_start(value) == value

    def period_options(self, n: int, reference: date | datetime) -> list[PayPeriod]:
        return period_options(n, self.anchor.anchor, self.local_date(reference))

    def periods_with_activity(
        self,
        work_dates: Iterable[date],
        reference: date | datetime,
    ) -> list[PayPeriod]:
        """Periods holding any of ``work_dates`` plus the current and next period.

        Sorted newest first.
        """
        current = self.period_for(reference)
        periods = {current, current.next()}
        periods.update(self.period_for(d) for d in work_dates)
        return sorted(periods, reverse=True)

    def check_anchor_change(self, previous: PeriodAnchor | None) -> int:
        """Log a warning when the configured anchor shifts period boundaries.

        Returns the day offset (0 when the tilings agree or nothing changed).
        """
        if previous is None:
            return 0
        offset = anchor_discontinuity(previous.anchor, self.anchor.anchor)
        if offset:
            logger.warning(
                "Period anchor %s (version %s) is offset by %d day(s) from previous "
                "anchor %s; period boundaries before and after the change do not align",
                self.anchor.anchor,
                self.anchor.version,
                offset,
                previous.anchor,
            )
        return offset

"""Business-day arithmetic.

Day boundaries always come from an explicit timezone handed in by the caller
(configuration), never from the host's local time.
"""

from __future__ import annotations

import calendar
from datetime import UTC, date, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from agencyops.domain.errors import InvalidDayError, ValidationError

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utc_clock() -> datetime:
    return datetime.now(UTC)


class ReportPeriod(StrEnum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        raise ValueError("Timestamps must include timezone information")
    return value.astimezone(UTC)


def local_day(instant: datetime, tz: ZoneInfo) -> date:
    """Return the calendar day ``instant`` falls on in ``tz``."""

    return ensure_aware(instant).astimezone(tz).date()


def today(clock: Clock, tz: ZoneInfo) -> date:
    return local_day(clock(), tz)


def parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidDayError(f"Invalid calendar day: {value!r} (expected YYYY-MM-DD)") from exc


def _one_month_back(day: date) -> date:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def period_range(period: ReportPeriod | str, *, clock: Clock, tz: ZoneInfo) -> tuple[date, date]:
    """Resolve a named reporting period into an inclusive ``(start, end)`` day range."""

    try:
        resolved = ReportPeriod(period)
    except ValueError as exc:
        raise ValidationError(f"Unknown report period: {period!r}") from exc

    end = today(clock, tz)
    if resolved is ReportPeriod.WEEK:
        return end - timedelta(days=7), end
    if resolved is ReportPeriod.MONTH:
        return _one_month_back(end), end
    return end, end

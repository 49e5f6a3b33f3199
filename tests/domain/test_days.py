from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest

from agencyops.domain.days import local_day, parse_day, period_range
from agencyops.domain.errors import InvalidDayError, ValidationError
from tests.helpers.clocks import make_clock

KOLKATA = ZoneInfo("Asia/Kolkata")


def test_local_day_uses_business_timezone() -> None:
    # 20:00 UTC is already the next morning in India.
    instant = datetime(2025, 3, 10, 20, 0, tzinfo=UTC)

    assert local_day(instant, KOLKATA) == date(2025, 3, 11)
    assert local_day(instant, ZoneInfo("UTC")) == date(2025, 3, 10)


def test_local_day_rejects_naive_datetimes() -> None:
    with pytest.raises(ValueError, match="timezone"):
        local_day(datetime(2025, 3, 10, 12, 0), KOLKATA)  # noqa: DTZ001


def test_parse_day_accepts_iso_dates() -> None:
    assert parse_day(" 2025-02-28 ") == date(2025, 2, 28)


def test_parse_day_rejects_malformed_input() -> None:
    with pytest.raises(InvalidDayError):
        parse_day("28/02/2025")


def test_period_range_today_week_month() -> None:
    clock = make_clock(datetime(2025, 3, 31, 6, 0, tzinfo=UTC))

    assert period_range("today", clock=clock, tz=KOLKATA) == (date(2025, 3, 31), date(2025, 3, 31))
    assert period_range("week", clock=clock, tz=KOLKATA) == (date(2025, 3, 24), date(2025, 3, 31))
    # No 31 February: clamps to the last day of the month.
    assert period_range("month", clock=clock, tz=KOLKATA) == (date(2025, 2, 28), date(2025, 3, 31))


def test_period_range_month_crosses_year_boundary() -> None:
    clock = make_clock(datetime(2025, 1, 15, 6, 0, tzinfo=UTC))

    assert period_range("month", clock=clock, tz=KOLKATA) == (date(2024, 12, 15), date(2025, 1, 15))


def test_period_range_rejects_unknown_period() -> None:
    clock = make_clock(datetime(2025, 1, 15, tzinfo=UTC))

    with pytest.raises(ValidationError):
        period_range("year", clock=clock, tz=KOLKATA)

"""Attendance and time-accounting configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Final
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .env import optional_env_int
from .errors import ConfigurationError

DEFAULT_BUSINESS_TIMEZONE: Final[str] = "Asia/Kolkata"
DEFAULT_LONG_BREAK_MINUTES: Final[int] = 90
DEFAULT_STALE_SESSION_HOURS: Final[int] = 16


@dataclass(frozen=True, slots=True)
class AttendanceConfig:
    """Day boundaries and anomaly thresholds for attendance tracking."""

    timezone: ZoneInfo
    long_break: timedelta = timedelta(minutes=DEFAULT_LONG_BREAK_MINUTES)
    stale_session_after: timedelta = timedelta(hours=DEFAULT_STALE_SESSION_HOURS)


def load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone: {name!r}") from exc


def get_attendance_config(*, timezone: str | None = None) -> AttendanceConfig:
    tz_name = timezone or os.getenv("AGENCYOPS_TIMEZONE") or DEFAULT_BUSINESS_TIMEZONE
    return AttendanceConfig(
        timezone=load_timezone(tz_name),
        long_break=timedelta(
            minutes=optional_env_int("AGENCYOPS_LONG_BREAK_MINUTES", DEFAULT_LONG_BREAK_MINUTES)
        ),
        stale_session_after=timedelta(
            hours=optional_env_int("AGENCYOPS_STALE_SESSION_HOURS", DEFAULT_STALE_SESSION_HOURS)
        ),
    )

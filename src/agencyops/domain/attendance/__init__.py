"""Attendance: clock transitions, daily aggregation and reports."""

from __future__ import annotations

from agencyops.domain.attendance.aggregation import (
    DEFAULT_LONG_BREAK,
    compute_daily_summary,
    recompute_daily_summary,
    refresh_daily_summary,
)
from agencyops.domain.attendance.clock import (
    ClockTransition,
    clock_in,
    clock_out,
    clock_state,
    end_break,
    start_break,
)
from agencyops.domain.attendance.reporting import (
    UserWorkHours,
    WorkHoursReport,
    summarize_work_hours,
    work_hours_report,
)
from agencyops.domain.attendance.sweep import DEFAULT_MAX_OPEN, flag_stale_sessions

__all__ = [
    "DEFAULT_LONG_BREAK",
    "DEFAULT_MAX_OPEN",
    "ClockTransition",
    "UserWorkHours",
    "WorkHoursReport",
    "clock_in",
    "clock_out",
    "clock_state",
    "compute_daily_summary",
    "end_break",
    "flag_stale_sessions",
    "recompute_daily_summary",
    "refresh_daily_summary",
    "start_break",
    "summarize_work_hours",
    "work_hours_report",
]

"""Daily time accounting.

``compute_daily_summary`` is a pure function of one day's sessions; the summary
row is always rebuilt from scratch and upserted, never patched incrementally.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Final

from agencyops.domain.model import DailySummary, SessionStatus, SummaryFlag

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime
    from uuid import UUID

    from agencyops.domain.days import Clock
    from agencyops.domain.model import AttendanceSession
    from agencyops.domain.ports import AttendanceRepositories, AttendanceUnitOfWork

DEFAULT_LONG_BREAK: Final[timedelta] = timedelta(minutes=90)

_MINUTE: Final[timedelta] = timedelta(minutes=1)


def _whole_minutes(total: timedelta) -> int:
    return max(0, total // _MINUTE)


def compute_daily_summary(
    user_id: UUID,
    day: date,
    sessions: Iterable[AttendanceSession],
    *,
    now: datetime,
    long_break: timedelta = DEFAULT_LONG_BREAK,
) -> DailySummary:
    """Build the summary for ``(user_id, day)`` from its sessions.

    Open sessions and breaks are measured up to ``now`` and mark the day
    incomplete. Net time is gross minus breaks, floored at zero.
    """

    gross = timedelta()
    on_break = timedelta()
    sessions_count = 0
    flags: set[SummaryFlag] = set()

    for session in sessions:
        sessions_count += 1
        gross += session.duration(now)
        if session.clock_out_at is None:
            flags.add(SummaryFlag.OPEN_SESSION)
        if session.status is SessionStatus.FLAGGED:
            flags.add(SummaryFlag.MISSED_CLOCKOUT)
        for brk in session.breaks:
            length = brk.duration(now)
            on_break += length
            if length > long_break:
                flags.add(SummaryFlag.LONG_BREAK)

    gross_minutes = _whole_minutes(gross)
    break_minutes = _whole_minutes(on_break)
    return DailySummary(
        user_id=user_id,
        day=day,
        gross_minutes=gross_minutes,
        break_minutes=break_minutes,
        net_minutes=max(0, gross_minutes - break_minutes),
        sessions_count=sessions_count,
        is_complete=SummaryFlag.OPEN_SESSION not in flags,
        flags=sorted(flag.value for flag in flags),
    )


def recompute_daily_summary(
    repositories: AttendanceRepositories,
    user_id: UUID,
    day: date,
    *,
    now: datetime,
    long_break: timedelta = DEFAULT_LONG_BREAK,
) -> DailySummary:
    """Recompute and upsert one day inside the caller's unit of work."""

    sessions = repositories.sessions.list_for_day(user_id, day)
    summary = compute_daily_summary(user_id, day, sessions, now=now, long_break=long_break)
    return repositories.summaries.upsert(summary)


def refresh_daily_summary(
    uow: AttendanceUnitOfWork,
    user_id: UUID,
    day: date,
    *,
    clock: Clock,
    long_break: timedelta = DEFAULT_LONG_BREAK,
) -> DailySummary:
    """Recompute one day in its own unit of work (manual edits, backfills)."""

    with uow:
        summary = recompute_daily_summary(
            uow.repositories,
            user_id,
            day,
            now=clock(),
            long_break=long_break,
        )
        uow.commit()
    return summary

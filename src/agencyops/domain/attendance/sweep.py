"""Flag sessions that were left open for too long."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Final

from agencyops.domain.attendance.aggregation import DEFAULT_LONG_BREAK, recompute_daily_summary
from agencyops.domain.model import SessionStatus

if TYPE_CHECKING:
    from agencyops.domain.days import Clock
    from agencyops.domain.model import AttendanceSession
    from agencyops.domain.ports import AttendanceUnitOfWork

log = logging.getLogger(__name__)

DEFAULT_MAX_OPEN: Final[timedelta] = timedelta(hours=16)


def flag_stale_sessions(
    uow: AttendanceUnitOfWork,
    *,
    clock: Clock,
    max_open: timedelta = DEFAULT_MAX_OPEN,
    long_break: timedelta = DEFAULT_LONG_BREAK,
) -> list[AttendanceSession]:
    """Close every session open longer than ``max_open`` with status ``flagged``.

    The session and any running break end at the sweep instant, and each affected
    day is recomputed so its summary carries ``missed_clockout``.
    """

    with uow:
        repositories = uow.repositories
        now = clock()
        stale = list(repositories.sessions.list_open_started_before(now - max_open))
        for session in stale:
            session.close(at=now, status=SessionStatus.FLAGGED)

        for user_id, day in sorted({(s.user_id, s.session_date) for s in stale}, key=str):
            recompute_daily_summary(repositories, user_id, day, now=now, long_break=long_break)
        uow.commit()

    if stale:
        log.warning("Flagged %s stale attendance sessions", len(stale))
    else:
        log.info("No stale attendance sessions")
    return stale

"""Per-user clock state machine: OUT -> IN -> ON_BREAK -> IN -> OUT.

Each transition runs in its own unit of work and recomputes the summary of the
session's day before committing. The "one open session per user" and "one open
break per session" guards are enforced by the store, so two racing requests
cannot both succeed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from agencyops.domain.attendance.aggregation import DEFAULT_LONG_BREAK, recompute_daily_summary
from agencyops.domain.days import local_day
from agencyops.domain.errors import AlreadyClockedInError, NoOpenSessionError
from agencyops.domain.model import AttendanceSession, ClockState

if TYPE_CHECKING:
    from datetime import datetime, timedelta
    from uuid import UUID
    from zoneinfo import ZoneInfo

    from agencyops.domain.days import Clock
    from agencyops.domain.model import DailySummary
    from agencyops.domain.ports import AttendanceRepositories, AttendanceUnitOfWork

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ClockTransition:
    """State after a transition, with the session touched and its refreshed day."""

    state: ClockState
    session: AttendanceSession
    summary: DailySummary

    def to_payload(self) -> dict[str, object]:
        return {
            "state": self.state.value,
            "session_id": str(self.session.id),
            "session_date": self.session.session_date.isoformat(),
            "clock_in_at": self.session.clock_in_at.isoformat(),
            "clock_out_at": (
                self.session.clock_out_at.isoformat() if self.session.clock_out_at else None
            ),
            "summary": self.summary.to_payload(),
        }


def _state_of(session: AttendanceSession | None) -> ClockState:
    if session is None or not session.is_open:
        return ClockState.OUT
    if session.active_break is not None:
        return ClockState.ON_BREAK
    return ClockState.IN


def _require_open(repositories: AttendanceRepositories, user_id: UUID) -> AttendanceSession:
    session = repositories.sessions.get_open_for_user(user_id)
    if session is None:
        raise NoOpenSessionError(user_id)
    return session


def _finish(
    repositories: AttendanceRepositories,
    session: AttendanceSession,
    *,
    at: datetime,
    long_break: timedelta,
) -> ClockTransition:
    summary = recompute_daily_summary(
        repositories,
        session.user_id,
        session.session_date,
        now=at,
        long_break=long_break,
    )
    return ClockTransition(state=_state_of(session), session=session, summary=summary)


def clock_state(uow: AttendanceUnitOfWork, user_id: UUID) -> ClockState:
    with uow:
        return _state_of(uow.repositories.sessions.get_open_for_user(user_id))


def clock_in(
    uow: AttendanceUnitOfWork,
    user_id: UUID,
    *,
    clock: Clock,
    tz: ZoneInfo,
    long_break: timedelta = DEFAULT_LONG_BREAK,
) -> ClockTransition:
    """Open a new session accounted to the business-local day of ``clock()``."""

    with uow:
        repositories = uow.repositories
        if repositories.sessions.get_open_for_user(user_id) is not None:
            raise AlreadyClockedInError(user_id)
        at = clock()
        session = AttendanceSession(
            user_id=user_id,
            session_date=local_day(at, tz),
            clock_in_at=at,
        )
        repositories.sessions.add_open(session)
        transition = _finish(repositories, session, at=at, long_break=long_break)
        uow.commit()

    log.info("User %s clocked in (session %s)", user_id, session.id)
    return transition


def start_break(
    uow: AttendanceUnitOfWork,
    user_id: UUID,
    *,
    clock: Clock,
    long_break: timedelta = DEFAULT_LONG_BREAK,
) -> ClockTransition:
    with uow:
        repositories = uow.repositories
        session = _require_open(repositories, user_id)
        at = clock()
        session.start_break(at=at)
        repositories.sessions.flush_breaks(session)
        transition = _finish(repositories, session, at=at, long_break=long_break)
        uow.commit()

    log.info("User %s started a break (session %s)", user_id, session.id)
    return transition


def end_break(
    uow: AttendanceUnitOfWork,
    user_id: UUID,
    *,
    clock: Clock,
    long_break: timedelta = DEFAULT_LONG_BREAK,
) -> ClockTransition:
    with uow:
        repositories = uow.repositories
        session = _require_open(repositories, user_id)
        at = clock()
        session.end_break(at=at)
        repositories.sessions.flush_breaks(session)
        transition = _finish(repositories, session, at=at, long_break=long_break)
        uow.commit()

    log.info("User %s ended a break (session %s)", user_id, session.id)
    return transition


def clock_out(
    uow: AttendanceUnitOfWork,
    user_id: UUID,
    *,
    clock: Clock,
    long_break: timedelta = DEFAULT_LONG_BREAK,
) -> ClockTransition:
    """Close the open session; a running break ends at the clock-out instant."""

    with uow:
        repositories = uow.repositories
        session = _require_open(repositories, user_id)
        at = clock()
        session.close(at=at)
        transition = _finish(repositories, session, at=at, long_break=long_break)
        uow.commit()

    log.info("User %s clocked out (session %s)", user_id, session.id)
    return transition

"""Attendance sessions, breaks and the per-day summary derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from agencyops.domain.errors import BreakAlreadyActiveError, NoActiveBreakError
from agencyops.domain.model.entity import Entity
from agencyops.domain.model.enums import SessionStatus

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class AttendanceBreak(Entity):
    started_at: datetime
    ended_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    def duration(self, now: datetime) -> timedelta:
        return (self.ended_at or now) - self.started_at


@dataclass(eq=False, kw_only=True)
class AttendanceSession(Entity):
    """One continuous work period for a user.

    ``session_date`` is the business-local calendar day of the clock-in, which is
    the day the session is accounted to even when it runs past midnight.
    """

    user_id: UUID
    session_date: date
    clock_in_at: datetime
    clock_out_at: datetime | None = None
    status: SessionStatus = SessionStatus.OPEN
    breaks: list[AttendanceBreak] = field(default_factory=list[AttendanceBreak])

    @property
    def is_open(self) -> bool:
        return self.status is SessionStatus.OPEN

    @property
    def active_break(self) -> AttendanceBreak | None:
        for brk in self.breaks:
            if brk.is_open:
                return brk
        return None

    def duration(self, now: datetime) -> timedelta:
        return (self.clock_out_at or now) - self.clock_in_at

    def start_break(self, *, at: datetime) -> AttendanceBreak:
        if self.active_break is not None:
            raise BreakAlreadyActiveError(self.id)
        brk = AttendanceBreak(started_at=at)
        self.breaks.append(brk)
        return brk

    def end_break(self, *, at: datetime) -> AttendanceBreak:
        brk = self.active_break
        if brk is None:
            raise NoActiveBreakError(self.id)
        brk.ended_at = at
        return brk

    def close(self, *, at: datetime, status: SessionStatus = SessionStatus.CLOSED) -> None:
        """End the session; any break still running ends at the same instant."""

        for brk in self.breaks:
            if brk.is_open:
                brk.ended_at = at
        self.clock_out_at = at
        self.status = status


@dataclass(eq=False, kw_only=True)
class DailySummary:
    """Materialised per-(user, day) totals. Always recomputed, never edited."""

    user_id: UUID
    day: date
    gross_minutes: int = 0
    break_minutes: int = 0
    net_minutes: int = 0
    sessions_count: int = 0
    is_complete: bool = True
    flags: list[str] = field(default_factory=list[str])

    def values(self) -> tuple[object, ...]:
        return (
            self.user_id,
            self.day,
            self.gross_minutes,
            self.break_minutes,
            self.net_minutes,
            self.sessions_count,
            self.is_complete,
            tuple(self.flags),
        )

    def overwrite_with(self, other: DailySummary) -> None:
        self.gross_minutes = other.gross_minutes
        self.break_minutes = other.break_minutes
        self.net_minutes = other.net_minutes
        self.sessions_count = other.sessions_count
        self.is_complete = other.is_complete
        self.flags = list(other.flags)

    def to_payload(self) -> dict[str, object]:
        return {
            "user_id": str(self.user_id),
            "day": self.day.isoformat(),
            "gross_minutes": self.gross_minutes,
            "break_minutes": self.break_minutes,
            "net_minutes": self.net_minutes,
            "sessions_count": self.sessions_count,
            "is_complete": self.is_complete,
            "flags": list(self.flags),
        }

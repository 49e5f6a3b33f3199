"""Per-user work-hours totals over a range of stored daily summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agencyops.domain.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date
    from uuid import UUID

    from agencyops.domain.model import DailySummary
    from agencyops.domain.ports import AttendanceUnitOfWork


@dataclass(slots=True)
class UserWorkHours:
    user_id: UUID
    net_minutes: int = 0
    days_present: int = 0
    sessions: int = 0

    @property
    def total_hours(self) -> float:
        return round(self.net_minutes / 60, 2)

    @property
    def avg_daily_hours(self) -> float:
        if not self.days_present:
            return 0.0
        return round(self.net_minutes / 60 / self.days_present, 2)

    def to_payload(self) -> dict[str, object]:
        return {
            "user_id": str(self.user_id),
            "total_hours": self.total_hours,
            "days_present": self.days_present,
            "sessions": self.sessions,
            "avg_daily_hours": self.avg_daily_hours,
        }


@dataclass(slots=True)
class WorkHoursReport:
    start: date
    end: date
    users: list[UserWorkHours] = field(default_factory=list[UserWorkHours])

    def for_user(self, user_id: UUID) -> UserWorkHours | None:
        return next((row for row in self.users if row.user_id == user_id), None)

    def to_payload(self) -> dict[str, object]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "users": [row.to_payload() for row in self.users],
        }


def summarize_work_hours(
    summaries: Iterable[DailySummary],
    *,
    start: date,
    end: date,
) -> WorkHoursReport:
    """Fold daily summaries into per-user rows, ordered by total time descending.

    A day counts as present when it has at least one session.
    """

    by_user: dict[UUID, UserWorkHours] = {}
    for summary in summaries:
        row = by_user.setdefault(summary.user_id, UserWorkHours(user_id=summary.user_id))
        row.net_minutes += summary.net_minutes
        row.sessions += summary.sessions_count
        if summary.sessions_count > 0:
            row.days_present += 1
    rows = sorted(by_user.values(), key=lambda row: (-row.net_minutes, str(row.user_id)))
    return WorkHoursReport(start=start, end=end, users=rows)


def work_hours_report(uow: AttendanceUnitOfWork, start: date, end: date) -> WorkHoursReport:
    if start > end:
        raise ValidationError(f"Report start {start} is after end {end}")
    with uow:
        summaries = uow.repositories.summaries.list_between(start, end)
        return summarize_work_hours(summaries, start=start, end=end)

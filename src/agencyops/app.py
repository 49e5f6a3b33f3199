"""Application orchestration entry points.

Each function wires configuration, the clock and a unit-of-work factory into a
domain operation. Store failures surface as :class:`StoreUnavailableError`.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from agencyops.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAttendanceUnitOfWork,
    SqlAlchemyDedupUnitOfWork,
    is_started,
    startup,
)
from agencyops.config import ConfigurationError, get_attendance_config, get_dedup_config
from agencyops.domain import attendance, dedup, leads
from agencyops.domain.days import parse_day, period_range, utc_clock
from agencyops.domain.errors import StoreUnavailableError, ValidationError
from agencyops.domain.model import EntityType
from agencyops.domain.ports.unit_of_work import AttendanceUnitOfWork, DedupUnitOfWork

if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID

    from agencyops.domain.attendance import ClockTransition, WorkHoursReport
    from agencyops.domain.days import Clock, ReportPeriod
    from agencyops.domain.dedup import MergeRequest, ScanResult
    from agencyops.domain.model import (
        AttendanceSession,
        DailySummary,
        DuplicateCandidate,
        Lead,
        LeadMerge,
        LeadOutcome,
    )

type DedupUnitOfWorkFactory = Callable[[], DedupUnitOfWork]
type AttendanceUnitOfWorkFactory = Callable[[], AttendanceUnitOfWork]

log = getLogger(__name__)


def _store_errors[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as exc:
            log.error("Store error in %s: %s", func.__name__, exc)
            raise StoreUnavailableError(f"Data store unavailable: {exc}") from exc

    return wrapper


def _dedup_factory(factory: DedupUnitOfWorkFactory | None) -> DedupUnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyDedupUnitOfWork


def _attendance_factory(
    factory: AttendanceUnitOfWorkFactory | None,
) -> AttendanceUnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyAttendanceUnitOfWork


# Leads -----------------------------------------------------------------------


@_store_errors
def create_lead(  # noqa: PLR0913
    *,
    company_name: str,
    contact_name: str | None = None,
    phone: str | None = None,
    email: str | None = None,
    website: str | None = None,
    city: str | None = None,
    notes: str | None = None,
    unit_of_work_factory: DedupUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> Lead:
    factory = _dedup_factory(unit_of_work_factory)
    return leads.register_lead(
        factory(),
        company_name=company_name,
        contact_name=contact_name,
        phone=phone,
        email=email,
        website=website,
        city=city,
        notes=notes,
        clock=clock,
    )


@_store_errors
def record_lead_outcome(
    lead_id: UUID,
    outcome: str,
    *,
    notes: str | None = None,
    created_by: str | None = None,
    unit_of_work_factory: DedupUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> LeadOutcome:
    factory = _dedup_factory(unit_of_work_factory)
    return leads.record_outcome(
        factory,
        lead_id,
        outcome,
        clock=clock,
        notes=notes,
        created_by=created_by,
    )


@_store_errors
def resolve_lead(
    lead_id: UUID,
    *,
    unit_of_work_factory: DedupUnitOfWorkFactory | None = None,
) -> Lead:
    factory = _dedup_factory(unit_of_work_factory)
    return dedup.resolve_lead_id(factory(), lead_id)


# Duplicates ------------------------------------------------------------------


@_store_errors
def scan_duplicates(
    entity_type: EntityType | str = EntityType.LEAD,
    *,
    batch_size: int | None = None,
    offset: int = 0,
    unit_of_work_factory: DedupUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> ScanResult:
    """Run one bounded duplicate scan and persist new candidates."""

    factory = _dedup_factory(unit_of_work_factory)
    effective_batch = batch_size or get_dedup_config().scan_batch_size
    log.info(
        "Starting duplicate scan: entity_type=%s, batch_size=%s, offset=%s",
        entity_type,
        effective_batch,
        offset,
    )
    return dedup.scan_for_duplicates(
        factory(),
        entity_type,
        clock=clock,
        batch_size=effective_batch,
        offset=offset,
    )


@_store_errors
def list_duplicate_candidates(
    *,
    limit: int = 100,
    unit_of_work_factory: DedupUnitOfWorkFactory | None = None,
) -> list[DuplicateCandidate]:
    factory = _dedup_factory(unit_of_work_factory)
    return dedup.list_open_candidates(factory(), limit=limit)


@_store_errors
def dismiss_duplicate(
    candidate_id: UUID,
    *,
    actor_id: str | None = None,
    unit_of_work_factory: DedupUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> DuplicateCandidate:
    factory = _dedup_factory(unit_of_work_factory)
    return dedup.dismiss_candidate(factory(), candidate_id, clock=clock, actor_id=actor_id)


@_store_errors
def merge_records(
    request: MergeRequest,
    *,
    unit_of_work_factory: DedupUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> LeadMerge:
    factory = _dedup_factory(unit_of_work_factory)
    return dedup.merge_leads(
        factory(),
        request,
        clock=clock,
        undo_window=get_dedup_config().undo_window,
    )


@_store_errors
def undo_merge(
    merge_id: UUID,
    *,
    actor_id: str | None = None,
    unit_of_work_factory: DedupUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> LeadMerge:
    factory = _dedup_factory(unit_of_work_factory)
    return dedup.undo_merge(factory(), merge_id, clock=clock, actor_id=actor_id)


# Attendance ------------------------------------------------------------------


@_store_errors
def clock_in(
    user_id: UUID,
    *,
    unit_of_work_factory: AttendanceUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> ClockTransition:
    factory = _attendance_factory(unit_of_work_factory)
    config = get_attendance_config()
    return attendance.clock_in(
        factory(),
        user_id,
        clock=clock,
        tz=config.timezone,
        long_break=config.long_break,
    )


@_store_errors
def clock_out(
    user_id: UUID,
    *,
    unit_of_work_factory: AttendanceUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> ClockTransition:
    factory = _attendance_factory(unit_of_work_factory)
    long_break = get_attendance_config().long_break
    return attendance.clock_out(factory(), user_id, clock=clock, long_break=long_break)


@_store_errors
def start_break(
    user_id: UUID,
    *,
    unit_of_work_factory: AttendanceUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> ClockTransition:
    factory = _attendance_factory(unit_of_work_factory)
    long_break = get_attendance_config().long_break
    return attendance.start_break(factory(), user_id, clock=clock, long_break=long_break)


@_store_errors
def end_break(
    user_id: UUID,
    *,
    unit_of_work_factory: AttendanceUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> ClockTransition:
    factory = _attendance_factory(unit_of_work_factory)
    long_break = get_attendance_config().long_break
    return attendance.end_break(factory(), user_id, clock=clock, long_break=long_break)


@_store_errors
def recompute_day(
    user_id: UUID,
    day: date | str,
    *,
    unit_of_work_factory: AttendanceUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> DailySummary:
    factory = _attendance_factory(unit_of_work_factory)
    resolved_day = parse_day(day) if isinstance(day, str) else day
    return attendance.refresh_daily_summary(
        factory(),
        user_id,
        resolved_day,
        clock=clock,
        long_break=get_attendance_config().long_break,
    )


@_store_errors
def sweep_stale_sessions(
    *,
    unit_of_work_factory: AttendanceUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> list[AttendanceSession]:
    factory = _attendance_factory(unit_of_work_factory)
    config = get_attendance_config()
    return attendance.flag_stale_sessions(
        factory(),
        clock=clock,
        max_open=config.stale_session_after,
        long_break=config.long_break,
    )


@_store_errors
def work_hours(  # noqa: PLR0913
    *,
    period: ReportPeriod | str | None = None,
    start: date | None = None,
    end: date | None = None,
    timezone: str | None = None,
    unit_of_work_factory: AttendanceUnitOfWorkFactory | None = None,
    clock: Clock = utc_clock,
) -> WorkHoursReport:
    """Per-user totals for an explicit day range, or a named period in ``timezone``."""

    factory = _attendance_factory(unit_of_work_factory)
    if start is not None and end is not None:
        if period is not None:
            raise ValidationError("Use either a period or a start/end range")
        return attendance.work_hours_report(factory(), start, end)
    if start is not None or end is not None:
        raise ValidationError("Report start and end must be given together")
    try:
        tz = get_attendance_config(timezone=timezone).timezone
    except ConfigurationError as exc:
        raise ValidationError(str(exc)) from exc
    range_start, range_end = period_range(period or "today", clock=clock, tz=tz)
    return attendance.work_hours_report(factory(), range_start, range_end)

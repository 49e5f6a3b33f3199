"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import Insert, and_, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError

from agencyops.adapters.sqlalchemy.mappings import (
    CANDIDATE_CONFLICT_COLUMNS,
    activity_event_table,
    attendance_session_table,
    audit_log_table,
    daily_summary_table,
    duplicate_candidate_table,
    lead_outcome_table,
    lead_table,
)
from agencyops.domain.errors import AlreadyClockedInError, BreakAlreadyActiveError
from agencyops.domain.model import (
    ActivityEvent,
    AttendanceSession,
    AuditLogEntry,
    CandidateStatus,
    DailySummary,
    DuplicateCandidate,
    Lead,
    LeadMerge,
    LeadOutcome,
    LeadRedirect,
    SessionStatus,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import date, datetime
    from uuid import UUID

    from sqlalchemy import ColumnElement
    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from agencyops.domain.model import EntityType


class SqlAlchemyLeadRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Lead) -> None:
        self.session.add(entity)

    def get(self, lead_id: UUID) -> Lead | None:
        return self.session.get(Lead, lead_id)

    def get_active(self, lead_id: UUID) -> Lead | None:
        stmt = (
            select(Lead)
            .where(lead_table.c.id == lead_id)
            .where(lead_table.c._merged_into.is_(None))  # noqa: SLF001
            .with_for_update()
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_active(self, *, limit: int, offset: int = 0) -> Sequence[Lead]:
        stmt = (
            select(Lead)
            .where(lead_table.c._merged_into.is_(None))  # noqa: SLF001
            .order_by(lead_table.c.created_at, lead_table.c.id)
            .limit(limit)
            .offset(offset)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyLeadOutcomeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LeadOutcome) -> None:
        self.session.add(entity)

    def ids_for_lead(self, lead_id: UUID) -> list[UUID]:
        stmt = (
            select(lead_outcome_table.c.id)
            .where(lead_outcome_table.c.lead_id == lead_id)
            .order_by(lead_outcome_table.c.created_at, lead_outcome_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def list_for_lead(self, lead_id: UUID) -> Sequence[LeadOutcome]:
        stmt = (
            select(LeadOutcome)
            .where(lead_outcome_table.c.lead_id == lead_id)
            .order_by(lead_outcome_table.c.created_at, lead_outcome_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def move(self, ids: Collection[UUID], *, from_lead_id: UUID, to_lead_id: UUID) -> int:
        if not ids:
            return 0
        stmt = (
            update(LeadOutcome)
            .where(lead_outcome_table.c.id.in_(list(ids)))
            .where(lead_outcome_table.c.lead_id == from_lead_id)
            .values(lead_id=to_lead_id)
            .execution_options(synchronize_session=False)
        )
        result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount


class SqlAlchemyActivityEventRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ActivityEvent) -> None:
        self.session.add(entity)

    def ids_for_entity(self, entity_type: EntityType, entity_id: UUID) -> list[UUID]:
        stmt = (
            select(activity_event_table.c.id)
            .where(activity_event_table.c.entity_type == entity_type)
            .where(activity_event_table.c.entity_id == entity_id)
            .order_by(activity_event_table.c.created_at, activity_event_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def list_for_entity(self, entity_type: EntityType, entity_id: UUID) -> Sequence[ActivityEvent]:
        stmt = (
            select(ActivityEvent)
            .where(activity_event_table.c.entity_type == entity_type)
            .where(activity_event_table.c.entity_id == entity_id)
            .order_by(activity_event_table.c.created_at, activity_event_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def move(
        self,
        ids: Collection[UUID],
        *,
        entity_type: EntityType,
        from_id: UUID,
        to_id: UUID,
    ) -> int:
        if not ids:
            return 0
        stmt = (
            update(ActivityEvent)
            .where(activity_event_table.c.id.in_(list(ids)))
            .where(activity_event_table.c.entity_type == entity_type)
            .where(activity_event_table.c.entity_id == from_id)
            .values(entity_id=to_id)
            .execution_options(synchronize_session=False)
        )
        result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount


class SqlAlchemyAuditLogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AuditLogEntry) -> None:
        self.session.add(entity)

    def list_for_entity(self, entity_type: EntityType, entity_id: UUID) -> Sequence[AuditLogEntry]:
        stmt = (
            select(AuditLogEntry)
            .where(audit_log_table.c.entity_type == entity_type)
            .where(audit_log_table.c.entity_id == entity_id)
            .order_by(audit_log_table.c.created_at, audit_log_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyDuplicateCandidateRepository:
    """Candidates keyed by ``(entity type, primary, duplicate, match type)``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add_if_absent(self, candidate: DuplicateCandidate) -> bool:
        values = {
            "id": candidate.id,
            "entity_type": candidate.entity_type,
            "primary_id": candidate.primary_id,
            "duplicate_id": candidate.duplicate_id,
            "match_type": candidate.match_type,
            "confidence": candidate.confidence,
            "reason": dict(candidate.reason),
            "status": candidate.status,
            "created_at": candidate.created_at,
            "resolved_at": candidate.resolved_at,
        }
        stmt = self._insert_ignoring_conflicts().values(values)
        result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount > 0

    def _insert_ignoring_conflicts(self) -> Insert:
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert(duplicate_candidate_table).on_conflict_do_nothing(
                index_elements=list(CANDIDATE_CONFLICT_COLUMNS)
            )
        if dialect == "postgresql":
            return postgresql.insert(duplicate_candidate_table).on_conflict_do_nothing(
                index_elements=list(CANDIDATE_CONFLICT_COLUMNS)
            )
        raise NotImplementedError(f"Insert-or-ignore is not supported on {dialect}")

    def get(self, candidate_id: UUID) -> DuplicateCandidate | None:
        return self.session.get(DuplicateCandidate, candidate_id)

    def list_open(self, entity_type: EntityType, *, limit: int) -> Sequence[DuplicateCandidate]:
        stmt = (
            select(DuplicateCandidate)
            .where(duplicate_candidate_table.c.entity_type == entity_type)
            .where(duplicate_candidate_table.c.status == CandidateStatus.OPEN)
            .order_by(
                duplicate_candidate_table.c.confidence.desc(),
                duplicate_candidate_table.c.created_at,
                duplicate_candidate_table.c.id,
            )
            .limit(limit)
        )
        return self.session.execute(stmt).scalars().all()

    def list_involving(self, entity_id: UUID) -> Sequence[DuplicateCandidate]:
        stmt = (
            select(DuplicateCandidate)
            .where(self._involves(entity_id))
            .order_by(duplicate_candidate_table.c.created_at, duplicate_candidate_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def close_open_involving(self, entity_id: UUID, *, at: datetime) -> int:
        stmt = (
            update(DuplicateCandidate)
            .where(
                and_(
                    self._involves(entity_id),
                    duplicate_candidate_table.c.status == CandidateStatus.OPEN,
                )
            )
            .values(status=CandidateStatus.MERGED, resolved_at=at)
            .execution_options(synchronize_session=False)
        )
        result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount

    @staticmethod
    def _involves(entity_id: UUID) -> ColumnElement[bool]:
        return or_(
            duplicate_candidate_table.c.primary_id == entity_id,
            duplicate_candidate_table.c.duplicate_id == entity_id,
        )


class SqlAlchemyLeadMergeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LeadMerge) -> None:
        self.session.add(entity)

    def get(self, merge_id: UUID) -> LeadMerge | None:
        return self.session.get(LeadMerge, merge_id)


class SqlAlchemyLeadRedirectRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LeadRedirect) -> None:
        self.session.add(entity)

    def get(self, merged_id: UUID) -> LeadRedirect | None:
        return self.session.get(LeadRedirect, merged_id)

    def remove(self, merged_id: UUID) -> None:
        redirect = self.get(merged_id)
        if redirect is not None:
            self.session.delete(redirect)


class SqlAlchemyAttendanceSessionRepository:
    """Attendance sessions; uniqueness violations surface as domain conflicts."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add_open(self, session: AttendanceSession) -> None:
        self.session.add(session)
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise AlreadyClockedInError(session.user_id) from exc

    def flush_breaks(self, session: AttendanceSession) -> None:
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise BreakAlreadyActiveError(session.id) from exc

    def get_open_for_user(self, user_id: UUID) -> AttendanceSession | None:
        stmt = (
            select(AttendanceSession)
            .where(attendance_session_table.c.user_id == user_id)
            .where(attendance_session_table.c.status == SessionStatus.OPEN)
            .with_for_update()
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_day(self, user_id: UUID, day: date) -> Sequence[AttendanceSession]:
        stmt = (
            select(AttendanceSession)
            .where(attendance_session_table.c.user_id == user_id)
            .where(attendance_session_table.c.session_date == day)
            .order_by(attendance_session_table.c.clock_in_at)
        )
        return self.session.execute(stmt).scalars().all()

    def list_open_started_before(self, cutoff: datetime) -> Sequence[AttendanceSession]:
        stmt = (
            select(AttendanceSession)
            .where(attendance_session_table.c.status == SessionStatus.OPEN)
            .where(attendance_session_table.c.clock_in_at < cutoff)
            .order_by(attendance_session_table.c.clock_in_at)
        )
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyDailySummaryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: UUID, day: date) -> DailySummary | None:
        return self.session.get(DailySummary, (user_id, day))

    def upsert(self, summary: DailySummary) -> DailySummary:
        existing = self.get(summary.user_id, summary.day)
        if existing is None:
            self.session.add(summary)
            return summary
        existing.overwrite_with(summary)
        return existing

    def list_between(self, start: date, end: date) -> Sequence[DailySummary]:
        stmt = (
            select(DailySummary)
            .where(daily_summary_table.c.day >= start)
            .where(daily_summary_table.c.day <= end)
            .order_by(daily_summary_table.c.day, daily_summary_table.c.user_id)
        )
        return self.session.execute(stmt).scalars().all()


if TYPE_CHECKING:
    from agencyops.domain.ports.persistence import (
        ActivityEventRepository,
        AttendanceSessionRepository,
        AuditLogRepository,
        DailySummaryRepository,
        DuplicateCandidateRepository,
        LeadMergeRepository,
        LeadOutcomeRepository,
        LeadRedirectRepository,
        LeadRepository,
    )

    _session_stub = cast("Session", object())
    _lead_repo: LeadRepository = SqlAlchemyLeadRepository(_session_stub)
    _outcome_repo: LeadOutcomeRepository = SqlAlchemyLeadOutcomeRepository(_session_stub)
    _activity_repo: ActivityEventRepository = SqlAlchemyActivityEventRepository(_session_stub)
    _audit_repo: AuditLogRepository = SqlAlchemyAuditLogRepository(_session_stub)
    _candidate_repo: DuplicateCandidateRepository = SqlAlchemyDuplicateCandidateRepository(
        _session_stub
    )
    _merge_repo: LeadMergeRepository = SqlAlchemyLeadMergeRepository(_session_stub)
    _redirect_repo: LeadRedirectRepository = SqlAlchemyLeadRedirectRepository(_session_stub)
    _session_repo: AttendanceSessionRepository = SqlAlchemyAttendanceSessionRepository(
        _session_stub
    )
    _summary_repo: DailySummaryRepository = SqlAlchemyDailySummaryRepository(_session_stub)

"""SQLAlchemy mapping metadata for the agencyops domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from functools import cache

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
    text,
)
from sqlalchemy.orm import configure_mappers, relationship

from agencyops.domain.model import (
    ActivityEvent,
    AttendanceBreak,
    AttendanceSession,
    AuditLogEntry,
    CandidateStatus,
    DailySummary,
    DuplicateCandidate,
    EntityType,
    Lead,
    LeadMerge,
    LeadOutcome,
    LeadRedirect,
    MatchType,
    SessionStatus,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _string_enum[TEnum: StrEnum](enum_cls: type[TEnum]) -> Enum:
    """Store enum *values*; partial index predicates below compare against them."""

    return Enum(
        enum_cls,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )


OPEN_SESSION_PREDICATE = text("status = 'open'")
OPEN_BREAK_PREDICATE = text("ended_at IS NULL")

mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Leads -----------------------------------------------------------------------

lead_table = Table(
    "lead",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("company_name", String, nullable=False),
    Column("contact_name", String, nullable=True),
    Column("phone", String, nullable=True),
    Column("email", String, nullable=True),
    Column("website", String, nullable=True),
    Column("city", String, nullable=True),
    Column("status", String, nullable=False, default="active"),
    Column("notes", Text, nullable=True),
    Column("merged_into", UUIDColumnType, key="_merged_into", nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    Index("ix_lead_created_at", "created_at", "id"),
    Index("ix_lead_merged_into", "_merged_into"),
)

lead_outcome_table = Table(
    "lead_outcome",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("lead_id", UUIDColumnType, ForeignKey("lead.id"), nullable=False),
    Column("outcome", String, nullable=False),
    Column("notes", Text, nullable=True),
    Column("created_by", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_lead_outcome_lead_id", "lead_id"),
)

# Dedup -----------------------------------------------------------------------

duplicate_candidate_table = Table(
    "duplicate_candidate",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("entity_type", _string_enum(EntityType), nullable=False),
    Column("primary_id", UUIDColumnType, nullable=False),
    Column("duplicate_id", UUIDColumnType, nullable=False),
    Column("match_type", _string_enum(MatchType), nullable=False),
    Column("confidence", Integer, nullable=False),
    Column("reason", JSON, nullable=False, default=dict),
    Column("status", _string_enum(CandidateStatus), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("resolved_at", UTCDateTime(), nullable=True),
    UniqueConstraint(
        "entity_type",
        "primary_id",
        "duplicate_id",
        "match_type",
        name="uq_duplicate_candidate_pair",
    ),
    Index("ix_duplicate_candidate_status", "entity_type", "status"),
    Index("ix_duplicate_candidate_duplicate_id", "duplicate_id"),
)

CANDIDATE_CONFLICT_COLUMNS = ("entity_type", "primary_id", "duplicate_id", "match_type")

lead_merge_table = Table(
    "lead_merge",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("entity_type", _string_enum(EntityType), nullable=False),
    Column("survivor_id", UUIDColumnType, ForeignKey("lead.id"), nullable=False),
    Column("merged_id", UUIDColumnType, ForeignKey("lead.id"), nullable=False),
    Column("merged_by", String, nullable=True),
    Column("strategy", JSON, nullable=False, default=dict),
    Column("moved_outcome_ids", JSON, nullable=False, default=list),
    Column("moved_activity_ids", JSON, nullable=False, default=list),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("undo_until", UTCDateTime(), nullable=False),
    Column("is_undone", Boolean, nullable=False, default=False),
    Column("undone_at", UTCDateTime(), nullable=True),
    Index("ix_lead_merge_merged_id", "merged_id"),
)

lead_redirect_table = Table(
    "lead_redirect",
    mapper_registry.metadata,
    Column("merged_id", UUIDColumnType, ForeignKey("lead.id"), primary_key=True),
    Column("survivor_id", UUIDColumnType, ForeignKey("lead.id"), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
)

# Audit -----------------------------------------------------------------------

activity_event_table = Table(
    "activity_event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("entity_type", _string_enum(EntityType), nullable=False),
    Column("entity_id", UUIDColumnType, nullable=False),
    Column("event_type", String, nullable=False),
    Column("title", String, nullable=False),
    Column("body", Text, nullable=True),
    Column("metadata", JSON, key="details", nullable=False, default=dict),
    Column("created_by", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_activity_event_entity", "entity_type", "entity_id"),
)

audit_log_table = Table(
    "audit_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("entity_type", _string_enum(EntityType), nullable=False),
    Column("entity_id", UUIDColumnType, nullable=False),
    Column("action", String, nullable=False),
    Column("actor_id", String, nullable=True),
    Column("before_data", JSON, nullable=True),
    Column("after_data", JSON, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_audit_log_entity", "entity_type", "entity_id"),
)

# Attendance ------------------------------------------------------------------

attendance_session_table = Table(
    "attendance_session",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("user_id", UUIDColumnType, nullable=False),
    Column("session_date", Date, nullable=False),
    Column("clock_in_at", UTCDateTime(), nullable=False),
    Column("clock_out_at", UTCDateTime(), nullable=True),
    Column("status", _string_enum(SessionStatus), nullable=False),
    Index("ix_attendance_session_user_day", "user_id", "session_date"),
    Index(
        "uq_attendance_session_one_open_per_user",
        "user_id",
        unique=True,
        sqlite_where=OPEN_SESSION_PREDICATE,
        postgresql_where=OPEN_SESSION_PREDICATE,
    ),
)

attendance_break_table = Table(
    "attendance_break",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "session_id",
        UUIDColumnType,
        ForeignKey("attendance_session.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("started_at", UTCDateTime(), nullable=False),
    Column("ended_at", UTCDateTime(), nullable=True),
    Index(
        "uq_attendance_break_one_open_per_session",
        "session_id",
        unique=True,
        sqlite_where=OPEN_BREAK_PREDICATE,
        postgresql_where=OPEN_BREAK_PREDICATE,
    ),
)

daily_summary_table = Table(
    "daily_summary",
    mapper_registry.metadata,
    Column("user_id", UUIDColumnType, primary_key=True),
    Column("day", Date, primary_key=True),
    Column("gross_minutes", Integer, nullable=False, default=0),
    Column("break_minutes", Integer, nullable=False, default=0),
    Column("net_minutes", Integer, nullable=False, default=0),
    Column("sessions_count", Integer, nullable=False, default=0),
    Column("is_complete", Boolean, nullable=False, default=True),
    Column("flags", JSON, nullable=False, default=list),
    Index("ix_daily_summary_day", "day"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Lead, lead_table)
    mapper_registry.map_imperatively(LeadOutcome, lead_outcome_table)
    mapper_registry.map_imperatively(DuplicateCandidate, duplicate_candidate_table)
    mapper_registry.map_imperatively(LeadMerge, lead_merge_table)
    mapper_registry.map_imperatively(LeadRedirect, lead_redirect_table)
    mapper_registry.map_imperatively(ActivityEvent, activity_event_table)
    mapper_registry.map_imperatively(AuditLogEntry, audit_log_table)

    mapper_registry.map_imperatively(
        AttendanceSession,
        attendance_session_table,
        properties={
            "breaks": relationship(
                AttendanceBreak,
                cascade="all, delete-orphan",
                order_by=attendance_break_table.c.started_at,
                lazy="selectin",
            ),
        },
    )
    mapper_registry.map_imperatively(AttendanceBreak, attendance_break_table)
    mapper_registry.map_imperatively(DailySummary, daily_summary_table)

    configure_mappers()
    return mapper_registry

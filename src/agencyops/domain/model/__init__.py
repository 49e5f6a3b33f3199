"""Public domain model surface."""

from __future__ import annotations

from agencyops.domain.model.attendance import AttendanceBreak, AttendanceSession, DailySummary
from agencyops.domain.model.audit import ActivityEvent, AuditLogEntry, JsonObject
from agencyops.domain.model.dedup import (
    DuplicateCandidate,
    LeadMerge,
    LeadRedirect,
    canonical_pair,
)
from agencyops.domain.model.entity import Entity, new_id, utcnow
from agencyops.domain.model.enums import (
    ActivityEventType,
    AuditAction,
    CandidateStatus,
    ClockState,
    EntityType,
    LeadField,
    MatchType,
    SessionStatus,
    SummaryFlag,
)
from agencyops.domain.model.lead import Active, Lead, LeadOutcome, LeadState, MergedInto

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    "utcnow",
    # leads
    "Lead",
    "LeadOutcome",
    "LeadState",
    "Active",
    "MergedInto",
    # dedup
    "DuplicateCandidate",
    "LeadMerge",
    "LeadRedirect",
    "canonical_pair",
    # audit
    "ActivityEvent",
    "AuditLogEntry",
    "JsonObject",
    # attendance
    "AttendanceSession",
    "AttendanceBreak",
    "DailySummary",
    # enums
    "ActivityEventType",
    "AuditAction",
    "CandidateStatus",
    "ClockState",
    "EntityType",
    "LeadField",
    "MatchType",
    "SessionStatus",
    "SummaryFlag",
]

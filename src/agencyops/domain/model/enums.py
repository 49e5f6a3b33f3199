"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Discriminator for records that participate in dedup and the audit trail."""

    LEAD = "lead"


class MatchType(StrEnum):
    PHONE = "phone"
    EMAIL = "email"
    NAME_CITY = "name_city"


class CandidateStatus(StrEnum):
    OPEN = "open"
    MERGED = "merged"
    DISMISSED = "dismissed"


class LeadField(StrEnum):
    """Lead attributes a merge may overwrite on the survivor.

    The identifier and the merge state are deliberately absent.
    """

    COMPANY_NAME = "company_name"
    CONTACT_NAME = "contact_name"
    PHONE = "phone"
    EMAIL = "email"
    WEBSITE = "website"
    CITY = "city"
    STATUS = "status"
    NOTES = "notes"


class ActivityEventType(StrEnum):
    LEAD_MERGED_IN = "lead_merged_in"
    LEAD_MERGED_OUT = "lead_merged_out"
    MERGE_UNDONE = "merge_undone"
    CANDIDATE_DISMISSED = "candidate_dismissed"


class AuditAction(StrEnum):
    MERGE = "MERGE"
    ARCHIVE_MERGE = "ARCHIVE_MERGE"
    MERGE_UNDONE = "MERGE_UNDONE"
    DISMISS_DUPLICATE = "DISMISS_DUPLICATE"


class SessionStatus(StrEnum):
    OPEN = "open"
    CLOSED = "closed"
    FLAGGED = "flagged"


class ClockState(StrEnum):
    OUT = "out"
    IN = "in"
    ON_BREAK = "on_break"


class SummaryFlag(StrEnum):
    OPEN_SESSION = "open_session"
    LONG_BREAK = "long_break"
    MISSED_CLOCKOUT = "missed_clockout"

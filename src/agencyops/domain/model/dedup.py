"""Duplicate candidates, merge records and redirects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

from agencyops.domain.errors import (
    AlreadyUndoneError,
    CandidateNotOpenError,
    UndoWindowExpiredError,
)
from agencyops.domain.model.entity import Entity, utcnow
from agencyops.domain.model.enums import CandidateStatus, EntityType, MatchType

if TYPE_CHECKING:
    from datetime import datetime


def canonical_pair(first: UUID, second: UUID) -> tuple[UUID, UUID]:
    """Order two ids so that (A, B) and (B, A) map to the same stored pair."""

    if first == second:
        raise ValueError("A record cannot be paired with itself")
    return (first, second) if str(first) < str(second) else (second, first)


@dataclass(eq=False, kw_only=True)
class DuplicateCandidate(Entity):
    """A possible duplicate pair awaiting review."""

    entity_type: EntityType
    primary_id: UUID
    duplicate_id: UUID
    match_type: MatchType
    confidence: int
    reason: dict[str, str] = field(default_factory=dict[str, str])
    status: CandidateStatus = CandidateStatus.OPEN
    created_at: datetime = field(default_factory=utcnow)
    resolved_at: datetime | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"Confidence must be within 0..100, got {self.confidence}")
        self.primary_id, self.duplicate_id = canonical_pair(self.primary_id, self.duplicate_id)

    @property
    def is_open(self) -> bool:
        return self.status is CandidateStatus.OPEN

    def involves(self, entity_id: UUID) -> bool:
        return entity_id in (self.primary_id, self.duplicate_id)

    def close_as_merged(self, *, at: datetime) -> None:
        self.status = CandidateStatus.MERGED
        self.resolved_at = at

    def dismiss(self, *, at: datetime) -> None:
        if not self.is_open:
            raise CandidateNotOpenError(self.id, self.status.value)
        self.status = CandidateStatus.DISMISSED
        self.resolved_at = at


@dataclass(eq=False, kw_only=True)
class LeadMerge(Entity):
    """Audit and undo record for one merge.

    ``moved_outcome_ids`` and ``moved_activity_ids`` list exactly the child rows the
    merge repointed, so an undo can move those rows back without touching history
    that was recorded on the survivor afterwards.
    """

    entity_type: EntityType = EntityType.LEAD
    survivor_id: UUID
    merged_id: UUID
    merged_by: str | None = None
    strategy: dict[str, object] = field(default_factory=dict[str, object])
    moved_outcome_ids: list[str] = field(default_factory=list[str])
    moved_activity_ids: list[str] = field(default_factory=list[str])
    created_at: datetime = field(default_factory=utcnow)
    undo_until: datetime
    is_undone: bool = False
    undone_at: datetime | None = None

    @property
    def outcome_ids(self) -> tuple[UUID, ...]:
        return tuple(UUID(value) for value in self.moved_outcome_ids)

    @property
    def activity_ids(self) -> tuple[UUID, ...]:
        return tuple(UUID(value) for value in self.moved_activity_ids)

    def ensure_undoable(self, now: datetime) -> None:
        if self.is_undone:
            raise AlreadyUndoneError(self.id)
        if now > self.undo_until:
            raise UndoWindowExpiredError(self.id, self.undo_until)

    def mark_undone(self, *, at: datetime) -> None:
        self.ensure_undoable(at)
        self.is_undone = True
        self.undone_at = at


@dataclass(eq=False, kw_only=True)
class LeadRedirect:
    """Points a ghost lead id at the survivor that absorbed it."""

    merged_id: UUID
    survivor_id: UUID
    created_at: datetime = field(default_factory=utcnow)

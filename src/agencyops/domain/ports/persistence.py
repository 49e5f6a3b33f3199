"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from agencyops.domain.model import (
    ActivityEvent,
    AttendanceSession,
    AuditLogEntry,
    DailySummary,
    DuplicateCandidate,
    Lead,
    LeadMerge,
    LeadOutcome,
    LeadRedirect,
)

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import date, datetime
    from uuid import UUID

    from agencyops.domain.model import EntityType


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class LeadRepository(Repository[Lead], Protocol):
    def get(self, lead_id: UUID) -> Lead | None: ...

    def get_active(self, lead_id: UUID) -> Lead | None:
        """Return the lead only if it exists and is not merged, locking it for update."""
        ...

    def list_active(self, *, limit: int, offset: int = 0) -> Sequence[Lead]: ...


@runtime_checkable
class LeadOutcomeRepository(Repository[LeadOutcome], Protocol):
    def ids_for_lead(self, lead_id: UUID) -> list[UUID]: ...

    def list_for_lead(self, lead_id: UUID) -> Sequence[LeadOutcome]: ...

    def move(self, ids: Collection[UUID], *, from_lead_id: UUID, to_lead_id: UUID) -> int:
        """Repoint the given rows still owned by ``from_lead_id``; return the count moved."""
        ...


@runtime_checkable
class ActivityEventRepository(Repository[ActivityEvent], Protocol):
    def ids_for_entity(self, entity_type: EntityType, entity_id: UUID) -> list[UUID]: ...

    def list_for_entity(
        self, entity_type: EntityType, entity_id: UUID
    ) -> Sequence[ActivityEvent]: ...

    def move(
        self,
        ids: Collection[UUID],
        *,
        entity_type: EntityType,
        from_id: UUID,
        to_id: UUID,
    ) -> int: ...


@runtime_checkable
class AuditLogRepository(Repository[AuditLogEntry], Protocol):
    def list_for_entity(
        self, entity_type: EntityType, entity_id: UUID
    ) -> Sequence[AuditLogEntry]: ...


@runtime_checkable
class DuplicateCandidateRepository(Protocol):
    def add_if_absent(self, candidate: DuplicateCandidate) -> bool:
        """Insert unless the (entity type, pair, match type) key exists; report insertion."""
        ...

    def get(self, candidate_id: UUID) -> DuplicateCandidate | None: ...

    def list_open(self, entity_type: EntityType, *, limit: int) -> Sequence[DuplicateCandidate]: ...

    def list_involving(self, entity_id: UUID) -> Sequence[DuplicateCandidate]: ...

    def close_open_involving(self, entity_id: UUID, *, at: datetime) -> int: ...


@runtime_checkable
class LeadMergeRepository(Repository[LeadMerge], Protocol):
    def get(self, merge_id: UUID) -> LeadMerge | None: ...


@runtime_checkable
class LeadRedirectRepository(Repository[LeadRedirect], Protocol):
    def get(self, merged_id: UUID) -> LeadRedirect | None: ...

    def remove(self, merged_id: UUID) -> None: ...


@runtime_checkable
class AttendanceSessionRepository(Protocol):
    def add_open(self, session: AttendanceSession) -> None:
        """Persist a freshly opened session; a second open session for the user conflicts."""
        ...

    def flush_breaks(self, session: AttendanceSession) -> None:
        """Write pending break changes; a second open break on the session conflicts."""
        ...

    def get_open_for_user(self, user_id: UUID) -> AttendanceSession | None: ...

    def list_for_day(self, user_id: UUID, day: date) -> Sequence[AttendanceSession]: ...

    def list_open_started_before(self, cutoff: datetime) -> Sequence[AttendanceSession]: ...


@runtime_checkable
class DailySummaryRepository(Protocol):
    def get(self, user_id: UUID, day: date) -> DailySummary | None: ...

    def upsert(self, summary: DailySummary) -> DailySummary: ...

    def list_between(self, start: date, end: date) -> Sequence[DailySummary]: ...

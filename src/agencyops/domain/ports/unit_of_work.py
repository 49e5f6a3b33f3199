"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

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


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class DedupRepositories(RepositoryCollection):
    """Repositories touched by duplicate scans, merges and undos."""

    leads: LeadRepository
    outcomes: LeadOutcomeRepository
    candidates: DuplicateCandidateRepository
    merges: LeadMergeRepository
    redirects: LeadRedirectRepository
    activities: ActivityEventRepository
    audit_logs: AuditLogRepository


@dataclass(slots=True)
class AttendanceRepositories(RepositoryCollection):
    """Repositories for clock transitions and daily summaries."""

    sessions: AttendanceSessionRepository
    summaries: DailySummaryRepository


type DedupUnitOfWork = UnitOfWork[DedupRepositories]
type AttendanceUnitOfWork = UnitOfWork[AttendanceRepositories]

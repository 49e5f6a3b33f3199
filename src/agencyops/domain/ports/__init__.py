"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    ActivityEventRepository,
    AttendanceSessionRepository,
    AuditLogRepository,
    DailySummaryRepository,
    DuplicateCandidateRepository,
    LeadMergeRepository,
    LeadOutcomeRepository,
    LeadRedirectRepository,
    LeadRepository,
    Repository,
)
from .unit_of_work import (
    AttendanceRepositories,
    AttendanceUnitOfWork,
    DedupRepositories,
    DedupUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ActivityEventRepository",
    "AttendanceRepositories",
    "AttendanceSessionRepository",
    "AttendanceUnitOfWork",
    "AuditLogRepository",
    "DailySummaryRepository",
    "DedupRepositories",
    "DedupUnitOfWork",
    "DuplicateCandidateRepository",
    "LeadMergeRepository",
    "LeadOutcomeRepository",
    "LeadRedirectRepository",
    "LeadRepository",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]

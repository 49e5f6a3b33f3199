"""SQLAlchemy adapter package for agencyops."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyActivityEventRepository,
    SqlAlchemyAttendanceSessionRepository,
    SqlAlchemyAuditLogRepository,
    SqlAlchemyDailySummaryRepository,
    SqlAlchemyDuplicateCandidateRepository,
    SqlAlchemyLeadMergeRepository,
    SqlAlchemyLeadOutcomeRepository,
    SqlAlchemyLeadRedirectRepository,
    SqlAlchemyLeadRepository,
)
from .unit_of_work import (
    SqlAlchemyAttendanceUnitOfWork,
    SqlAlchemyDedupUnitOfWork,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyActivityEventRepository",
    "SqlAlchemyAttendanceSessionRepository",
    "SqlAlchemyAttendanceUnitOfWork",
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyDailySummaryRepository",
    "SqlAlchemyDedupUnitOfWork",
    "SqlAlchemyDuplicateCandidateRepository",
    "SqlAlchemyLeadMergeRepository",
    "SqlAlchemyLeadOutcomeRepository",
    "SqlAlchemyLeadRedirectRepository",
    "SqlAlchemyLeadRepository",
    "mapper_registry",
    "shutdown",
    "startup",
]

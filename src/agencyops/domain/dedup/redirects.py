"""Redirect lookups and the duplicate review queue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agencyops.domain.audit_trail import record_full_action
from agencyops.domain.errors import CandidateNotFoundError, LeadNotFoundError
from agencyops.domain.model import ActivityEventType, AuditAction, EntityType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from agencyops.domain.days import Clock
    from agencyops.domain.model import DuplicateCandidate, Lead
    from agencyops.domain.ports import DedupUnitOfWork

log = logging.getLogger(__name__)


def resolve_lead_id(uow: DedupUnitOfWork, lead_id: UUID) -> Lead:
    """Follow redirects from ``lead_id`` to the lead that currently holds its history."""

    with uow:
        redirects = uow.repositories.redirects
        current = lead_id
        seen = {current}
        while (redirect := redirects.get(current)) is not None:
            current = redirect.survivor_id
            if current in seen:
                log.warning("Redirect cycle detected while resolving lead %s", lead_id)
                break
            seen.add(current)
        lead = uow.repositories.leads.get(current)
        if lead is None:
            raise LeadNotFoundError(lead_id)
        return lead


def list_open_candidates(
    uow: DedupUnitOfWork,
    *,
    entity_type: EntityType = EntityType.LEAD,
    limit: int = 100,
) -> list[DuplicateCandidate]:
    with uow:
        return list(uow.repositories.candidates.list_open(entity_type, limit=limit))


def candidates_for_lead(uow: DedupUnitOfWork, lead_id: UUID) -> Sequence[DuplicateCandidate]:
    with uow:
        return list(uow.repositories.candidates.list_involving(lead_id))


def dismiss_candidate(
    uow: DedupUnitOfWork,
    candidate_id: UUID,
    *,
    clock: Clock,
    actor_id: str | None = None,
) -> DuplicateCandidate:
    """Mark an open candidate as reviewed and not a duplicate."""

    with uow:
        repositories = uow.repositories
        candidate = repositories.candidates.get(candidate_id)
        if candidate is None:
            raise CandidateNotFoundError(candidate_id)
        at = clock()
        candidate.dismiss(at=at)
        record_full_action(
            activities=repositories.activities,
            audit_logs=repositories.audit_logs,
            entity_type=candidate.entity_type,
            entity_id=candidate.primary_id,
            event_type=ActivityEventType.CANDIDATE_DISMISSED,
            title="Duplicate dismissed",
            body=f"Not a duplicate of {candidate.duplicate_id}",
            action=AuditAction.DISMISS_DUPLICATE,
            at=at,
            actor_id=actor_id,
            details={
                "candidate_id": str(candidate.id),
                "duplicate_id": str(candidate.duplicate_id),
                "match_type": candidate.match_type.value,
            },
        )
        uow.commit()

    log.info("Dismissed duplicate candidate %s", candidate_id)
    return candidate

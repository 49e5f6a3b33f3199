"""Reverse a merge within its undo window."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agencyops.domain.audit_trail import record_full_action
from agencyops.domain.errors import LeadNotFoundError, MergeNotFoundError
from agencyops.domain.model import ActivityEventType, AuditAction

if TYPE_CHECKING:
    from uuid import UUID

    from agencyops.domain.days import Clock
    from agencyops.domain.model import LeadMerge
    from agencyops.domain.ports import DedupUnitOfWork

log = logging.getLogger(__name__)


def undo_merge(
    uow: DedupUnitOfWork,
    merge_id: UUID,
    *,
    clock: Clock,
    actor_id: str | None = None,
) -> LeadMerge:
    """Restore the ghost of ``merge_id`` and move its recorded children back.

    Only the outcome and timeline rows listed on the merge record are moved, and
    only while they still belong to the survivor. Field values copied onto the
    survivor and candidates closed by the merge stay as they are.
    """

    with uow:
        repositories = uow.repositories
        merge = repositories.merges.get(merge_id)
        if merge is None:
            raise MergeNotFoundError(merge_id)
        at = clock()
        merge.ensure_undoable(at)

        ghost = repositories.leads.get(merge.merged_id)
        if ghost is None:
            raise LeadNotFoundError(merge.merged_id)
        ghost_before = ghost.snapshot()
        ghost.restore(at=at)
        repositories.redirects.remove(merge.merged_id)

        outcomes_restored = repositories.outcomes.move(
            merge.outcome_ids,
            from_lead_id=merge.survivor_id,
            to_lead_id=merge.merged_id,
        )
        activities_restored = repositories.activities.move(
            merge.activity_ids,
            entity_type=merge.entity_type,
            from_id=merge.survivor_id,
            to_id=merge.merged_id,
        )
        merge.mark_undone(at=at)

        record_full_action(
            activities=repositories.activities,
            audit_logs=repositories.audit_logs,
            entity_type=merge.entity_type,
            entity_id=merge.survivor_id,
            event_type=ActivityEventType.MERGE_UNDONE,
            title="Merge undone",
            body=(
                f"Restored lead {merge.merged_id}: {outcomes_restored} outcomes and "
                f"{activities_restored} timeline events moved back"
            ),
            action=AuditAction.MERGE_UNDONE,
            at=at,
            actor_id=actor_id,
            details={
                "merge_id": str(merge.id),
                "merged_id": str(merge.merged_id),
                "outcomes_restored": outcomes_restored,
                "activities_restored": activities_restored,
            },
            before=ghost_before,
            after=ghost.snapshot(),
        )
        uow.commit()

    log.info(
        "Undid merge %s: restored lead %s (outcomes=%s, activities=%s)",
        merge.id,
        merge.merged_id,
        outcomes_restored,
        activities_restored,
    )
    return merge

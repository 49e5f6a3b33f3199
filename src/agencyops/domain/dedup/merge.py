"""Atomic lead merge.

A merge folds a *ghost* lead into a *survivor*: chosen field values are copied
onto the survivor, the ghost's outcomes and timeline move over, open candidates
touching the ghost are closed, and a merge record plus redirect are written.
All of it happens inside one unit of work; either every step commits or none do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agencyops.domain.audit_trail import record_full_action
from agencyops.domain.errors import (
    AgencyOpsError,
    InvalidFieldChoiceError,
    LeadNotFoundError,
    MergeFailedError,
    ValidationError,
)
from agencyops.domain.model import (
    ActivityEventType,
    AuditAction,
    EntityType,
    LeadField,
    LeadMerge,
    LeadRedirect,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime, timedelta
    from uuid import UUID

    from agencyops.domain.days import Clock
    from agencyops.domain.model import Lead
    from agencyops.domain.ports import DedupRepositories, DedupUnitOfWork

log = logging.getLogger(__name__)

REQUIRED_LEAD_FIELDS = frozenset({LeadField.COMPANY_NAME, LeadField.STATUS})


@dataclass(frozen=True, slots=True)
class LeadFieldChoices:
    """Values the caller picked for the survivor, keyed by an allowlisted field."""

    values: dict[LeadField, str | None] = field(default_factory=dict[LeadField, str | None])

    def __post_init__(self) -> None:
        for lead_field, value in self.values.items():
            if lead_field in REQUIRED_LEAD_FIELDS and (value is None or not value.strip()):
                raise ValidationError(f"Value chosen for {lead_field.value!r} cannot be empty")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> LeadFieldChoices:
        parsed: dict[LeadField, str | None] = {}
        for key, value in raw.items():
            try:
                lead_field = LeadField(key)
            except ValueError as exc:
                raise InvalidFieldChoiceError(key) from exc
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"Value chosen for {key!r} must be a string or null")
            parsed[lead_field] = value
        return cls(values=parsed)

    def to_payload(self) -> dict[str, str | None]:
        return {lead_field.value: value for lead_field, value in self.values.items()}


@dataclass(frozen=True, slots=True)
class MergeRequest:
    survivor_id: UUID
    merged_id: UUID
    strategy: str = "manual"
    field_choices: LeadFieldChoices = field(default_factory=LeadFieldChoices)
    initiator: str | None = None


def merge_leads(
    uow: DedupUnitOfWork,
    request: MergeRequest,
    *,
    clock: Clock,
    undo_window: timedelta,
) -> LeadMerge:
    """Merge ``request.merged_id`` into ``request.survivor_id`` and return the merge record.

    Raises:
        ValidationError: survivor and ghost are the same lead.
        LeadNotFoundError: either lead is missing or already merged.
        MergeFailedError: any later step failed; nothing was persisted.
    """

    if request.survivor_id == request.merged_id:
        raise ValidationError("Cannot merge a lead into itself")

    with uow:
        repositories = uow.repositories
        survivor = repositories.leads.get_active(request.survivor_id)
        if survivor is None:
            raise LeadNotFoundError(request.survivor_id)
        ghost = repositories.leads.get_active(request.merged_id)
        if ghost is None:
            raise LeadNotFoundError(request.merged_id)

        try:
            merge = _apply_merge(
                repositories,
                survivor,
                ghost,
                request,
                at=clock(),
                undo_window=undo_window,
            )
            uow.commit()
        except AgencyOpsError:
            raise
        except Exception as exc:
            log.warning(
                "Merge of %s into %s rolled back: %s", request.merged_id, request.survivor_id, exc
            )
            raise MergeFailedError(
                f"Merging lead {request.merged_id} into {request.survivor_id} failed"
            ) from exc

    log.info(
        "Merged lead %s into %s (merge %s, outcomes=%s, activities=%s)",
        merge.merged_id,
        merge.survivor_id,
        merge.id,
        len(merge.moved_outcome_ids),
        len(merge.moved_activity_ids),
    )
    return merge


def _apply_merge(  # noqa: PLR0913
    repositories: DedupRepositories,
    survivor: Lead,
    ghost: Lead,
    request: MergeRequest,
    *,
    at: datetime,
    undo_window: timedelta,
) -> LeadMerge:
    survivor_before = survivor.snapshot()
    ghost_before = ghost.snapshot()

    survivor.apply_fields(request.field_choices.values, at=at)

    outcome_ids = repositories.outcomes.ids_for_lead(ghost.id)
    repositories.outcomes.move(outcome_ids, from_lead_id=ghost.id, to_lead_id=survivor.id)

    # Captured before the merge's own timeline entries are written.
    activity_ids = repositories.activities.ids_for_entity(EntityType.LEAD, ghost.id)
    repositories.activities.move(
        activity_ids,
        entity_type=EntityType.LEAD,
        from_id=ghost.id,
        to_id=survivor.id,
    )

    repositories.candidates.close_open_involving(ghost.id, at=at)

    merge = LeadMerge(
        entity_type=EntityType.LEAD,
        survivor_id=survivor.id,
        merged_id=ghost.id,
        merged_by=request.initiator,
        strategy={"name": request.strategy, "chosen_fields": request.field_choices.to_payload()},
        moved_outcome_ids=[str(value) for value in outcome_ids],
        moved_activity_ids=[str(value) for value in activity_ids],
        created_at=at,
        undo_until=at + undo_window,
    )
    repositories.merges.add(merge)
    repositories.redirects.add(
        LeadRedirect(merged_id=ghost.id, survivor_id=survivor.id, created_at=at)
    )

    ghost.mark_merged_into(survivor, at=at)

    details: dict[str, object] = {
        "merge_id": str(merge.id),
        "survivor_id": str(survivor.id),
        "merged_id": str(ghost.id),
        "outcomes_moved": len(outcome_ids),
        "activities_moved": len(activity_ids),
    }
    record_full_action(
        activities=repositories.activities,
        audit_logs=repositories.audit_logs,
        entity_type=EntityType.LEAD,
        entity_id=survivor.id,
        event_type=ActivityEventType.LEAD_MERGED_IN,
        title="Lead merged in",
        body=f"Merged {ghost.company_name} into this lead",
        action=AuditAction.MERGE,
        at=at,
        actor_id=request.initiator,
        details=details,
        before=survivor_before,
        after=survivor.snapshot(),
    )
    record_full_action(
        activities=repositories.activities,
        audit_logs=repositories.audit_logs,
        entity_type=EntityType.LEAD,
        entity_id=ghost.id,
        event_type=ActivityEventType.LEAD_MERGED_OUT,
        title="Lead merged away",
        body=f"Merged into {survivor.company_name}",
        action=AuditAction.ARCHIVE_MERGE,
        at=at,
        actor_id=request.initiator,
        details=details,
        before=ghost_before,
        after=ghost.snapshot(),
    )
    return merge

"""Write paired timeline + audit entries inside the caller's unit of work."""

from __future__ import annotations

from typing import TYPE_CHECKING

from agencyops.domain.model import ActivityEvent, AuditLogEntry

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from agencyops.domain.model import ActivityEventType, AuditAction, EntityType, JsonObject
    from agencyops.domain.ports import ActivityEventRepository, AuditLogRepository


def record_full_action(  # noqa: PLR0913
    *,
    activities: ActivityEventRepository,
    audit_logs: AuditLogRepository,
    entity_type: EntityType,
    entity_id: UUID,
    event_type: ActivityEventType,
    title: str,
    action: AuditAction,
    at: datetime,
    actor_id: str | None = None,
    body: str | None = None,
    details: JsonObject | None = None,
    before: JsonObject | None = None,
    after: JsonObject | None = None,
) -> tuple[ActivityEvent, AuditLogEntry]:
    """Record one timeline event and its structured audit counterpart.

    Both rows join the enclosing transaction, so history commits (or rolls back)
    together with the change it describes.
    """

    event = ActivityEvent(
        entity_type=entity_type,
        entity_id=entity_id,
        event_type=event_type.value,
        title=title,
        body=body,
        details=dict(details or {}),
        created_by=actor_id,
        created_at=at,
    )
    entry = AuditLogEntry(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action.value,
        actor_id=actor_id,
        before_data=before,
        after_data=after,
        created_at=at,
    )
    activities.add(event)
    audit_logs.add(entry)
    return event, entry

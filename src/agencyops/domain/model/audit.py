"""Timeline and audit records written alongside state changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from agencyops.domain.model.entity import Entity, utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from agencyops.domain.model.enums import EntityType

type JsonObject = dict[str, object]


@dataclass(eq=False, kw_only=True)
class ActivityEvent(Entity):
    """Human-readable timeline entry attached to an entity."""

    entity_type: EntityType
    entity_id: UUID
    event_type: str
    title: str
    body: str | None = None
    details: JsonObject = field(default_factory=dict[str, object])
    created_by: str | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(eq=False, kw_only=True)
class AuditLogEntry(Entity):
    """Structured before/after record of a mutation."""

    entity_type: EntityType
    entity_id: UUID
    action: str
    actor_id: str | None = None
    before_data: JsonObject | None = None
    after_data: JsonObject | None = None
    created_at: datetime = field(default_factory=utcnow)

"""Sales leads and their outcome history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from agencyops.domain.model.entity import Entity, utcnow
from agencyops.domain.model.enums import EntityType, LeadField

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class Active:
    """The lead is a live record."""


@dataclass(frozen=True, slots=True)
class MergedInto:
    """The lead is a ghost; ``survivor_id`` holds its history now."""

    survivor_id: UUID


type LeadState = Active | MergedInto


@dataclass(eq=False, kw_only=True)
class Lead(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.LEAD

    company_name: str
    contact_name: str | None = None
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    city: str | None = None
    status: str = "active"
    notes: str | None = None

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    # Persisted as a single nullable column so a ghost can never lack a survivor.
    _merged_into: UUID | None = field(default=None, init=False, repr=False)

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE

    @property
    def state(self) -> LeadState:
        if self._merged_into is None:
            return Active()
        return MergedInto(self._merged_into)

    @property
    def is_merged(self) -> bool:
        return self._merged_into is not None

    @property
    def merged_into(self) -> UUID | None:
        return self._merged_into

    def mark_merged_into(self, survivor: Lead, *, at: datetime) -> None:
        if survivor.id == self.id:
            raise ValueError("A lead cannot be merged into itself")
        if survivor.is_merged:
            raise ValueError("Cannot merge into a lead that is itself merged")
        self._merged_into = survivor.id
        self.updated_at = at

    def restore(self, *, at: datetime) -> None:
        self._merged_into = None
        self.updated_at = at

    def apply_fields(self, values: Mapping[LeadField, str | None], *, at: datetime) -> None:
        for lead_field, value in values.items():
            setattr(self, lead_field.value, value)
        if values:
            self.updated_at = at

    def snapshot(self) -> dict[str, str | bool | None]:
        """JSON-serialisable view of every persisted attribute (audit before/after)."""

        data: dict[str, str | bool | None] = {"id": str(self.id)}
        for lead_field in LeadField:
            data[lead_field.value] = getattr(self, lead_field.value)
        data["is_merged"] = self.is_merged
        data["merged_into"] = str(self._merged_into) if self._merged_into else None
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data


@dataclass(eq=False, kw_only=True)
class LeadOutcome(Entity):
    """One entry of a lead's call/outcome history."""

    lead_id: UUID
    outcome: str
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime = field(default_factory=utcnow)

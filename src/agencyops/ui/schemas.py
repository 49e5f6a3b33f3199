"""Request payloads accepted at the JSON boundary."""

from __future__ import annotations

import logging
from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from agencyops.domain.days import ReportPeriod
from agencyops.domain.dedup import LeadFieldChoices, MergeRequest
from agencyops.domain.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)


class BoundaryModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class MergePayload(BoundaryModel):
    """``{survivorId, mergedId, strategy, chosenFields}``; snake_case keys also accepted."""

    survivor_id: UUID = Field(alias="survivorId")
    merged_id: UUID = Field(alias="mergedId")
    strategy: str = "manual"
    chosen_fields: dict[str, str | None] = Field(default_factory=dict, alias="chosenFields")

    def to_request(self, *, initiator: str | None = None) -> MergeRequest:
        return MergeRequest(
            survivor_id=self.survivor_id,
            merged_id=self.merged_id,
            strategy=self.strategy,
            field_choices=LeadFieldChoices.from_mapping(self.chosen_fields),
            initiator=initiator,
        )


class WorkHoursQuery(BoundaryModel):
    """Either a named period or an explicit inclusive day range."""

    period: ReportPeriod | None = None
    start: date | None = None
    end: date | None = None
    timezone: str | None = None

    @model_validator(mode="after")
    def _check_range(self) -> WorkHoursQuery:
        if self.period is not None and (self.start is not None or self.end is not None):
            raise ValueError("Use either period or start/end, not both")
        if (self.start is None) != (self.end is None):
            raise ValueError("start and end must be given together")
        return self


def _describe(exc: PydanticValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "payload"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_merge_payload(raw: str | bytes | Mapping[str, object]) -> MergePayload:
    try:
        if isinstance(raw, (str, bytes)):
            return MergePayload.model_validate_json(raw)
        return MergePayload.model_validate(raw)
    except PydanticValidationError as exc:
        log.debug("Rejected merge payload: %s", exc)
        raise ValidationError(f"Invalid merge payload: {_describe(exc)}") from exc


def parse_work_hours_query(raw: Mapping[str, object]) -> WorkHoursQuery:
    try:
        return WorkHoursQuery.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid report query: {_describe(exc)}") from exc

"""Builders for lead records and their history."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from itertools import count
from typing import TYPE_CHECKING

from agencyops.domain.model import ActivityEvent, EntityType, Lead, LeadOutcome

if TYPE_CHECKING:
    from collections.abc import Callable

    from agencyops.domain.ports import DedupUnitOfWork

BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

_sequence = count()


def make_lead(company_name: str = "Acme Interiors", **fields: str | None) -> Lead:
    # Strictly increasing creation times keep scan ordering stable.
    created_at = BASE_TIME + timedelta(seconds=next(_sequence))
    return Lead(company_name=company_name, created_at=created_at, **fields)


def persist(uow_factory: Callable[[], DedupUnitOfWork], *leads: Lead) -> None:
    with uow_factory() as uow:
        for lead in leads:
            uow.repositories.leads.add(lead)
        uow.commit()


def add_outcome(
    uow_factory: Callable[[], DedupUnitOfWork],
    lead: Lead,
    outcome: str = "called",
    *,
    at: datetime = BASE_TIME,
) -> LeadOutcome:
    entry = LeadOutcome(lead_id=lead.id, outcome=outcome, created_at=at)
    with uow_factory() as uow:
        uow.repositories.outcomes.add(entry)
        uow.commit()
    return entry


def add_activity(
    uow_factory: Callable[[], DedupUnitOfWork],
    lead: Lead,
    title: str = "Note added",
    *,
    at: datetime = BASE_TIME,
) -> ActivityEvent:
    event = ActivityEvent(
        entity_type=EntityType.LEAD,
        entity_id=lead.id,
        event_type="note",
        title=title,
        created_at=at,
    )
    with uow_factory() as uow:
        uow.repositories.activities.add(event)
        uow.commit()
    return event

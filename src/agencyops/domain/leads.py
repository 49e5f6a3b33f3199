"""Lead intake: new records and outcome history."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agencyops.domain.dedup.redirects import resolve_lead_id
from agencyops.domain.errors import LeadNotFoundError, ValidationError
from agencyops.domain.model import Lead, LeadOutcome

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from agencyops.domain.days import Clock
    from agencyops.domain.ports import DedupUnitOfWork

log = logging.getLogger(__name__)


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def register_lead(  # noqa: PLR0913
    uow: DedupUnitOfWork,
    *,
    company_name: str,
    clock: Clock,
    contact_name: str | None = None,
    phone: str | None = None,
    email: str | None = None,
    website: str | None = None,
    city: str | None = None,
    notes: str | None = None,
) -> Lead:
    name = company_name.strip()
    if not name:
        raise ValidationError("Company name is required")
    lead = Lead(
        company_name=name,
        contact_name=_optional(contact_name),
        phone=_optional(phone),
        email=_optional(email),
        website=_optional(website),
        city=_optional(city),
        notes=_optional(notes),
        created_at=clock(),
    )
    with uow:
        uow.repositories.leads.add(lead)
        uow.commit()
    log.info("Registered lead %s (%s)", lead.id, lead.company_name)
    return lead


def record_outcome(
    uow_factory: Callable[[], DedupUnitOfWork],
    lead_id: UUID,
    outcome: str,
    *,
    clock: Clock,
    notes: str | None = None,
    created_by: str | None = None,
) -> LeadOutcome:
    """Attach an outcome to ``lead_id``, following redirects when it was merged away."""

    if not outcome.strip():
        raise ValidationError("Outcome is required")
    target = resolve_lead_id(uow_factory(), lead_id)
    if target.is_merged:
        raise LeadNotFoundError(lead_id)

    entry = LeadOutcome(
        lead_id=target.id,
        outcome=outcome.strip(),
        notes=_optional(notes),
        created_by=created_by,
        created_at=clock(),
    )
    uow = uow_factory()
    with uow:
        uow.repositories.outcomes.add(entry)
        uow.commit()
    if target.id != lead_id:
        log.info("Outcome for merged lead %s recorded on survivor %s", lead_id, target.id)
    return entry

"""Batch duplicate scan over active leads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import TYPE_CHECKING

from agencyops.domain.dedup.scoring import MatchFingerprint, score_fingerprints
from agencyops.domain.errors import UnsupportedEntityTypeError, ValidationError
from agencyops.domain.model import DuplicateCandidate, EntityType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from agencyops.domain.days import Clock
    from agencyops.domain.model import Lead
    from agencyops.domain.ports import DedupUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ScanResult:
    """Outcome of one bounded scan pass."""

    entity_type: EntityType
    scanned: int
    candidates_found: int
    candidates_inserted: int
    candidates: list[DuplicateCandidate] = field(default_factory=list[DuplicateCandidate])

    def to_payload(self) -> dict[str, object]:
        return {
            "entity_type": self.entity_type.value,
            "scanned": self.scanned,
            "candidates_found": self.candidates_found,
            "candidates_inserted": self.candidates_inserted,
        }


def find_candidates(
    leads: Sequence[Lead],
    *,
    at: datetime,
) -> list[DuplicateCandidate]:
    """Compare every unordered pair once and build candidates for matching pairs.

    Quadratic in ``len(leads)``; callers bound the batch. Merged leads are skipped.
    """

    active = [lead for lead in leads if not lead.is_merged]
    fingerprints = {lead.id: MatchFingerprint.of(lead) for lead in active}
    found: list[DuplicateCandidate] = []
    for left, right in combinations(active, 2):
        if left.id == right.id:
            continue
        score = score_fingerprints(fingerprints[left.id], fingerprints[right.id])
        if score is None:
            continue
        found.append(
            DuplicateCandidate(
                entity_type=EntityType.LEAD,
                primary_id=left.id,
                duplicate_id=right.id,
                match_type=score.match_type,
                confidence=score.confidence,
                reason=dict(score.reason),
                created_at=at,
            )
        )
    return found


def scan_for_duplicates(
    uow: DedupUnitOfWork,
    entity_type: EntityType | str,
    *,
    clock: Clock,
    batch_size: int,
    offset: int = 0,
) -> ScanResult:
    """Scan one page of active records and persist new candidates idempotently."""

    try:
        resolved_type = EntityType(entity_type)
    except ValueError as exc:
        raise UnsupportedEntityTypeError(f"Cannot scan entity type {entity_type!r}") from exc
    if batch_size < 1:
        raise ValidationError("Scan batch size must be positive")

    with uow:
        leads = uow.repositories.leads.list_active(limit=batch_size, offset=offset)
        candidates = find_candidates(leads, at=clock())
        inserted = 0
        for candidate in candidates:
            if uow.repositories.candidates.add_if_absent(candidate):
                inserted += 1
        uow.commit()

    log.info(
        "Duplicate scan for %s: scanned=%s, found=%s, inserted=%s",
        resolved_type,
        len(leads),
        len(candidates),
        inserted,
    )
    return ScanResult(
        entity_type=resolved_type,
        scanned=len(leads),
        candidates_found=len(candidates),
        candidates_inserted=inserted,
        candidates=candidates,
    )

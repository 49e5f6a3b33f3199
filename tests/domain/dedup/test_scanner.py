from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from agencyops.domain.dedup import find_candidates, scan_for_duplicates
from agencyops.domain.errors import UnsupportedEntityTypeError, ValidationError
from agencyops.domain.model import EntityType, MatchType
from tests.helpers.clocks import make_clock
from tests.helpers.leads import make_lead, persist

if TYPE_CHECKING:
    from collections.abc import Callable

    from agencyops.adapters.sqlalchemy import SqlAlchemyDedupUnitOfWork

SCAN_TIME = datetime(2025, 3, 2, 10, 0, tzinfo=UTC)


def test_find_candidates_pairs_each_match_once() -> None:
    first = make_lead("Acme", phone="9876543210")
    second = make_lead("Acme Pvt", phone="+91 98765 43210")
    third = make_lead("Unrelated", phone="1112223334")

    candidates = find_candidates([first, second, third], at=SCAN_TIME)

    assert len(candidates) == 1
    (candidate,) = candidates
    assert {candidate.primary_id, candidate.duplicate_id} == {first.id, second.id}
    assert str(candidate.primary_id) < str(candidate.duplicate_id)
    assert candidate.match_type is MatchType.PHONE
    assert candidate.created_at == SCAN_TIME


def test_find_candidates_skips_merged_leads_and_repeated_records() -> None:
    survivor = make_lead("Acme", email="a@acme.test")
    ghost = make_lead("Acme", email="a@acme.test")
    ghost.mark_merged_into(survivor, at=SCAN_TIME)

    assert find_candidates([survivor, ghost], at=SCAN_TIME) == []
    assert find_candidates([survivor, survivor], at=SCAN_TIME) == []


def test_scan_persists_candidates_and_is_idempotent(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    left = make_lead("Acme", phone="9876543210")
    right = make_lead("Acme Two", phone="09876543210")
    by_name = make_lead("Blue Door", city="Pune")
    by_name_twin = make_lead("blue  door", city="pune")
    persist(dedup_uow, left, right, by_name, by_name_twin)
    clock = make_clock(SCAN_TIME)

    first = scan_for_duplicates(dedup_uow(), "lead", clock=clock, batch_size=50)
    second = scan_for_duplicates(dedup_uow(), EntityType.LEAD, clock=clock, batch_size=50)

    assert first.scanned == 4
    assert first.candidates_found == 2
    assert first.candidates_inserted == 2
    assert second.candidates_found == 2
    assert second.candidates_inserted == 0
    with dedup_uow() as uow:
        stored = uow.repositories.candidates.list_open(EntityType.LEAD, limit=10)
    assert [c.match_type for c in stored] == [MatchType.PHONE, MatchType.NAME_CITY]


def test_scan_respects_batch_window(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    first = make_lead("Acme", phone="9876543210")
    filler = make_lead("Filler Co")
    last = make_lead("Acme", phone="9876543210")
    persist(dedup_uow, first, filler, last)

    result = scan_for_duplicates(
        dedup_uow(),
        "lead",
        clock=make_clock(SCAN_TIME),
        batch_size=2,
    )

    assert result.scanned == 2
    assert result.candidates_found == 0


def test_scan_rejects_unknown_entity_type(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    with pytest.raises(UnsupportedEntityTypeError):
        scan_for_duplicates(dedup_uow(), "invoice", clock=make_clock(SCAN_TIME), batch_size=10)


def test_scan_rejects_non_positive_batch(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    with pytest.raises(ValidationError):
        scan_for_duplicates(dedup_uow(), "lead", clock=make_clock(SCAN_TIME), batch_size=0)

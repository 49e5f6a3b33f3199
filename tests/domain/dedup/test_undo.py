from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from agencyops.domain.dedup import MergeRequest, merge_leads, undo_merge
from agencyops.domain.errors import AlreadyUndoneError, MergeNotFoundError, UndoWindowExpiredError
from agencyops.domain.model import EntityType
from tests.helpers.clocks import SteppingClock
from tests.helpers.leads import add_activity, add_outcome, make_lead, persist

if TYPE_CHECKING:
    from collections.abc import Callable

    from agencyops.adapters.sqlalchemy import SqlAlchemyDedupUnitOfWork
    from agencyops.domain.model import Lead, LeadMerge

MERGE_TIME = datetime(2025, 3, 5, 15, 30, tzinfo=UTC)
WINDOW = timedelta(days=7)


def _merged_pair(
    uow_factory: Callable[[], SqlAlchemyDedupUnitOfWork],
    clock: SteppingClock,
) -> tuple[Lead, Lead, LeadMerge]:
    survivor = make_lead("Acme")
    ghost = make_lead("Acme Copy")
    persist(uow_factory, survivor, ghost)
    merge = merge_leads(
        uow_factory(),
        MergeRequest(survivor_id=survivor.id, merged_id=ghost.id),
        clock=clock,
        undo_window=WINDOW,
    )
    return survivor, ghost, merge


def test_undo_restores_ghost_and_removes_redirect(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    clock = SteppingClock(MERGE_TIME)
    _survivor, ghost, merge = _merged_pair(dedup_uow, clock)
    clock.advance(hours=2)

    undone = undo_merge(dedup_uow(), merge.id, clock=clock, actor_id="lead-manager")

    assert undone.is_undone
    assert undone.undone_at == MERGE_TIME + timedelta(hours=2)
    with dedup_uow() as uow:
        repos = uow.repositories
        restored = repos.leads.get_active(ghost.id)
        assert restored is not None
        assert restored.merged_into is None
        assert repos.redirects.get(ghost.id) is None
        stored_merge = repos.merges.get(merge.id)
        assert stored_merge is not None
        assert stored_merge.is_undone


def test_undo_moves_back_only_the_rows_the_merge_moved(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    clock = SteppingClock(MERGE_TIME)
    survivor = make_lead("Acme")
    ghost = make_lead("Acme Copy")
    persist(dedup_uow, survivor, ghost)
    kept_on_survivor = add_outcome(dedup_uow, survivor, "called")
    moved = add_outcome(dedup_uow, ghost, "interested")
    moved_note = add_activity(dedup_uow, ghost, "Met at expo")
    merge = merge_leads(
        dedup_uow(),
        MergeRequest(survivor_id=survivor.id, merged_id=ghost.id),
        clock=clock,
        undo_window=WINDOW,
    )
    after_merge = add_outcome(dedup_uow, survivor, "follow-up", at=MERGE_TIME + timedelta(hours=1))
    clock.advance(days=1)

    undo_merge(dedup_uow(), merge.id, clock=clock)

    with dedup_uow() as uow:
        repos = uow.repositories
        ghost_outcomes = {o.id for o in repos.outcomes.list_for_lead(ghost.id)}
        survivor_outcomes = {o.id for o in repos.outcomes.list_for_lead(survivor.id)}
        ghost_events = repos.activities.list_for_entity(EntityType.LEAD, ghost.id)
        survivor_events = repos.activities.list_for_entity(EntityType.LEAD, survivor.id)
        survivor_audit = repos.audit_logs.list_for_entity(EntityType.LEAD, survivor.id)
    assert ghost_outcomes == {moved.id}
    assert survivor_outcomes == {kept_on_survivor.id, after_merge.id}
    assert moved_note.id in {e.id for e in ghost_events}
    assert [e.event_type for e in survivor_events] == ["lead_merged_in", "merge_undone"]
    assert survivor_events[-1].details["outcomes_restored"] == 1
    assert survivor_events[-1].details["activities_restored"] == 1
    assert [a.action for a in survivor_audit] == ["MERGE", "MERGE_UNDONE"]


def test_undo_is_allowed_at_the_deadline(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    clock = SteppingClock(MERGE_TIME)
    _survivor, _ghost, merge = _merged_pair(dedup_uow, clock)
    clock.set(merge.undo_until)

    assert undo_merge(dedup_uow(), merge.id, clock=clock).is_undone


def test_undo_after_deadline_is_rejected(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    clock = SteppingClock(MERGE_TIME)
    _survivor, ghost, merge = _merged_pair(dedup_uow, clock)
    clock.set(merge.undo_until + timedelta(seconds=1))

    with pytest.raises(UndoWindowExpiredError):
        undo_merge(dedup_uow(), merge.id, clock=clock)

    with dedup_uow() as uow:
        stored_ghost = uow.repositories.leads.get(ghost.id)
        assert stored_ghost is not None
        assert stored_ghost.is_merged


def test_undo_twice_is_rejected(
    dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork],
) -> None:
    clock = SteppingClock(MERGE_TIME)
    _survivor, _ghost, merge = _merged_pair(dedup_uow, clock)
    clock.advance(minutes=10)
    undo_merge(dedup_uow(), merge.id, clock=clock)

    with pytest.raises(AlreadyUndoneError):
        undo_merge(dedup_uow(), merge.id, clock=clock)


def test_undo_unknown_merge(dedup_uow: Callable[[], SqlAlchemyDedupUnitOfWork]) -> None:
    with pytest.raises(MergeNotFoundError):
        undo_merge(dedup_uow(), uuid4(), clock=SteppingClock(MERGE_TIME))

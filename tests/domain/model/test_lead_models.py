from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

import pytest

from agencyops.domain.errors import (
    AlreadyUndoneError,
    BreakAlreadyActiveError,
    CandidateNotOpenError,
    NoActiveBreakError,
    UndoWindowExpiredError,
)
from agencyops.domain.model import (
    Active,
    AttendanceSession,
    CandidateStatus,
    DuplicateCandidate,
    EntityType,
    LeadField,
    LeadMerge,
    MatchType,
    MergedInto,
    SessionStatus,
    canonical_pair,
)
from tests.helpers.leads import make_lead

NOON = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def test_canonical_pair_is_order_independent() -> None:
    first, second = uuid4(), uuid4()

    assert canonical_pair(first, second) == canonical_pair(second, first)


def test_canonical_pair_rejects_self_pairs() -> None:
    same = uuid4()

    with pytest.raises(ValueError, match="itself"):
        canonical_pair(same, same)


def test_candidate_stores_pair_in_canonical_order() -> None:
    first, second = uuid4(), uuid4()
    low, high = sorted((first, second), key=str)

    candidate = DuplicateCandidate(
        entity_type=EntityType.LEAD,
        primary_id=high,
        duplicate_id=low,
        match_type=MatchType.PHONE,
        confidence=95,
    )

    assert (candidate.primary_id, candidate.duplicate_id) == (low, high)
    assert candidate.involves(first)
    assert candidate.involves(second)


def test_candidate_rejects_out_of_range_confidence() -> None:
    with pytest.raises(ValueError, match="Confidence"):
        DuplicateCandidate(
            entity_type=EntityType.LEAD,
            primary_id=uuid4(),
            duplicate_id=uuid4(),
            match_type=MatchType.EMAIL,
            confidence=101,
        )


def test_only_open_candidates_can_be_dismissed() -> None:
    candidate = DuplicateCandidate(
        entity_type=EntityType.LEAD,
        primary_id=uuid4(),
        duplicate_id=uuid4(),
        match_type=MatchType.NAME_CITY,
        confidence=70,
    )
    candidate.dismiss(at=NOON)

    assert candidate.status is CandidateStatus.DISMISSED
    assert candidate.resolved_at == NOON
    with pytest.raises(CandidateNotOpenError):
        candidate.dismiss(at=NOON)


def test_lead_state_tracks_merge_and_restore() -> None:
    survivor = make_lead("Survivor Ltd")
    ghost = make_lead("Ghost Ltd")

    assert ghost.state == Active()
    ghost.mark_merged_into(survivor, at=NOON)
    assert ghost.state == MergedInto(survivor.id)
    assert ghost.is_merged
    assert ghost.updated_at == NOON

    ghost.restore(at=NOON + timedelta(hours=1))
    assert ghost.state == Active()
    assert ghost.merged_into is None


def test_lead_cannot_merge_into_a_ghost() -> None:
    survivor = make_lead()
    ghost = make_lead()
    third = make_lead()
    ghost.mark_merged_into(survivor, at=NOON)

    with pytest.raises(ValueError, match="itself merged"):
        third.mark_merged_into(ghost, at=NOON)
    with pytest.raises(ValueError, match="into itself"):
        survivor.mark_merged_into(survivor, at=NOON)


def test_apply_fields_only_touches_chosen_fields() -> None:
    lead = make_lead("Acme", phone="111", city="Pune")

    lead.apply_fields({LeadField.PHONE: "222", LeadField.NOTES: None}, at=NOON)

    assert lead.phone == "222"
    assert lead.notes is None
    assert lead.city == "Pune"
    assert lead.updated_at == NOON


def test_snapshot_is_json_friendly() -> None:
    lead = make_lead("Acme", email="sales@acme.test")

    snapshot = lead.snapshot()

    assert snapshot["id"] == str(lead.id)
    assert snapshot["email"] == "sales@acme.test"
    assert snapshot["is_merged"] is False
    assert snapshot["merged_into"] is None
    assert isinstance(snapshot["created_at"], str)


def _merge(undo_until: datetime) -> LeadMerge:
    return LeadMerge(survivor_id=uuid4(), merged_id=uuid4(), undo_until=undo_until)


def test_merge_is_undoable_up_to_and_including_deadline() -> None:
    merge = _merge(NOON)

    merge.ensure_undoable(NOON - timedelta(seconds=1))
    merge.ensure_undoable(NOON)
    with pytest.raises(UndoWindowExpiredError):
        merge.ensure_undoable(NOON + timedelta(seconds=1))


def test_merge_can_only_be_undone_once() -> None:
    merge = _merge(NOON)

    merge.mark_undone(at=NOON - timedelta(minutes=5))

    assert merge.is_undone
    assert merge.undone_at == NOON - timedelta(minutes=5)
    with pytest.raises(AlreadyUndoneError):
        merge.mark_undone(at=NOON - timedelta(minutes=4))


def _session() -> AttendanceSession:
    return AttendanceSession(user_id=uuid4(), session_date=date(2025, 3, 10), clock_in_at=NOON)


def test_session_allows_one_running_break() -> None:
    session = _session()
    session.start_break(at=NOON + timedelta(hours=1))

    with pytest.raises(BreakAlreadyActiveError):
        session.start_break(at=NOON + timedelta(hours=2))


def test_session_end_break_requires_running_break() -> None:
    session = _session()

    with pytest.raises(NoActiveBreakError):
        session.end_break(at=NOON)


def test_close_ends_running_break_at_clock_out() -> None:
    session = _session()
    brk = session.start_break(at=NOON + timedelta(hours=1))
    out = NOON + timedelta(hours=2)

    session.close(at=out, status=SessionStatus.FLAGGED)

    assert brk.ended_at == out
    assert session.clock_out_at == out
    assert session.status is SessionStatus.FLAGGED
    assert session.active_break is None
    assert session.duration(NOON + timedelta(hours=9)) == timedelta(hours=2)

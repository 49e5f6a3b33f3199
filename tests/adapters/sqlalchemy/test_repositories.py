from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from agencyops.adapters.sqlalchemy.repositories import (
    SqlAlchemyActivityEventRepository,
    SqlAlchemyAttendanceSessionRepository,
    SqlAlchemyDailySummaryRepository,
    SqlAlchemyDuplicateCandidateRepository,
    SqlAlchemyLeadOutcomeRepository,
    SqlAlchemyLeadRepository,
)
from agencyops.domain.errors import BreakAlreadyActiveError
from agencyops.domain.model import (
    ActivityEvent,
    AttendanceBreak,
    AttendanceSession,
    CandidateStatus,
    DailySummary,
    DuplicateCandidate,
    EntityType,
    LeadOutcome,
    MatchType,
    SessionStatus,
)
from tests.helpers.leads import make_lead

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.orm import Session

NOW = datetime(2025, 3, 4, 12, 0, tzinfo=UTC)


def _candidate(first: UUID, second: UUID, match_type: MatchType) -> DuplicateCandidate:
    return DuplicateCandidate(
        entity_type=EntityType.LEAD,
        primary_id=first,
        duplicate_id=second,
        match_type=match_type,
        confidence=95,
        reason={"field": match_type.value},
        created_at=NOW,
    )


def test_list_active_pages_in_creation_order(sqlite_session: Session) -> None:
    repo = SqlAlchemyLeadRepository(sqlite_session)
    leads = [make_lead(f"Lead {index}") for index in range(5)]
    for lead in leads:
        repo.add(lead)
    leads[1].mark_merged_into(leads[0], at=NOW)
    sqlite_session.commit()

    first_page = repo.list_active(limit=2)
    second_page = repo.list_active(limit=2, offset=2)

    assert [lead.id for lead in first_page] == [leads[0].id, leads[2].id]
    assert [lead.id for lead in second_page] == [leads[3].id, leads[4].id]
    assert repo.get_active(leads[1].id) is None
    assert repo.get(leads[1].id) is leads[1]


def test_merged_into_round_trips(sqlite_session: Session) -> None:
    repo = SqlAlchemyLeadRepository(sqlite_session)
    survivor, ghost = make_lead("Survivor"), make_lead("Ghost")
    repo.add(survivor)
    repo.add(ghost)
    ghost.mark_merged_into(survivor, at=NOW)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    stored = repo.get(ghost.id)

    assert stored is not None
    assert stored.merged_into == survivor.id
    assert stored.updated_at == NOW


def test_add_if_absent_ignores_reordered_duplicates(sqlite_session: Session) -> None:
    repo = SqlAlchemyDuplicateCandidateRepository(sqlite_session)
    first, second = uuid4(), uuid4()

    assert repo.add_if_absent(_candidate(first, second, MatchType.PHONE)) is True
    assert repo.add_if_absent(_candidate(second, first, MatchType.PHONE)) is False
    assert repo.add_if_absent(_candidate(second, first, MatchType.EMAIL)) is True
    sqlite_session.commit()

    stored = repo.list_involving(first)
    assert len(stored) == 2
    assert {c.match_type for c in stored} == {MatchType.PHONE, MatchType.EMAIL}


def test_close_open_involving_skips_resolved_candidates(sqlite_session: Session) -> None:
    repo = SqlAlchemyDuplicateCandidateRepository(sqlite_session)
    ghost, other, third = uuid4(), uuid4(), uuid4()
    dismissed = _candidate(ghost, third, MatchType.EMAIL)
    dismissed.dismiss(at=NOW)
    repo.add_if_absent(_candidate(ghost, other, MatchType.PHONE))
    repo.add_if_absent(dismissed)
    repo.add_if_absent(_candidate(other, third, MatchType.PHONE))

    closed = repo.close_open_involving(ghost, at=NOW)
    sqlite_session.commit()

    assert closed == 1
    assert [c.status for c in repo.list_open(EntityType.LEAD, limit=10)] == [CandidateStatus.OPEN]
    statuses = {c.status for c in repo.list_involving(ghost)}
    assert statuses == {CandidateStatus.MERGED, CandidateStatus.DISMISSED}


def test_outcome_move_only_touches_rows_owned_by_source(sqlite_session: Session) -> None:
    repo = SqlAlchemyLeadOutcomeRepository(sqlite_session)
    source, target, elsewhere = uuid4(), uuid4(), uuid4()
    owned = LeadOutcome(lead_id=source, outcome="called", created_at=NOW)
    foreign = LeadOutcome(lead_id=elsewhere, outcome="called", created_at=NOW)
    repo.add(owned)
    repo.add(foreign)
    sqlite_session.commit()

    moved = repo.move([owned.id, foreign.id], from_lead_id=source, to_lead_id=target)
    sqlite_session.commit()

    assert moved == 1
    assert repo.ids_for_lead(target) == [owned.id]
    assert repo.ids_for_lead(elsewhere) == [foreign.id]
    assert repo.move([], from_lead_id=source, to_lead_id=target) == 0


def test_activity_details_round_trip(sqlite_session: Session) -> None:
    repo = SqlAlchemyActivityEventRepository(sqlite_session)
    entity = uuid4()
    event = ActivityEvent(
        entity_type=EntityType.LEAD,
        entity_id=entity,
        event_type="note",
        title="Called back",
        details={"attempt": 2, "tags": ["warm"]},
        created_at=NOW,
    )
    repo.add(event)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    (stored,) = repo.list_for_entity(EntityType.LEAD, entity)

    assert stored.details == {"attempt": 2, "tags": ["warm"]}
    assert stored.created_at == NOW
    assert repo.ids_for_entity(EntityType.LEAD, entity) == [event.id]


def _open_session(user_id: UUID, clock_in_at: datetime) -> AttendanceSession:
    return AttendanceSession(
        user_id=user_id,
        session_date=clock_in_at.date(),
        clock_in_at=clock_in_at,
    )


def test_open_sessions_before_cutoff(sqlite_session: Session) -> None:
    repo = SqlAlchemyAttendanceSessionRepository(sqlite_session)
    old = _open_session(uuid4(), NOW - timedelta(hours=20))
    fresh = _open_session(uuid4(), NOW - timedelta(hours=2))
    closed = _open_session(uuid4(), NOW - timedelta(hours=30))
    closed.close(at=NOW - timedelta(hours=22))
    for session in (old, fresh, closed):
        repo.add_open(session)
    sqlite_session.commit()

    stale = repo.list_open_started_before(NOW - timedelta(hours=16))

    assert [s.id for s in stale] == [old.id]
    assert repo.get_open_for_user(fresh.user_id) is fresh
    assert repo.get_open_for_user(closed.user_id) is None


def test_breaks_load_with_their_session(sqlite_session: Session) -> None:
    repo = SqlAlchemyAttendanceSessionRepository(sqlite_session)
    session = _open_session(uuid4(), NOW)
    repo.add_open(session)
    session.start_break(at=NOW + timedelta(hours=1))
    session.end_break(at=NOW + timedelta(hours=2))
    session.start_break(at=NOW + timedelta(hours=3))
    repo.flush_breaks(session)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    (stored,) = repo.list_for_day(session.user_id, session.session_date)

    assert [b.started_at for b in stored.breaks] == [
        NOW + timedelta(hours=1),
        NOW + timedelta(hours=3),
    ]
    assert stored.active_break is not None
    assert stored.status is SessionStatus.OPEN


def test_store_rejects_two_open_breaks(sqlite_session: Session) -> None:
    repo = SqlAlchemyAttendanceSessionRepository(sqlite_session)
    session = _open_session(uuid4(), NOW)
    repo.add_open(session)
    # Bypasses the in-memory guard to reach the partial unique index.
    session.breaks.append(AttendanceBreak(started_at=NOW + timedelta(minutes=5)))
    session.breaks.append(AttendanceBreak(started_at=NOW + timedelta(minutes=6)))

    with pytest.raises(BreakAlreadyActiveError):
        repo.flush_breaks(session)


def test_summary_upsert_overwrites_in_place(sqlite_session: Session) -> None:
    repo = SqlAlchemyDailySummaryRepository(sqlite_session)
    user, day = uuid4(), date(2025, 3, 4)
    repo.upsert(DailySummary(user_id=user, day=day, gross_minutes=60, net_minutes=60))
    sqlite_session.commit()

    result = repo.upsert(
        DailySummary(
            user_id=user,
            day=day,
            gross_minutes=120,
            break_minutes=15,
            net_minutes=105,
            sessions_count=1,
            is_complete=False,
            flags=["open_session"],
        )
    )
    sqlite_session.commit()
    sqlite_session.expunge_all()

    stored = repo.get(user, day)
    assert stored is not None
    assert stored.values() == result.values()
    assert stored.flags == ["open_session"]
    assert [s.day for s in repo.list_between(day, day)] == [day]
    assert repo.list_between(day + timedelta(days=1), day + timedelta(days=2)) == []

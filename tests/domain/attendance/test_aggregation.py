from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

from agencyops.domain.attendance import compute_daily_summary
from agencyops.domain.model import AttendanceSession, SessionStatus

DAY = date(2025, 3, 10)
USER = uuid4()


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 10, hour, minute, tzinfo=UTC)


def _session(start: datetime, end: datetime | None = None) -> AttendanceSession:
    session = AttendanceSession(user_id=USER, session_date=DAY, clock_in_at=start)
    if end is not None:
        session.close(at=end)
    return session


def test_full_day_with_one_break() -> None:
    session = _session(_at(9))
    session.start_break(at=_at(13))
    session.end_break(at=_at(13, 45))
    session.close(at=_at(17))

    summary = compute_daily_summary(USER, DAY, [session], now=_at(20))

    assert summary.gross_minutes == 480
    assert summary.break_minutes == 45
    assert summary.net_minutes == 435
    assert summary.sessions_count == 1
    assert summary.is_complete
    assert summary.flags == []


def test_multiple_sessions_are_added_up() -> None:
    morning = _session(_at(9), _at(12))
    afternoon = _session(_at(13), _at(15, 30))

    summary = compute_daily_summary(USER, DAY, [morning, afternoon], now=_at(20))

    assert summary.gross_minutes == 330
    assert summary.net_minutes == 330
    assert summary.sessions_count == 2


def test_open_session_is_measured_to_now_and_incomplete() -> None:
    session = _session(_at(9))

    summary = compute_daily_summary(USER, DAY, [session], now=_at(11, 30))

    assert summary.gross_minutes == 150
    assert not summary.is_complete
    assert summary.flags == ["open_session"]


def test_running_break_counts_up_to_now() -> None:
    session = _session(_at(9))
    session.start_break(at=_at(10))

    summary = compute_daily_summary(USER, DAY, [session], now=_at(10, 20))

    assert summary.gross_minutes == 80
    assert summary.break_minutes == 20
    assert summary.net_minutes == 60


def test_long_break_is_flagged() -> None:
    session = _session(_at(9))
    session.start_break(at=_at(12))
    session.end_break(at=_at(13, 31))
    session.close(at=_at(18))

    summary = compute_daily_summary(
        USER, DAY, [session], now=_at(20), long_break=timedelta(minutes=90)
    )

    assert summary.flags == ["long_break"]
    assert summary.is_complete


def test_break_at_threshold_is_not_flagged() -> None:
    session = _session(_at(9))
    session.start_break(at=_at(12))
    session.end_break(at=_at(13, 30))
    session.close(at=_at(18))

    summary = compute_daily_summary(
        USER, DAY, [session], now=_at(20), long_break=timedelta(minutes=90)
    )

    assert summary.flags == []


def test_flagged_session_reports_missed_clockout() -> None:
    session = _session(_at(9))
    session.close(at=_at(23), status=SessionStatus.FLAGGED)

    summary = compute_daily_summary(USER, DAY, [session], now=_at(23))

    assert summary.flags == ["missed_clockout"]
    assert summary.is_complete
    assert summary.gross_minutes == 14 * 60


def test_net_minutes_never_go_negative() -> None:
    # Breaks recorded outside the session window can exceed gross time.
    session = _session(_at(9))
    brk = session.start_break(at=_at(8))
    brk.ended_at = _at(11)
    session.close(at=_at(10))

    summary = compute_daily_summary(USER, DAY, [session], now=_at(20))

    assert summary.gross_minutes == 60
    assert summary.break_minutes == 180
    assert summary.net_minutes == 0


def test_partial_minutes_are_truncated() -> None:
    session = _session(_at(9), _at(9) + timedelta(minutes=59, seconds=59))

    summary = compute_daily_summary(USER, DAY, [session], now=_at(20))

    assert summary.gross_minutes == 59


def test_no_sessions_yields_an_empty_complete_day() -> None:
    summary = compute_daily_summary(USER, DAY, [], now=_at(20))

    assert summary.values() == (USER, DAY, 0, 0, 0, 0, True, ())


def test_recomputing_is_deterministic() -> None:
    session = _session(_at(9))
    session.start_break(at=_at(12))
    session.end_break(at=_at(12, 30))
    session.close(at=_at(17))

    first = compute_daily_summary(USER, DAY, [session], now=_at(20))
    second = compute_daily_summary(USER, DAY, [session], now=_at(21))

    assert first.values() == second.values()

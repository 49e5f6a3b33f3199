from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from agencyops import app
from agencyops.config import configure_logging
from agencyops.domain.days import ReportPeriod, parse_day
from agencyops.domain.errors import AgencyOpsError, ErrorKind
from agencyops.ui.schemas import parse_merge_payload, parse_work_hours_query

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from agencyops.domain.attendance import ClockTransition
    from agencyops.domain.model import AttendanceSession, DuplicateCandidate, LeadMerge

log = logging.getLogger(__name__)

CLOCK_COMMANDS = ("clock-in", "clock-out", "break-start", "break-end")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Agency operations: leads and attendance")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lead = subparsers.add_parser("lead", help="Lead records")
    lead_sub = lead.add_subparsers(dest="lead_command", required=True)
    lead_add = lead_sub.add_parser("add", help="Register a lead")
    lead_add.add_argument("--company-name", type=str, required=True)
    lead_add.add_argument("--contact-name", type=str)
    lead_add.add_argument("--phone", type=str)
    lead_add.add_argument("--email", type=str)
    lead_add.add_argument("--website", type=str)
    lead_add.add_argument("--city", type=str)
    lead_add.add_argument("--notes", type=str)
    lead_outcome = lead_sub.add_parser("outcome", help="Record a call outcome on a lead")
    lead_outcome.add_argument("--lead-id", type=str, required=True)
    lead_outcome.add_argument("--outcome", type=str, required=True)
    lead_outcome.add_argument("--notes", type=str)
    lead_outcome.add_argument("--created-by", type=str)
    lead_resolve = lead_sub.add_parser("resolve", help="Follow merge redirects for a lead id")
    lead_resolve.add_argument("--lead-id", type=str, required=True)

    duplicates = subparsers.add_parser("duplicates", help="Duplicate detection")
    dup_sub = duplicates.add_subparsers(dest="duplicates_command", required=True)
    dup_scan = dup_sub.add_parser("scan", help="Scan active records for duplicates")
    dup_scan.add_argument("--entity-type", type=str, default="lead")
    dup_scan.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Records compared per scan (defaults to config)",
    )
    dup_scan.add_argument("--offset", type=int, default=0)
    dup_list = dup_sub.add_parser("list", help="List open duplicate candidates")
    dup_list.add_argument("--limit", type=int, default=100)
    dup_dismiss = dup_sub.add_parser("dismiss", help="Dismiss an open candidate")
    dup_dismiss.add_argument("--candidate-id", type=str, required=True)
    dup_dismiss.add_argument("--actor-id", type=str)

    merge = subparsers.add_parser("merge", help="Merge and undo")
    merge_sub = merge.add_subparsers(dest="merge_command", required=True)
    merge_apply = merge_sub.add_parser("apply", help="Merge one lead into another")
    payload_source = merge_apply.add_mutually_exclusive_group(required=True)
    payload_source.add_argument(
        "--payload",
        type=str,
        help='JSON: {"survivorId", "mergedId", "strategy", "chosenFields"}',
    )
    payload_source.add_argument("--payload-file", type=Path, help="Path to a JSON payload")
    merge_apply.add_argument("--initiator", type=str)
    merge_undo = merge_sub.add_parser("undo", help="Undo a merge inside its window")
    merge_undo.add_argument("--merge-id", type=str, required=True)
    merge_undo.add_argument("--actor-id", type=str)

    attendance = subparsers.add_parser("attendance", help="Clock transitions and summaries")
    att_sub = attendance.add_subparsers(dest="attendance_command", required=True)
    for name in CLOCK_COMMANDS:
        transition = att_sub.add_parser(name, help=f"{name.replace('-', ' ')} for a user")
        transition.add_argument("--user-id", type=str, required=True)
    recompute = att_sub.add_parser("recompute", help="Rebuild one day's summary")
    recompute.add_argument("--user-id", type=str, required=True)
    recompute.add_argument("--day", type=str, required=True, help="YYYY-MM-DD")
    att_sub.add_parser("sweep", help="Flag sessions left open too long")

    report = subparsers.add_parser("report", help="Reports")
    report_sub = report.add_subparsers(dest="report_command", required=True)
    work_hours = report_sub.add_parser("work-hours", help="Per-user work hours")
    work_hours.add_argument("--period", choices=[p.value for p in ReportPeriod])
    work_hours.add_argument("--start", type=str, help="Inclusive start day (YYYY-MM-DD)")
    work_hours.add_argument("--end", type=str, help="Inclusive end day (YYYY-MM-DD)")
    work_hours.add_argument("--timezone", type=str, help="Business timezone for --period")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))  # noqa: T201


def _candidate_payload(candidate: DuplicateCandidate) -> dict[str, object]:
    return {
        "id": str(candidate.id),
        "entity_type": candidate.entity_type.value,
        "primary_id": str(candidate.primary_id),
        "duplicate_id": str(candidate.duplicate_id),
        "match_type": candidate.match_type.value,
        "confidence": candidate.confidence,
        "reason": candidate.reason,
        "status": candidate.status.value,
    }


def _merge_payload(merge: LeadMerge) -> dict[str, object]:
    return {
        "id": str(merge.id),
        "survivor_id": str(merge.survivor_id),
        "merged_id": str(merge.merged_id),
        "strategy": merge.strategy,
        "outcomes_moved": len(merge.moved_outcome_ids),
        "activities_moved": len(merge.moved_activity_ids),
        "undo_until": merge.undo_until.isoformat(),
        "is_undone": merge.is_undone,
    }


def _session_payload(session: AttendanceSession) -> dict[str, object]:
    return {
        "id": str(session.id),
        "user_id": str(session.user_id),
        "session_date": session.session_date.isoformat(),
        "status": session.status.value,
    }


def _run_lead(args: argparse.Namespace) -> object:
    if args.lead_command == "add":
        lead = app.create_lead(
            company_name=args.company_name,
            contact_name=args.contact_name,
            phone=args.phone,
            email=args.email,
            website=args.website,
            city=args.city,
            notes=args.notes,
        )
        return lead.snapshot()
    if args.lead_command == "outcome":
        outcome = app.record_lead_outcome(
            _parse_uuid(args.lead_id),
            args.outcome,
            notes=args.notes,
            created_by=args.created_by,
        )
        return {"id": str(outcome.id), "lead_id": str(outcome.lead_id), "outcome": outcome.outcome}
    return app.resolve_lead(_parse_uuid(args.lead_id)).snapshot()


def _run_duplicates(args: argparse.Namespace) -> object:
    if args.duplicates_command == "scan":
        result = app.scan_duplicates(
            args.entity_type,
            batch_size=args.batch_size,
            offset=args.offset,
        )
        return result.to_payload()
    if args.duplicates_command == "list":
        return [_candidate_payload(c) for c in app.list_duplicate_candidates(limit=args.limit)]
    candidate = app.dismiss_duplicate(_parse_uuid(args.candidate_id), actor_id=args.actor_id)
    return _candidate_payload(candidate)


def _run_merge(args: argparse.Namespace) -> object:
    if args.merge_command == "apply":
        raw = args.payload if args.payload is not None else args.payload_file.read_text()
        request = parse_merge_payload(raw).to_request(initiator=args.initiator)
        return _merge_payload(app.merge_records(request))
    return _merge_payload(app.undo_merge(_parse_uuid(args.merge_id), actor_id=args.actor_id))


def _run_attendance(args: argparse.Namespace) -> object:
    command = args.attendance_command
    if command == "sweep":
        return [_session_payload(session) for session in app.sweep_stale_sessions()]
    user_id = _parse_uuid(args.user_id)
    if command == "recompute":
        return app.recompute_day(user_id, parse_day(args.day)).to_payload()
    transitions: dict[str, Callable[[UUID], ClockTransition]] = {
        "clock-in": app.clock_in,
        "clock-out": app.clock_out,
        "break-start": app.start_break,
        "break-end": app.end_break,
    }
    return transitions[command](user_id).to_payload()


def _run_report(args: argparse.Namespace) -> object:
    query = parse_work_hours_query(
        {
            "period": args.period,
            "start": args.start,
            "end": args.end,
            "timezone": args.timezone,
        }
    )
    report = app.work_hours(
        period=query.period,
        start=query.start,
        end=query.end,
        timezone=query.timezone,
    )
    return report.to_payload()


_HANDLERS: dict[str, Callable[[argparse.Namespace], object]] = {
    "lead": _run_lead,
    "duplicates": _run_duplicates,
    "merge": _run_merge,
    "attendance": _run_attendance,
    "report": _run_report,
}


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        payload = _HANDLERS[parsed_args.command](parsed_args)
    except AgencyOpsError as exc:
        log.error("%s: %s", exc.code, exc)  # noqa: TRY400
        _emit({"error": exc.to_payload()})
        sys.exit(2 if exc.kind is ErrorKind.VALIDATION else 1)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)

    _emit(payload)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

"""Error taxonomy shared by the dedup and attendance engines.

Every error carries a coarse :class:`ErrorKind` (what the caller should do about
it) and a stable machine-readable ``code``. The HTTP layer maps kinds onto status
codes; the CLI maps them onto exit codes.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    FAILURE = "failure"
    INFRASTRUCTURE = "infrastructure"


class AgencyOpsError(Exception):
    """Base class for errors raised by the core."""

    kind: ClassVar[ErrorKind] = ErrorKind.FAILURE
    code: ClassVar[str] = "error"

    def to_payload(self) -> dict[str, str]:
        return {"kind": self.kind.value, "code": self.code, "message": str(self)}


# Validation ------------------------------------------------------------------


class ValidationError(AgencyOpsError, ValueError):
    kind = ErrorKind.VALIDATION
    code = "invalid_request"


class InvalidFieldChoiceError(ValidationError):
    code = "invalid_field_choice"

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Field {field_name!r} cannot be chosen during a merge")


class InvalidDayError(ValidationError):
    code = "invalid_day"


class UnsupportedEntityTypeError(ValidationError):
    code = "unsupported_entity_type"


# State conflicts -------------------------------------------------------------


class StateConflictError(AgencyOpsError):
    kind = ErrorKind.CONFLICT
    code = "conflict"


class AlreadyClockedInError(StateConflictError):
    code = "already_clocked_in"

    def __init__(self, user_id: UUID) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} is already clocked in")


class NoOpenSessionError(StateConflictError):
    code = "no_open_session"

    def __init__(self, user_id: UUID) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} has no open session")


class BreakAlreadyActiveError(StateConflictError):
    code = "break_already_active"

    def __init__(self, session_id: UUID) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} already has an active break")


class NoActiveBreakError(StateConflictError):
    code = "no_active_break"

    def __init__(self, session_id: UUID) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} has no active break")


class AlreadyUndoneError(StateConflictError):
    code = "already_undone"

    def __init__(self, merge_id: UUID) -> None:
        self.merge_id = merge_id
        super().__init__(f"Merge {merge_id} has already been undone")


class UndoWindowExpiredError(StateConflictError):
    code = "undo_window_expired"

    def __init__(self, merge_id: UUID, undo_until: datetime) -> None:
        self.merge_id = merge_id
        self.undo_until = undo_until
        super().__init__(f"Undo window for merge {merge_id} closed at {undo_until.isoformat()}")


class CandidateNotOpenError(StateConflictError):
    code = "candidate_not_open"

    def __init__(self, candidate_id: UUID, status: str) -> None:
        self.candidate_id = candidate_id
        super().__init__(f"Candidate {candidate_id} is {status}, not open")


# Not found -------------------------------------------------------------------


class NotFoundError(AgencyOpsError, LookupError):
    kind = ErrorKind.NOT_FOUND
    code = "not_found"


class LeadNotFoundError(NotFoundError):
    code = "lead_not_found"

    def __init__(self, lead_id: UUID) -> None:
        self.lead_id = lead_id
        super().__init__(f"Lead {lead_id} does not exist or has already been merged")


class MergeNotFoundError(NotFoundError):
    code = "merge_not_found"

    def __init__(self, merge_id: UUID) -> None:
        self.merge_id = merge_id
        super().__init__(f"Merge record {merge_id} not found")


class CandidateNotFoundError(NotFoundError):
    code = "candidate_not_found"

    def __init__(self, candidate_id: UUID) -> None:
        self.candidate_id = candidate_id
        super().__init__(f"Duplicate candidate {candidate_id} not found")


# Failures --------------------------------------------------------------------


class MergeFailedError(AgencyOpsError):
    """A merge step failed; the unit of work was rolled back as a whole."""

    kind = ErrorKind.FAILURE
    code = "merge_failed"


class StoreUnavailableError(AgencyOpsError):
    kind = ErrorKind.INFRASTRUCTURE
    code = "store_unavailable"


"""Duplicate detection, merge and undo."""

from __future__ import annotations

from agencyops.domain.dedup.merge import LeadFieldChoices, MergeRequest, merge_leads
from agencyops.domain.dedup.redirects import (
    candidates_for_lead,
    dismiss_candidate,
    list_open_candidates,
    resolve_lead_id,
)
from agencyops.domain.dedup.scanner import ScanResult, find_candidates, scan_for_duplicates
from agencyops.domain.dedup.scoring import MatchFingerprint, MatchScore, score_pair
from agencyops.domain.dedup.undo import undo_merge

__all__ = [
    "LeadFieldChoices",
    "MatchFingerprint",
    "MatchScore",
    "MergeRequest",
    "ScanResult",
    "candidates_for_lead",
    "dismiss_candidate",
    "find_candidates",
    "list_open_candidates",
    "merge_leads",
    "resolve_lead_id",
    "scan_for_duplicates",
    "score_pair",
    "undo_merge",
]

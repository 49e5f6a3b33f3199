"""Duplicate scan and merge defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import optional_env_int

DEFAULT_SCAN_BATCH_SIZE = 1000
DEFAULT_UNDO_WINDOW_DAYS = 7


@dataclass(frozen=True, slots=True)
class DedupConfig:
    scan_batch_size: int = DEFAULT_SCAN_BATCH_SIZE
    undo_window: timedelta = timedelta(days=DEFAULT_UNDO_WINDOW_DAYS)


def get_dedup_config() -> DedupConfig:
    return DedupConfig(
        scan_batch_size=optional_env_int("AGENCYOPS_SCAN_BATCH_SIZE", DEFAULT_SCAN_BATCH_SIZE),
        undo_window=timedelta(
            days=optional_env_int("AGENCYOPS_UNDO_WINDOW_DAYS", DEFAULT_UNDO_WINDOW_DAYS)
        ),
    )

"""Deterministic clocks for tests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agencyops.domain.days import Clock


def make_clock(reference: datetime) -> Clock:
    def _clock() -> datetime:
        return reference

    return _clock


@dataclass
class SteppingClock:
    """A clock the test moves forward explicitly."""

    now: datetime

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now

    def set(self, value: datetime) -> datetime:
        self.now = value
        return self.now

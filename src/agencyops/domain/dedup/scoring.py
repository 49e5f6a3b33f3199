"""Deterministic pairwise match rules for duplicate detection.

Rules run in priority order and the first one that fires decides the pair's
match type and confidence; later rules are not evaluated for that pair.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from agencyops.domain.model import MatchType
from agencyops.domain.normalization import (
    normalize_email,
    normalize_name,
    normalize_phone,
    values_match,
)

if TYPE_CHECKING:
    from agencyops.domain.model import Lead


@dataclass(frozen=True, slots=True)
class MatchFingerprint:
    """Normalized fields of one record, computed once per scan."""

    phone: str | None
    email: str | None
    name: str | None
    city: str | None

    @classmethod
    def of(cls, lead: Lead) -> MatchFingerprint:
        return cls(
            phone=normalize_phone(lead.phone),
            email=normalize_email(lead.email),
            name=normalize_name(lead.company_name),
            city=normalize_name(lead.city),
        )


@dataclass(frozen=True, slots=True)
class MatchScore:
    match_type: MatchType
    confidence: int
    reason: dict[str, str] = field(default_factory=dict[str, str])


type MatchRule = Callable[[MatchFingerprint, MatchFingerprint], MatchScore | None]


def phone_rule(left: MatchFingerprint, right: MatchFingerprint) -> MatchScore | None:
    if values_match(left.phone, right.phone):
        assert left.phone is not None
        return MatchScore(MatchType.PHONE, 95, {"field": "phone", "value": left.phone})
    return None


def email_rule(left: MatchFingerprint, right: MatchFingerprint) -> MatchScore | None:
    if values_match(left.email, right.email):
        assert left.email is not None
        return MatchScore(MatchType.EMAIL, 95, {"field": "email", "value": left.email})
    return None


def name_city_rule(left: MatchFingerprint, right: MatchFingerprint) -> MatchScore | None:
    if values_match(left.name, right.name) and values_match(left.city, right.city):
        assert left.name is not None
        assert left.city is not None
        return MatchScore(MatchType.NAME_CITY, 70, {"name": left.name, "city": left.city})
    return None


DEFAULT_RULES: Final[tuple[MatchRule, ...]] = (phone_rule, email_rule, name_city_rule)


def score_fingerprints(
    left: MatchFingerprint,
    right: MatchFingerprint,
    *,
    rules: tuple[MatchRule, ...] = DEFAULT_RULES,
) -> MatchScore | None:
    for rule in rules:
        score = rule(left, right)
        if score is not None:
            return score
    return None


def score_pair(left: Lead, right: Lead) -> MatchScore | None:
    """Score two leads; ``None`` when no rule matches."""

    return score_fingerprints(MatchFingerprint.of(left), MatchFingerprint.of(right))

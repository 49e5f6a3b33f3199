"""Canonical forms for contact fields used by duplicate matching.

All helpers are pure. Null or blank input yields ``None`` so that two absent
values are never treated as equal; use :func:`values_match` for comparisons.
"""

from __future__ import annotations

import re
from typing import Final

PHONE_DIGITS: Final[int] = 10

_NON_DIGITS = re.compile(r"[^0-9]")
_WHITESPACE_RUN = re.compile(r"\s+")
_URL_SCHEME = re.compile(r"^https?://")
_WWW_PREFIX = re.compile(r"^www\.")


def normalize_phone(phone: str | None) -> str | None:
    """Strip non-digits and keep the trailing 10 digits.

    Country codes and trunk prefixes are dropped by truncation, so two numbers that
    only differ in their leading digits collapse to the same value.
    """

    if not phone:
        return None
    digits = _NON_DIGITS.sub("", phone)
    if not digits:
        return None
    if len(digits) > PHONE_DIGITS:
        return digits[-PHONE_DIGITS:]
    return digits


def normalize_email(email: str | None) -> str | None:
    if email is None:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def normalize_name(name: str | None) -> str | None:
    """Lowercase, trim and collapse whitespace runs to single spaces."""

    if name is None:
        return None
    cleaned = _WHITESPACE_RUN.sub(" ", name.strip().lower())
    return cleaned or None


def extract_domain(url: str | None) -> str | None:
    """Return the bare host of a website value (no scheme, ``www.`` or path)."""

    if url is None:
        return None
    domain = url.strip().lower()
    domain = _URL_SCHEME.sub("", domain)
    domain = _WWW_PREFIX.sub("", domain)
    domain = domain.split("/", 1)[0]
    return domain or None


def values_match(left: str | None, right: str | None) -> bool:
    return left is not None and right is not None and left == right

#!/usr/bin/env python3
"""
Tag normalization and containment matching.

Every scoring signal compares free-form tags the same way: lower-case,
trim, then a two-way substring test. Keeping that in one place means the
five signals cannot drift apart.
"""

from typing import FrozenSet, Iterable, Optional


def normalize(value: Optional[str]) -> str:
    if not value:
        return ""
    return str(value).lower().strip()


def normalize_all(values: Iterable[Optional[str]]) -> FrozenSet[str]:
    """Normalize a tag group, dropping empty tokens.

    Empty strings are substrings of everything and would match any group.
    """
    return frozenset(t for t in (normalize(v) for v in values or ()) if t)


def overlaps(token: str, group: FrozenSet[str], text: str = "") -> bool:
    """True if token contains or is contained by any group tag, or occurs in text."""
    if not token:
        return False
    for tag in group:
        if tag in token or token in tag:
            return True
    return bool(text) and token in text


def count_matches(tokens: FrozenSet[str], group: FrozenSet[str], text: str = "") -> int:
    return sum(1 for token in tokens if overlaps(token, group, text))

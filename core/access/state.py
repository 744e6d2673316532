"""Early-access state derivation.

The locked/unlocked concept is computed here and nowhere else, from the
restriction flag, its expiry, whether the user holds an unlock, and the
current time. Nothing is persisted when a restriction lapses.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from core.utils import as_utc


class AccessStatus(str, Enum):
    """Early-access state of an opportunity for one user."""
    NOT_RESTRICTED = "not_restricted"
    RESTRICTED_LOCKED = "restricted_locked"
    RESTRICTED_UNLOCKED = "restricted_unlocked"


def is_restriction_active(
    is_restricted: bool,
    restricted_until: Optional[datetime],
    now: datetime
) -> bool:
    if not is_restricted or restricted_until is None:
        return False
    return as_utc(now) < as_utc(restricted_until)


def access_status(
    is_restricted: bool,
    restricted_until: Optional[datetime],
    has_unlock: bool,
    now: datetime
) -> AccessStatus:
    if not is_restriction_active(is_restricted, restricted_until, now):
        return AccessStatus.NOT_RESTRICTED
    if has_unlock:
        return AccessStatus.RESTRICTED_UNLOCKED
    return AccessStatus.RESTRICTED_LOCKED


def is_locked(
    is_restricted: bool,
    restricted_until: Optional[datetime],
    has_unlock: bool,
    now: datetime
) -> bool:
    return access_status(is_restricted, restricted_until, has_unlock, now) == AccessStatus.RESTRICTED_LOCKED

#!/usr/bin/env python3
"""
Tier Policy - Subscription tiers, monthly quotas and the reset rule.

Tiers are static configuration: the built-in table below can be partially
overridden from the ``tiers`` section of config.yaml.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional, Union

from core.config_loader import TierOverride
from core.utils import utcnow, as_utc, add_months

logger = logging.getLogger(__name__)

UNLIMITED = -1
RESET_AFTER = timedelta(days=30)


class SubscriptionTier(str, Enum):
    FREE = "FREE"
    STUDENT_PREMIUM = "STUDENT_PREMIUM"
    STUDENT_PRO = "STUDENT_PRO"


@dataclass(frozen=True)
class TierQuota:
    monthly_actions: int  # -1 = unlimited
    documents_allowed: int
    early_access: bool
    external_tracking: bool
    free_unlocks: int
    monthly_credits: int

    @property
    def unlimited(self) -> bool:
        return self.monthly_actions == UNLIMITED


@dataclass
class QuotaState:
    """Per-user counters; the persisted row has the same attributes."""
    actions_this_period: int = 0
    period_anchor: Optional[datetime] = None
    free_unlocks_remaining: int = 0


@dataclass(frozen=True)
class QuotaCheck:
    allowed: bool
    used: int
    remaining: Optional[int]  # None = unbounded
    max_actions: int
    next_reset_at: datetime
    reset_due: bool = False


DEFAULT_TIERS: Dict[SubscriptionTier, TierQuota] = {
    SubscriptionTier.FREE: TierQuota(
        monthly_actions=4,
        documents_allowed=0,
        early_access=False,
        external_tracking=False,
        free_unlocks=0,
        monthly_credits=20,
    ),
    SubscriptionTier.STUDENT_PREMIUM: TierQuota(
        monthly_actions=10,
        documents_allowed=1,
        early_access=False,
        external_tracking=True,
        free_unlocks=5,
        monthly_credits=100,
    ),
    SubscriptionTier.STUDENT_PRO: TierQuota(
        monthly_actions=UNLIMITED,
        documents_allowed=1,
        early_access=True,
        external_tracking=True,
        free_unlocks=0,
        monthly_credits=200,
    ),
}

_UPGRADE_PATH = {
    SubscriptionTier.FREE: SubscriptionTier.STUDENT_PREMIUM,
    SubscriptionTier.STUDENT_PREMIUM: SubscriptionTier.STUDENT_PRO,
}


def parse_tier(tier: Union[str, SubscriptionTier, None]) -> SubscriptionTier:
    if isinstance(tier, SubscriptionTier):
        return tier
    try:
        return SubscriptionTier(str(tier).upper())
    except ValueError:
        logger.warning(f"Unknown subscription tier '{tier}', falling back to FREE")
        return SubscriptionTier.FREE


def should_reset(period_anchor: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Reset after 30 full days, or as soon as the calendar month changes."""
    if period_anchor is None:
        return True
    now = as_utc(now) if now else utcnow()
    anchor = as_utc(period_anchor)

    if now - anchor >= RESET_AFTER:
        return True
    return (now.year, now.month) != (anchor.year, anchor.month)


def next_reset_at(period_anchor: datetime) -> datetime:
    """Earliest moment the reset rule fires for this anchor."""
    anchor = as_utc(period_anchor)
    month_start = anchor.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return min(anchor + RESET_AFTER, add_months(month_start, 1))


class TierPolicy:
    """Maps tiers to quotas and evaluates quota state against them."""

    def __init__(self, overrides: Optional[Dict[str, TierOverride]] = None):
        self._tiers = dict(DEFAULT_TIERS)
        for name, override in (overrides or {}).items():
            tier = parse_tier(name)
            changes = override.model_dump(exclude_none=True)
            if changes:
                self._tiers[tier] = replace(self._tiers[tier], **changes)
                logger.info(f"Tier {tier.value} overridden: {changes}")

    def quota_for(self, tier: Union[str, SubscriptionTier]) -> TierQuota:
        return self._tiers[parse_tier(tier)]

    def should_reset(self, period_anchor: Optional[datetime], now: Optional[datetime] = None) -> bool:
        return should_reset(period_anchor, now)

    def check_quota(
        self,
        state,
        tier: Union[str, SubscriptionTier],
        now: Optional[datetime] = None
    ) -> QuotaCheck:
        """
        Evaluate a quota state (anything with ``actions_this_period`` and
        ``period_anchor``) against a tier.

        A pending reset is applied before evaluation, so the action that
        discovers an expired period sees a fresh quota.
        """
        now = as_utc(now) if now else utcnow()
        quota = self.quota_for(tier)

        reset_due = should_reset(state.period_anchor, now)
        used = 0 if reset_due else max(0, state.actions_this_period or 0)
        anchor = now if reset_due else as_utc(state.period_anchor)
        reset_at = next_reset_at(anchor)

        if quota.unlimited:
            return QuotaCheck(
                allowed=True,
                used=used,
                remaining=None,
                max_actions=UNLIMITED,
                next_reset_at=reset_at,
                reset_due=reset_due
            )

        return QuotaCheck(
            allowed=used < quota.monthly_actions,
            used=used,
            remaining=max(0, quota.monthly_actions - used),
            max_actions=quota.monthly_actions,
            next_reset_at=reset_at,
            reset_due=reset_due
        )

    def can_attach_documents(self, tier: Union[str, SubscriptionTier]) -> bool:
        return self.quota_for(tier).documents_allowed > 0

    def upgrade_suggestion(self, tier: Union[str, SubscriptionTier]) -> Optional[str]:
        tier = parse_tier(tier)
        target = _UPGRADE_PATH.get(tier)
        if target is None:
            return None

        current = self.quota_for(tier)
        upgraded = self.quota_for(target)
        offered = "unlimited" if upgraded.unlimited else str(upgraded.monthly_actions)
        return (
            f"You've reached your monthly limit of {current.monthly_actions} actions. "
            f"Upgrade to {target.value} for {offered} actions per month."
        )

#!/usr/bin/env python3
"""
Quota Service - Persisted monthly action counters.

Order of operations matters: a pending period reset is applied before the
check that discovered it, and a unit is consumed only once the gated
action has validated and is about to commit.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from core.utils import utcnow, as_utc
from core.access.exceptions import ConcurrentModification, NotFound, QuotaExceeded
from core.access.tier_policy import QuotaCheck, TierPolicy, TierQuota, should_reset

logger = logging.getLogger(__name__)


class QuotaService:
    def __init__(self, tier_policy: Optional[TierPolicy] = None):
        self.tier_policy = tier_policy or TierPolicy()

    def current_state(self, uow, user_id: str, now: Optional[datetime] = None) -> Tuple[object, str]:
        """
        Return the user's quota row with any due reset already applied,
        together with the account tier.

        Resets are a compare-and-swap on the row version: if another request
        reset first, ConcurrentModification is raised and the caller retries
        against the fresh row.
        """
        now = as_utc(now) if now else utcnow()

        account = uow.accounts.get_account(user_id)
        if account is None:
            raise NotFound("account", user_id)
        tier_quota = self.tier_policy.quota_for(account.tier)

        row = uow.quotas.get(user_id)
        if row is None:
            row = uow.quotas.create(user_id, anchor=now, free_unlocks=tier_quota.free_unlocks)
            logger.info(f"Opened quota period for {user_id} at {now.isoformat()}")
            return row, account.tier

        if should_reset(row.period_anchor, now):
            if not uow.quotas.reset(user_id, row.version, now, tier_quota.free_unlocks):
                raise ConcurrentModification(f"Quota period for {user_id} reset concurrently")
            logger.info(
                f"Quota period reset for {user_id}: {row.actions_this_period} actions "
                f"since {as_utc(row.period_anchor).isoformat()}"
            )
            row = uow.quotas.get(user_id)

        return row, account.tier

    def check(self, uow, user_id: str, now: Optional[datetime] = None) -> QuotaCheck:
        now = as_utc(now) if now else utcnow()
        row, tier = self.current_state(uow, user_id, now)
        return self.tier_policy.check_quota(row, tier, now)

    def ensure_allowed(self, uow, user_id: str, now: Optional[datetime] = None) -> QuotaCheck:
        now = as_utc(now) if now else utcnow()
        row, tier = self.current_state(uow, user_id, now)
        result = self.tier_policy.check_quota(row, tier, now)
        if not result.allowed:
            raise self._exceeded(result, tier)
        return result

    def consume(self, uow, user_id: str, now: Optional[datetime] = None) -> QuotaCheck:
        """
        Count one action against the current period.

        Raises:
            QuotaExceeded: the period's allowance is used up
            ConcurrentModification: the period was reset underneath us
        """
        now = as_utc(now) if now else utcnow()
        row, tier = self.current_state(uow, user_id, now)
        tier_quota: TierQuota = self.tier_policy.quota_for(tier)
        max_actions = None if tier_quota.unlimited else tier_quota.monthly_actions

        version = row.version
        if not uow.quotas.increment(user_id, version, max_actions):
            latest = uow.quotas.get(user_id)
            if latest is None or latest.version != version:
                raise ConcurrentModification(f"Quota period for {user_id} changed during consume")
            result = self.tier_policy.check_quota(latest, tier, now)
            raise self._exceeded(result, tier)

        row = uow.quotas.get(user_id)
        return self.tier_policy.check_quota(row, tier, now)

    def _exceeded(self, result: QuotaCheck, tier: str) -> QuotaExceeded:
        logger.info(f"Quota exhausted ({result.used}/{result.max_actions}) until {result.next_reset_at.isoformat()}")
        return QuotaExceeded(
            used=result.used,
            max_actions=result.max_actions,
            next_reset_at=result.next_reset_at,
            suggestion=self.tier_policy.upgrade_suggestion(tier)
        )

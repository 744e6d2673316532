#!/usr/bin/env python3
"""
Early Access Gate - Visibility and unlock transitions for restricted opportunities.

States per (user, opportunity), derived by ``core.access.state.access_status``:

    NOT_RESTRICTED       no active restriction (never restricted, or expired)
    RESTRICTED_LOCKED    restriction active, user has not unlocked
    RESTRICTED_UNLOCKED  restriction active, user holds an UnlockRecord

Payment for an unlock is resolved in strict priority order: tier grant,
then the free-unlock allowance, then a credit debit.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from core.config_loader import AccessConfig
from core.utils import utcnow, as_utc
from core.access.exceptions import NotFound
from core.access.ledger import CreditLedger
from core.access.quota import QuotaService
from core.access.state import AccessStatus, access_status, is_restriction_active
from core.access.tier_policy import TierPolicy

logger = logging.getLogger(__name__)


class UnlockMethod(str, Enum):
    TIER = "tier"
    FREE_ALLOWANCE = "freeAllowance"
    CREDITS = "credits"


@dataclass(frozen=True)
class UnlockResult:
    success: bool
    method: Optional[UnlockMethod]
    credits_remaining: int
    already_unlocked: bool = False
    credits_spent: int = 0
    free_unlocks_remaining: Optional[int] = None


class EarlyAccessGate:
    def __init__(
        self,
        ledger: Optional[CreditLedger] = None,
        quota_service: Optional[QuotaService] = None,
        tier_policy: Optional[TierPolicy] = None,
        config: Optional[AccessConfig] = None
    ):
        self.tier_policy = tier_policy or TierPolicy()
        self.config = config or AccessConfig()
        self.ledger = ledger or CreditLedger(self.tier_policy, self.config)
        self.quota_service = quota_service or QuotaService(self.tier_policy)

    def status_for(self, uow, user_id: str, opportunity_id: str, now: Optional[datetime] = None) -> AccessStatus:
        now = as_utc(now) if now else utcnow()
        opportunity = uow.opportunities.get_opportunity(opportunity_id)
        if opportunity is None:
            raise NotFound("opportunity", opportunity_id)

        has_unlock = uow.unlocks.get_unlock(user_id, opportunity_id) is not None
        return access_status(
            opportunity.access.is_restricted,
            opportunity.access.restricted_until,
            has_unlock,
            now
        )

    def attempt_unlock(
        self,
        uow,
        user_id: str,
        opportunity_id: str,
        now: Optional[datetime] = None
    ) -> UnlockResult:
        """
        Unlock a restricted opportunity for one user.

        Idempotent: an existing UnlockRecord, or an opportunity that is not
        currently restricted, is a successful no-op. A concurrent unlock
        surfaces as ConcurrentModification from the record insert, which
        rolls back any payment made in this unit of work.

        Raises:
            NotFound: unknown opportunity or account
            InsufficientCredits: credit payment required but balance too low
        """
        now = as_utc(now) if now else utcnow()

        opportunity = uow.opportunities.get_opportunity(opportunity_id)
        if opportunity is None:
            raise NotFound("opportunity", opportunity_id)

        account = uow.accounts.get_account(user_id)
        if account is None:
            raise NotFound("account", user_id)

        existing = uow.unlocks.get_unlock(user_id, opportunity_id)
        if existing is not None:
            return UnlockResult(
                success=True,
                method=UnlockMethod(existing.method),
                credits_remaining=account.balance,
                already_unlocked=True
            )

        access = opportunity.access
        if not is_restriction_active(access.is_restricted, access.restricted_until, now):
            return UnlockResult(success=True, method=None, credits_remaining=account.balance)

        credits_spent = 0
        free_unlocks_remaining = None

        if self.tier_policy.quota_for(account.tier).early_access:
            method = UnlockMethod.TIER
        else:
            quota_row, _ = self.quota_service.current_state(uow, user_id, now)
            if quota_row.free_unlocks_remaining > 0 and uow.quotas.use_free_unlock(user_id):
                method = UnlockMethod.FREE_ALLOWANCE
                free_unlocks_remaining = quota_row.free_unlocks_remaining - 1
            else:
                method = UnlockMethod.CREDITS
                cost = access.unlock_cost if access.unlock_cost is not None else self.config.default_unlock_cost
                if cost > 0:
                    self.ledger.debit(uow, user_id, cost, f"unlock:{opportunity_id}")
                    credits_spent = cost

        uow.unlocks.create_unlock(user_id, opportunity_id, method.value)

        balance = uow.accounts.get_balance(user_id)
        logger.info(f"Unlocked {opportunity_id} for {user_id} via {method.value} (spent {credits_spent})")

        return UnlockResult(
            success=True,
            method=method,
            credits_remaining=balance,
            credits_spent=credits_spent,
            free_unlocks_remaining=free_unlocks_remaining
        )

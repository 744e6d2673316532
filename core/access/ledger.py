#!/usr/bin/env python3
"""
Credit Ledger - Atomic balance changes with an append-only transaction log.

Every operation runs inside the caller's unit of work: the balance update
and its CreditTransaction are committed together or rolled back together,
so a failed log write can never leave an orphaned balance change.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Optional

from core.config_loader import AccessConfig
from core.utils import utcnow, as_utc
from core.access.exceptions import ConcurrentModification, InsufficientCredits, NotFound
from core.access.tier_policy import TierPolicy, should_reset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerResult:
    success: bool
    new_balance: int
    transaction_id: Any


def fold_balance(transactions: Iterable) -> int:
    """Reconstruct a balance from its transactions (signed amounts)."""
    return sum(tx.amount for tx in transactions)


class CreditLedger:
    def __init__(self, tier_policy: Optional[TierPolicy] = None, config: Optional[AccessConfig] = None):
        self.tier_policy = tier_policy or TierPolicy()
        self.config = config or AccessConfig()

    def _require_account(self, uow, user_id: str):
        account = uow.accounts.get_account(user_id)
        if account is None:
            raise NotFound("account", user_id)
        return account

    def debit(self, uow, user_id: str, amount: int, reason: str) -> LedgerResult:
        """
        Spend credits.

        Raises:
            ValueError: amount is not positive
            NotFound: no account for user_id
            InsufficientCredits: amount exceeds the balance (nothing changes)
        """
        if amount <= 0:
            raise ValueError(f"Debit amount must be positive, got {amount}")

        self._require_account(uow, user_id)

        if not uow.accounts.decrement_balance(user_id, amount):
            available = uow.accounts.get_balance(user_id) or 0
            logger.info(f"Debit of {amount} refused for {user_id}: balance {available}")
            raise InsufficientCredits(required=amount, available=available)

        new_balance = uow.accounts.get_balance(user_id)
        tx = uow.accounts.add_transaction(
            user_id=user_id,
            amount=-amount,
            kind='spent',
            reason=reason,
            balance_after=new_balance
        )

        logger.info(f"Debited {amount} from {user_id} ({reason}); balance {new_balance}")
        return LedgerResult(success=True, new_balance=new_balance, transaction_id=tx.id)

    def credit(self, uow, user_id: str, amount: int, reason: str) -> LedgerResult:
        """Add credits. No ceiling; lifetime_spent is never touched."""
        if amount <= 0:
            raise ValueError(f"Credit amount must be positive, got {amount}")

        self._require_account(uow, user_id)

        if not uow.accounts.increment_balance(user_id, amount):
            raise NotFound("account", user_id)

        new_balance = uow.accounts.get_balance(user_id)
        tx = uow.accounts.add_transaction(
            user_id=user_id,
            amount=amount,
            kind='credit',
            reason=reason,
            balance_after=new_balance
        )

        logger.info(f"Credited {amount} to {user_id} ({reason}); balance {new_balance}")
        return LedgerResult(success=True, new_balance=new_balance, transaction_id=tx.id)

    def spend_for_action(self, uow, user_id: str, action: str) -> LedgerResult:
        cost = self.config.action_costs.get(action.upper())
        if cost is None:
            raise ValueError(
                f"Unknown credit action '{action}'. "
                f"Valid options: {', '.join(self.config.action_costs.keys())}"
            )
        return self.debit(uow, user_id, cost, f"action:{action.upper()}")

    def refresh_monthly(self, uow, user_id: str, now: Optional[datetime] = None) -> Optional[LedgerResult]:
        """
        Top the balance up (or down) to the tier's monthly allocation.

        Runs at most once per period, using the same reset rule as quotas.
        The signed delta is logged so folding transactions still yields the
        balance. Returns None when no refresh is due.
        """
        now = as_utc(now) if now else utcnow()
        account = self._require_account(uow, user_id)

        if account.credits_refreshed_at is not None and not should_reset(account.credits_refreshed_at, now):
            return None

        allocation = self.tier_policy.quota_for(account.tier).monthly_credits
        before = account.balance

        if not uow.accounts.replace_balance(user_id, before, allocation, now):
            raise ConcurrentModification(f"Balance of {user_id} changed during monthly refresh")

        tx = uow.accounts.add_transaction(
            user_id=user_id,
            amount=allocation - before,
            kind='monthly_refresh',
            reason=f"monthly_refresh:{account.tier}",
            balance_after=allocation
        )

        logger.info(f"Monthly refresh for {user_id} ({account.tier}): {before} -> {allocation}")
        return LedgerResult(success=True, new_balance=allocation, transaction_id=tx.id)

    def history(self, uow, user_id: str, limit: Optional[int] = 50) -> List:
        self._require_account(uow, user_id)
        return uow.accounts.list_transactions(user_id, limit=limit)

#!/usr/bin/env python3
"""
Engine Service - Caller-facing facade over matching, quotas, credits and unlocks.

Each call runs in its own unit of work. Operations that lose a race with a
concurrent write (ConcurrentModification) are retried a bounded number of
times, by count, against a fresh unit of work before the error surfaces.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from core.config_loader import AppConfig
from core.utils import utcnow, as_utc
from core.access import (
    ConcurrentModification,
    CreditLedger,
    EarlyAccessGate,
    LedgerResult,
    NotFound,
    OpportunityLocked,
    QuotaCheck,
    QuotaExceeded,
    QuotaService,
    SubscriptionTier,
    TierPolicy,
    UnlockResult,
    access_status,
    parse_tier,
)
from core.access.state import AccessStatus
from core.matching import DailyPicksSelector, Feed, Profile, ScoringEngine
from database.database import Database
from database.repositories import OpportunityFilter
from database.uow import engine_uow, UnitOfWork
from notification.events import EngineEvent, EventPublisher

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ApplyResult:
    success: bool
    opportunity_id: str
    already_applied: bool
    quota: QuotaCheck


@dataclass(frozen=True)
class CreditSummary:
    user_id: str
    tier: str
    balance: int
    lifetime_spent: int
    free_unlocks_remaining: int


class EngineService:
    def __init__(
        self,
        db: Database,
        config: Optional[AppConfig] = None,
        publisher: Optional[EventPublisher] = None
    ):
        self.db = db
        self.config = config or AppConfig()
        self.publisher = publisher or EventPublisher(self.config.notifications)

        self.tier_policy = TierPolicy(self.config.tiers)
        self.scoring_engine = ScoringEngine(self.config.scoring)
        self.selector = DailyPicksSelector(self.scoring_engine, self.config.feed.regular_picks)
        self.quota_service = QuotaService(self.tier_policy)
        self.ledger = CreditLedger(self.tier_policy, self.config.access)
        self.gate = EarlyAccessGate(self.ledger, self.quota_service, self.tier_policy, self.config.access)

    def _run(self, operation: Callable[[UnitOfWork], T]) -> T:
        """Run an operation in a unit of work, retrying lost races by count."""
        retrying = Retrying(
            retry=retry_if_exception_type(ConcurrentModification),
            stop=stop_after_attempt(max(1, self.config.access.max_attempts)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True
        )
        result = None
        for attempt in retrying:
            with attempt:
                with engine_uow(self.db) as uow:
                    result = operation(uow)
        return result

    # === Accounts ===

    def open_account(self, user_id: str, tier: str = SubscriptionTier.FREE.value, balance: int = 0) -> CreditSummary:
        """Create the account if missing (provisioning hook for the identity side)."""
        tier = parse_tier(tier).value

        def operation(uow: UnitOfWork) -> CreditSummary:
            account = uow.accounts.get_account(user_id)
            if account is None:
                account = uow.accounts.create_account(user_id, tier=tier, balance=0)
                if balance > 0:
                    self.ledger.credit(uow, user_id, balance, "opening_balance")
                logger.info(f"Opened account {user_id} on {tier}")
            return self._summary(uow, user_id)

        return self._run(operation)

    def change_tier(self, user_id: str, tier: str) -> CreditSummary:
        """Move an account to another tier; an upgrade tops up the free-unlock allowance."""
        tier = parse_tier(tier).value

        def operation(uow: UnitOfWork) -> CreditSummary:
            if not uow.accounts.set_tier(user_id, tier):
                raise NotFound("account", user_id)
            uow.quotas.raise_free_unlocks(user_id, self.tier_policy.quota_for(tier).free_unlocks)
            logger.info(f"Account {user_id} moved to {tier}")
            return self._summary(uow, user_id)

        return self._run(operation)

    def credits(self, user_id: str) -> CreditSummary:
        return self._run(lambda uow: self._summary(uow, user_id))

    def _summary(self, uow: UnitOfWork, user_id: str) -> CreditSummary:
        account = uow.accounts.get_account(user_id)
        if account is None:
            raise NotFound("account", user_id)
        quota = uow.quotas.get(user_id)
        return CreditSummary(
            user_id=user_id,
            tier=account.tier,
            balance=account.balance,
            lifetime_spent=account.lifetime_spent,
            free_unlocks_remaining=quota.free_unlocks_remaining if quota else 0
        )

    # === Feed ===

    def get_feed(self, user_id: str, now: Optional[datetime] = None) -> Feed:
        """
        Build the daily feed. Never fails because of quota or credit state;
        a missing profile degrades to baseline scoring.
        """
        now = as_utc(now) if now else utcnow()

        with engine_uow(self.db) as uow:
            profile = uow.profiles.get_profile(user_id)
            if profile is None:
                logger.debug(f"No profile for {user_id}, using baseline scoring")
                profile = Profile()

            candidates = uow.opportunities.list_active_opportunities(
                OpportunityFilter(limit=self.config.feed.candidate_limit)
            )
            applied_ids = uow.applications.list_applied_ids(user_id)
            unlocked_ids = set(uow.unlocks.list_unlocked_ids(user_id))

            account = uow.accounts.get_account(user_id)
            if account is not None and self.tier_policy.quota_for(account.tier).early_access:
                unlocked_ids.update(str(opp.id) for opp in candidates if opp.access.is_restricted)

        return self.selector.select_feed(profile, candidates, applied_ids, unlocked_ids, now)

    # === Early access ===

    def unlock(self, user_id: str, opportunity_id: str, now: Optional[datetime] = None) -> UnlockResult:
        now = as_utc(now) if now else utcnow()
        result = self._run(lambda uow: self.gate.attempt_unlock(uow, user_id, opportunity_id, now))

        if result.method is not None and not result.already_unlocked:
            self.publisher.publish(EngineEvent.unlock_succeeded(
                user_id, opportunity_id, result.method.value, result.credits_spent
            ))
        return result

    # === Quota ===

    def quota(self, user_id: str, now: Optional[datetime] = None) -> QuotaCheck:
        now = as_utc(now) if now else utcnow()
        return self._run(lambda uow: self.quota_service.check(uow, user_id, now))

    def apply(self, user_id: str, opportunity_id: str, now: Optional[datetime] = None) -> ApplyResult:
        """
        Record an application, the quota-gated action.

        The opportunity is validated first and the quota unit is consumed
        last, in the same unit of work as the application record. A tier
        with early access unlocks a restricted opportunity on the way.
        """
        now = as_utc(now) if now else utcnow()

        def operation(uow: UnitOfWork) -> ApplyResult:
            opportunity = uow.opportunities.get_opportunity(opportunity_id)
            if opportunity is None or not opportunity.is_active:
                raise NotFound("opportunity", opportunity_id)

            if uow.applications.has_applied(user_id, opportunity_id):
                return ApplyResult(
                    success=True,
                    opportunity_id=opportunity_id,
                    already_applied=True,
                    quota=self.quota_service.check(uow, user_id, now)
                )

            has_unlock = uow.unlocks.get_unlock(user_id, opportunity_id) is not None
            access = opportunity.access
            status = access_status(access.is_restricted, access.restricted_until, has_unlock, now)
            if status == AccessStatus.RESTRICTED_LOCKED:
                account = uow.accounts.get_account(user_id)
                if account is None or not self.tier_policy.quota_for(account.tier).early_access:
                    raise OpportunityLocked(opportunity_id, access.restricted_until, access.unlock_cost)
                self.gate.attempt_unlock(uow, user_id, opportunity_id, now)

            self.quota_service.ensure_allowed(uow, user_id, now)
            uow.applications.create_application(user_id, opportunity_id)
            quota = self.quota_service.consume(uow, user_id, now)

            logger.info(f"{user_id} applied to {opportunity_id} ({quota.used}/{quota.max_actions})")
            return ApplyResult(
                success=True,
                opportunity_id=opportunity_id,
                already_applied=False,
                quota=quota
            )

        try:
            return self._run(operation)
        except QuotaExceeded as e:
            self.publisher.publish(EngineEvent.quota_exhausted(
                user_id, e.used, e.max_actions, e.next_reset_at
            ))
            raise

    # === Credits ===

    def spend(self, user_id: str, action: str) -> LedgerResult:
        return self._run(lambda uow: self.ledger.spend_for_action(uow, user_id, action))

    def refresh_credits(self, user_id: str, now: Optional[datetime] = None) -> Optional[LedgerResult]:
        now = as_utc(now) if now else utcnow()
        return self._run(lambda uow: self.ledger.refresh_monthly(uow, user_id, now))

    def credit_history(self, user_id: str, limit: int = 50) -> List[dict]:
        def operation(uow: UnitOfWork) -> List[dict]:
            return [
                {
                    'id': str(tx.id),
                    'amount': tx.amount,
                    'kind': tx.kind,
                    'reason': tx.reason,
                    'balance_after': tx.balance_after,
                    'created_at': as_utc(tx.created_at).isoformat(),
                }
                for tx in self.ledger.history(uow, user_id, limit)
            ]

        return self._run(operation)

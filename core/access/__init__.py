#!/usr/bin/env python3
"""
Access Module - Tiers, quotas, credits and early-access unlocks.

- state.py: pure early-access state derivation
- tier_policy.py: subscription tiers, reset rule, quota evaluation
- quota.py: persisted quota counters (reset-then-check, explicit consume)
- ledger.py: atomic credit debits/credits with a transaction log
- early_access.py: unlock transitions and payment priority
- exceptions.py: error taxonomy
"""

from core.access.state import AccessStatus, access_status, is_locked, is_restriction_active
from core.access.exceptions import (
    EngineError,
    NotFound,
    InsufficientCredits,
    QuotaExceeded,
    OpportunityLocked,
    ConcurrentModification,
)
from core.access.tier_policy import (
    SubscriptionTier,
    TierPolicy,
    TierQuota,
    QuotaCheck,
    QuotaState,
    UNLIMITED,
    parse_tier,
    should_reset,
    next_reset_at,
)
from core.access.quota import QuotaService
from core.access.ledger import CreditLedger, LedgerResult, fold_balance
from core.access.early_access import EarlyAccessGate, UnlockMethod, UnlockResult

__all__ = [
    'AccessStatus',
    'access_status',
    'is_locked',
    'is_restriction_active',
    'EngineError',
    'NotFound',
    'InsufficientCredits',
    'QuotaExceeded',
    'OpportunityLocked',
    'ConcurrentModification',
    'SubscriptionTier',
    'TierPolicy',
    'TierQuota',
    'QuotaCheck',
    'QuotaState',
    'UNLIMITED',
    'parse_tier',
    'should_reset',
    'next_reset_at',
    'QuotaService',
    'CreditLedger',
    'LedgerResult',
    'fold_balance',
    'EarlyAccessGate',
    'UnlockMethod',
    'UnlockResult',
]

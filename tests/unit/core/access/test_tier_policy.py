#!/usr/bin/env python3
"""
Tests for tier definitions, the period reset rule and quota evaluation.
"""

import unittest
from datetime import datetime, timedelta, timezone

from core.config_loader import TierOverride
from core.access.tier_policy import (
    QuotaState,
    SubscriptionTier,
    TierPolicy,
    UNLIMITED,
    next_reset_at,
    parse_tier,
    should_reset,
)
from tests import NOW


class TestTierTable(unittest.TestCase):

    def setUp(self):
        self.policy = TierPolicy()

    def test_free_tier(self):
        quota = self.policy.quota_for("FREE")
        self.assertEqual(quota.monthly_actions, 4)
        self.assertEqual(quota.documents_allowed, 0)
        self.assertFalse(quota.early_access)
        self.assertFalse(quota.external_tracking)

    def test_premium_tier(self):
        quota = self.policy.quota_for(SubscriptionTier.STUDENT_PREMIUM)
        self.assertEqual(quota.monthly_actions, 10)
        self.assertTrue(quota.external_tracking)
        self.assertFalse(quota.early_access)
        self.assertEqual(quota.free_unlocks, 5)

    def test_pro_tier_unlimited(self):
        quota = self.policy.quota_for("student_pro")
        self.assertEqual(quota.monthly_actions, UNLIMITED)
        self.assertTrue(quota.unlimited)
        self.assertTrue(quota.early_access)

    def test_unknown_tier_falls_back_to_free(self):
        self.assertEqual(parse_tier("PLATINUM"), SubscriptionTier.FREE)
        self.assertEqual(parse_tier(None), SubscriptionTier.FREE)

    def test_overrides_replace_only_given_fields(self):
        policy = TierPolicy({"FREE": TierOverride(monthly_actions=6)})
        quota = policy.quota_for("FREE")
        self.assertEqual(quota.monthly_actions, 6)
        self.assertEqual(quota.monthly_credits, 20)

    def test_document_attachment(self):
        self.assertFalse(self.policy.can_attach_documents("FREE"))
        self.assertTrue(self.policy.can_attach_documents("STUDENT_PREMIUM"))

    def test_upgrade_suggestion(self):
        self.assertIn("STUDENT_PREMIUM", self.policy.upgrade_suggestion("FREE"))
        self.assertIn("unlimited", self.policy.upgrade_suggestion("STUDENT_PREMIUM"))
        self.assertIsNone(self.policy.upgrade_suggestion("STUDENT_PRO"))


class TestResetRule(unittest.TestCase):

    def test_missing_anchor_resets(self):
        self.assertTrue(should_reset(None, NOW))

    def test_same_month_within_30_days(self):
        self.assertFalse(should_reset(NOW - timedelta(days=10), NOW))

    def test_thirty_days_elapsed(self):
        self.assertTrue(should_reset(NOW - timedelta(days=31), NOW))

    def test_month_change_resets_early(self):
        anchor = datetime(2026, 1, 31, 23, 0, tzinfo=timezone.utc)
        now = datetime(2026, 2, 1, 1, 0, tzinfo=timezone.utc)
        self.assertTrue(should_reset(anchor, now))

    def test_year_change_resets(self):
        anchor = datetime(2025, 12, 20, tzinfo=timezone.utc)
        now = datetime(2026, 1, 2, tzinfo=timezone.utc)
        self.assertTrue(should_reset(anchor, now))

    def test_next_reset_is_month_start_when_sooner(self):
        anchor = datetime(2026, 1, 10, 8, 30, tzinfo=timezone.utc)
        self.assertEqual(next_reset_at(anchor), datetime(2026, 2, 1, tzinfo=timezone.utc))

    def test_next_reset_is_thirty_days_when_sooner(self):
        # Anchored on the 1st of a 31-day month: 30 days lands on the 31st
        anchor = datetime(2026, 1, 1, 0, 0, tzinfo=timezone.utc)
        self.assertEqual(next_reset_at(anchor), datetime(2026, 1, 31, tzinfo=timezone.utc))


class TestCheckQuota(unittest.TestCase):

    def setUp(self):
        self.policy = TierPolicy()

    def test_free_tier_exhausted(self):
        state = QuotaState(actions_this_period=4, period_anchor=NOW)

        result = self.policy.check_quota(state, "FREE", NOW)

        self.assertFalse(result.allowed)
        self.assertEqual(result.remaining, 0)
        self.assertEqual(result.used, 4)
        self.assertEqual(result.max_actions, 4)

    def test_reset_after_31_days(self):
        state = QuotaState(actions_this_period=4, period_anchor=NOW - timedelta(days=31))

        result = self.policy.check_quota(state, "FREE", NOW)

        self.assertTrue(result.allowed)
        self.assertEqual(result.used, 0)
        self.assertEqual(result.remaining, 4)
        self.assertTrue(result.reset_due)

    def test_partial_usage(self):
        state = QuotaState(actions_this_period=3, period_anchor=NOW - timedelta(days=2))

        result = self.policy.check_quota(state, "STUDENT_PREMIUM", NOW)

        self.assertTrue(result.allowed)
        self.assertEqual(result.remaining, 7)
        self.assertFalse(result.reset_due)

    def test_unlimited_tier(self):
        state = QuotaState(actions_this_period=500, period_anchor=NOW)

        result = self.policy.check_quota(state, "STUDENT_PRO", NOW)

        self.assertTrue(result.allowed)
        self.assertIsNone(result.remaining)
        self.assertEqual(result.max_actions, UNLIMITED)

    def test_next_reset_reported(self):
        state = QuotaState(actions_this_period=1, period_anchor=NOW)

        result = self.policy.check_quota(state, "FREE", NOW)

        self.assertEqual(result.next_reset_at, datetime(2026, 4, 1, tzinfo=timezone.utc))


if __name__ == '__main__':
    unittest.main()

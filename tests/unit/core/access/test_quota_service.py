#!/usr/bin/env python3
"""
Tests for persisted quota counters: lazy creation, reset-then-check and
conditional consumption.
"""

import unittest
from datetime import timedelta
from unittest.mock import Mock

import pytest

from core.access import (
    ConcurrentModification,
    NotFound,
    QuotaExceeded,
    QuotaService,
    TierPolicy,
)
from database.uow import engine_uow
from tests import NOW, make_database


@pytest.mark.db
class TestQuotaService(unittest.TestCase):

    def setUp(self):
        self.db = make_database()
        self.service = QuotaService(TierPolicy())
        with engine_uow(self.db) as uow:
            uow.accounts.create_account("free-user", tier="FREE")
            uow.accounts.create_account("pro-user", tier="STUDENT_PRO")

    def tearDown(self):
        self.db.dispose()

    def _consume(self, user_id, times, now=NOW):
        for _ in range(times):
            with engine_uow(self.db) as uow:
                self.service.consume(uow, user_id, now)

    def test_first_check_opens_period(self):
        with engine_uow(self.db) as uow:
            result = self.service.check(uow, "free-user", NOW)
            row = uow.quotas.get("free-user")

        self.assertTrue(result.allowed)
        self.assertEqual(result.used, 0)
        self.assertEqual(result.remaining, 4)
        self.assertIsNotNone(row)

    def test_unknown_account(self):
        with self.assertRaises(NotFound):
            with engine_uow(self.db) as uow:
                self.service.check(uow, "ghost", NOW)

    def test_consume_until_exhausted(self):
        self._consume("free-user", 4)

        with self.assertRaises(QuotaExceeded) as ctx:
            with engine_uow(self.db) as uow:
                self.service.consume(uow, "free-user", NOW)

        self.assertEqual(ctx.exception.used, 4)
        self.assertEqual(ctx.exception.max_actions, 4)
        self.assertIn("STUDENT_PREMIUM", ctx.exception.suggestion)

        with engine_uow(self.db) as uow:
            self.assertEqual(uow.quotas.get("free-user").actions_this_period, 4)

    def test_ensure_allowed_raises_when_exhausted(self):
        self._consume("free-user", 4)

        with self.assertRaises(QuotaExceeded):
            with engine_uow(self.db) as uow:
                self.service.ensure_allowed(uow, "free-user", NOW)

    def test_period_reset_after_31_days(self):
        anchor = NOW - timedelta(days=31)
        self._consume("free-user", 4, now=anchor)

        with engine_uow(self.db) as uow:
            result = self.service.check(uow, "free-user", NOW)

        self.assertTrue(result.allowed)
        self.assertEqual(result.used, 0)

        with engine_uow(self.db) as uow:
            row = uow.quotas.get("free-user")
            self.assertEqual(row.actions_this_period, 0)
            self.assertEqual(row.version, 2)

    def test_unlimited_tier_never_exhausts(self):
        self._consume("pro-user", 25)

        with engine_uow(self.db) as uow:
            result = self.service.check(uow, "pro-user", NOW)

        self.assertTrue(result.allowed)
        self.assertEqual(result.used, 25)
        self.assertIsNone(result.remaining)

    def test_stale_reset_is_rejected(self):
        anchor = NOW - timedelta(days=31)
        self._consume("free-user", 1, now=anchor)

        with engine_uow(self.db) as uow:
            row = uow.quotas.get("free-user")
            # Another request reset the period first
            self.assertTrue(uow.quotas.reset("free-user", row.version, NOW, 0))

        with engine_uow(self.db) as uow:
            self.assertFalse(uow.quotas.reset("free-user", row.version, NOW, 0))

    def test_free_unlocks_refilled_on_reset(self):
        with engine_uow(self.db) as uow:
            uow.accounts.create_account("premium-user", tier="STUDENT_PREMIUM")
        with engine_uow(self.db) as uow:
            row, _ = self.service.current_state(uow, "premium-user", NOW - timedelta(days=40))
            self.assertEqual(row.free_unlocks_remaining, 5)
            uow.quotas.use_free_unlock("premium-user")

        with engine_uow(self.db) as uow:
            row, tier = self.service.current_state(uow, "premium-user", NOW)

        self.assertEqual(tier, "STUDENT_PREMIUM")
        self.assertEqual(row.free_unlocks_remaining, 5)


class TestQuotaConsumeRace(unittest.TestCase):
    """Consume against a stale version must not count the action."""

    def _uow(self, *rows):
        uow = Mock()
        uow.accounts.get_account.return_value = Mock(tier="FREE")
        uow.quotas.get.side_effect = list(rows)
        uow.quotas.increment.return_value = False
        return uow

    def test_version_changed_raises_concurrent_modification(self):
        before = Mock(version=1, period_anchor=NOW, actions_this_period=1, free_unlocks_remaining=0)
        after = Mock(version=2, period_anchor=NOW, actions_this_period=0, free_unlocks_remaining=0)

        with self.assertRaises(ConcurrentModification):
            QuotaService().consume(self._uow(before, after), "u1", NOW)

    def test_same_version_means_limit_reached(self):
        row = Mock(version=1, period_anchor=NOW, actions_this_period=4, free_unlocks_remaining=0)

        with self.assertRaises(QuotaExceeded):
            QuotaService().consume(self._uow(row, row), "u1", NOW)


if __name__ == '__main__':
    unittest.main()

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update

from database.models import UserQuota
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class QuotaRepository(BaseRepository):
    """Per-user quota counters with version-based compare-and-swap updates."""

    def get(self, user_id: str) -> Optional[UserQuota]:
        stmt = (
            select(UserQuota)
            .where(UserQuota.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create(self, user_id: str, anchor: datetime, free_unlocks: int) -> UserQuota:
        quota = UserQuota(
            user_id=user_id,
            actions_this_period=0,
            period_anchor=anchor,
            free_unlocks_remaining=free_unlocks,
            version=1
        )
        return self.insert(quota, f"Quota state for {user_id} created concurrently")

    def reset(self, user_id: str, expected_version: int, anchor: datetime, free_unlocks: int) -> bool:
        """Zero the counter and refill the allowance if nobody reset first."""
        stmt = (
            update(UserQuota)
            .where(
                UserQuota.user_id == user_id,
                UserQuota.version == expected_version
            )
            .values(
                actions_this_period=0,
                period_anchor=anchor,
                free_unlocks_remaining=free_unlocks,
                version=UserQuota.version + 1
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def increment(self, user_id: str, expected_version: int, max_actions: Optional[int]) -> bool:
        """Count one action within the current period; None means unlimited."""
        conditions = [
            UserQuota.user_id == user_id,
            UserQuota.version == expected_version,
        ]
        if max_actions is not None:
            conditions.append(UserQuota.actions_this_period < max_actions)

        stmt = (
            update(UserQuota)
            .where(*conditions)
            .values(actions_this_period=UserQuota.actions_this_period + 1)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def use_free_unlock(self, user_id: str) -> bool:
        stmt = (
            update(UserQuota)
            .where(
                UserQuota.user_id == user_id,
                UserQuota.free_unlocks_remaining > 0
            )
            .values(free_unlocks_remaining=UserQuota.free_unlocks_remaining - 1)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def raise_free_unlocks(self, user_id: str, free_unlocks: int) -> bool:
        """Lift the remaining allowance to at least ``free_unlocks``; never lowers it."""
        stmt = (
            update(UserQuota)
            .where(
                UserQuota.user_id == user_id,
                UserQuota.free_unlocks_remaining < free_unlocks
            )
            .values(free_unlocks_remaining=free_unlocks)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

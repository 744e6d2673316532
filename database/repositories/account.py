import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update

from core.utils import utcnow
from database.models import CreditAccount, CreditTransaction
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class AccountRepository(BaseRepository):
    """Credit accounts and their append-only transaction log.

    Balance changes are single conditional UPDATE statements so the check
    and the write can never be split by a concurrent request.
    """

    def get_account(self, user_id: str) -> Optional[CreditAccount]:
        stmt = (
            select(CreditAccount)
            .where(CreditAccount.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create_account(self, user_id: str, tier: str = 'FREE', balance: int = 0) -> CreditAccount:
        account = CreditAccount(user_id=user_id, tier=tier, balance=balance, lifetime_spent=0)
        self.db.add(account)
        self.db.flush()
        return account

    def get_balance(self, user_id: str) -> Optional[int]:
        stmt = select(CreditAccount.balance).where(CreditAccount.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def set_tier(self, user_id: str, tier: str) -> int:
        stmt = (
            update(CreditAccount)
            .where(CreditAccount.user_id == user_id)
            .values(tier=tier, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def decrement_balance(self, user_id: str, amount: int) -> bool:
        """Debit only if the balance covers it. Returns False when it does not."""
        stmt = (
            update(CreditAccount)
            .where(
                CreditAccount.user_id == user_id,
                CreditAccount.balance >= amount
            )
            .values(
                balance=CreditAccount.balance - amount,
                lifetime_spent=CreditAccount.lifetime_spent + amount,
                updated_at=utcnow()
            )
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def increment_balance(self, user_id: str, amount: int) -> bool:
        stmt = (
            update(CreditAccount)
            .where(CreditAccount.user_id == user_id)
            .values(balance=CreditAccount.balance + amount, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def replace_balance(
        self,
        user_id: str,
        expected_balance: int,
        new_balance: int,
        refreshed_at: datetime
    ) -> bool:
        """Set the balance if it still equals ``expected_balance``."""
        stmt = (
            update(CreditAccount)
            .where(
                CreditAccount.user_id == user_id,
                CreditAccount.balance == expected_balance
            )
            .values(balance=new_balance, credits_refreshed_at=refreshed_at, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def add_transaction(
        self,
        user_id: str,
        amount: int,
        kind: str,
        reason: str,
        balance_after: int
    ) -> CreditTransaction:
        tx = CreditTransaction(
            user_id=user_id,
            amount=amount,
            kind=kind,
            reason=reason,
            balance_after=balance_after,
            created_at=utcnow()
        )
        self.db.add(tx)
        self.db.flush()
        return tx

    def list_transactions(self, user_id: str, limit: Optional[int] = None) -> List[CreditTransaction]:
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars().all())

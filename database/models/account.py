import uuid

from sqlalchemy import Column, Text, Integer, TIMESTAMP, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base


class CreditAccount(Base):
    """
    Per-user account: subscription tier and spendable credit balance.

    Mutated only through CreditLedger; ``balance`` is the authoritative
    fast-path value and is always reconstructable from the transactions.
    """
    __tablename__ = 'credit_account'

    user_id = Column(Text, primary_key=True)
    tier = Column(Text, nullable=False, default='FREE')

    balance = Column(Integer, nullable=False, default=0)
    lifetime_spent = Column(Integer, nullable=False, default=0)
    credits_refreshed_at = Column(TIMESTAMP(timezone=True))

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    transactions = relationship(
        "CreditTransaction",
        back_populates="account",
        order_by="CreditTransaction.created_at"
    )
    quota = relationship("UserQuota", back_populates="account", uselist=False)

    __table_args__ = (
        CheckConstraint('balance >= 0', name='ck_credit_account_balance_non_negative'),
        CheckConstraint('lifetime_spent >= 0', name='ck_credit_account_lifetime_non_negative'),
    )


class CreditTransaction(Base):
    """
    Append-only ledger entry. Never updated or deleted.
    """
    __tablename__ = 'credit_transaction'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, ForeignKey('credit_account.user_id', ondelete='RESTRICT'), nullable=False)

    amount = Column(Integer, nullable=False)  # signed: negative for debits
    kind = Column(Text, nullable=False)  # spent|credit|monthly_refresh
    reason = Column(Text, nullable=False)
    balance_after = Column(Integer, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    account = relationship("CreditAccount", back_populates="transactions")

    __table_args__ = (
        Index('idx_credit_tx_user_created', 'user_id', 'created_at'),
        CheckConstraint('balance_after >= 0', name='ck_credit_tx_balance_after_non_negative'),
    )


class UserQuota(Base):
    """
    Monthly action counters and the early-access free-unlock allowance.

    ``actions_this_period`` is only ever zeroed by a reset, never decremented.
    """
    __tablename__ = 'user_quota'

    user_id = Column(Text, ForeignKey('credit_account.user_id', ondelete='CASCADE'), primary_key=True)

    actions_this_period = Column(Integer, nullable=False, default=0)
    period_anchor = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    free_unlocks_remaining = Column(Integer, nullable=False, default=0)
    # Bumped on every reset; consume and reset compare-and-swap on it
    version = Column(Integer, nullable=False, default=1)

    account = relationship("CreditAccount", back_populates="quota")

    __table_args__ = (
        CheckConstraint('actions_this_period >= 0', name='ck_user_quota_actions_non_negative'),
        CheckConstraint('free_unlocks_remaining >= 0', name='ck_user_quota_unlocks_non_negative'),
    )

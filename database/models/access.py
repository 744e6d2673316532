import uuid

from sqlalchemy import Column, Text, Boolean, TIMESTAMP, ForeignKey, UniqueConstraint, Index, Uuid

from core.utils import utcnow
from .base import Base


class UnlockRecord(Base):
    """
    Early-access unlock of one opportunity by one user.

    The unique constraint is what makes concurrent unlocks collapse into a
    single record.
    """
    __tablename__ = 'unlock_record'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False)
    opportunity_id = Column(Text, ForeignKey('opportunity.id', ondelete='CASCADE'), nullable=False)

    method = Column(Text, nullable=False)  # tier|freeAllowance|credits
    used_credit = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'opportunity_id', name='uq_unlock_user_opportunity'),
        Index('idx_unlock_user', 'user_id'),
    )


class ApplicationRecord(Base):
    """A quota-gated application of a user to an opportunity."""
    __tablename__ = 'application_record'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False)
    opportunity_id = Column(Text, ForeignKey('opportunity.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'opportunity_id', name='uq_application_user_opportunity'),
        Index('idx_application_user', 'user_id'),
    )

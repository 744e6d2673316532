import logging
from typing import List, Optional

from sqlalchemy import select

from core.utils import utcnow
from database.models import UnlockRecord, ApplicationRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UnlockRepository(BaseRepository):
    def get_unlock(self, user_id: str, opportunity_id: str) -> Optional[UnlockRecord]:
        stmt = select(UnlockRecord).where(
            UnlockRecord.user_id == user_id,
            UnlockRecord.opportunity_id == opportunity_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def create_unlock(self, user_id: str, opportunity_id: str, method: str) -> UnlockRecord:
        """Insert the unlock; a duplicate means another request won the race."""
        record = UnlockRecord(
            user_id=user_id,
            opportunity_id=opportunity_id,
            method=method,
            used_credit=(method == 'credits'),
            created_at=utcnow()
        )
        return self.insert(
            record,
            f"Opportunity {opportunity_id} unlocked concurrently for {user_id}"
        )

    def list_unlocked_ids(self, user_id: str) -> List[str]:
        stmt = select(UnlockRecord.opportunity_id).where(UnlockRecord.user_id == user_id)
        return list(self.db.execute(stmt).scalars().all())


class ApplicationRepository(BaseRepository):
    def has_applied(self, user_id: str, opportunity_id: str) -> bool:
        stmt = select(ApplicationRecord.id).where(
            ApplicationRecord.user_id == user_id,
            ApplicationRecord.opportunity_id == opportunity_id
        )
        return self.db.execute(stmt).first() is not None

    def create_application(self, user_id: str, opportunity_id: str) -> ApplicationRecord:
        record = ApplicationRecord(user_id=user_id, opportunity_id=opportunity_id, created_at=utcnow())
        return self.insert(
            record,
            f"Application to {opportunity_id} recorded concurrently for {user_id}"
        )

    def list_applied_ids(self, user_id: str) -> List[str]:
        stmt = select(ApplicationRecord.opportunity_id).where(ApplicationRecord.user_id == user_id)
        return list(self.db.execute(stmt).scalars().all())

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update, or_

from core.utils import as_utc
from core.matching.models import AccessState, Opportunity as OpportunityRecord
from database.models import Opportunity
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_TAG_FIELDS = (
    'ai_category', 'ai_match_keywords', 'ai_skills_required', 'ai_education_match',
    'ai_industry_tags', 'required_degrees', 'preferred_majors', 'required_skills',
    'industries', 'matching_tags',
)


@dataclass
class OpportunityFilter:
    category: Optional[str] = None
    exclude_ids: Optional[List[str]] = None
    limit: Optional[int] = None


def to_record(row: Opportunity) -> OpportunityRecord:
    """Convert an ORM row into the scorer's plain record."""
    tags = {name: list(getattr(row, name) or []) for name in _TAG_FIELDS}
    return OpportunityRecord(
        id=row.id,
        title=row.title,
        company=row.company,
        description=row.description,
        category=row.category,
        created_at=as_utc(row.created_at),
        is_active=row.is_active,
        access=AccessState(
            is_restricted=bool(row.is_restricted),
            restricted_until=as_utc(row.restricted_until),
            unlock_cost=row.unlock_cost
        ),
        **tags
    )


class OpportunityRepository(BaseRepository):
    def get_opportunity(self, opportunity_id: str) -> Optional[OpportunityRecord]:
        row = self.db.get(Opportunity, opportunity_id)
        return to_record(row) if row is not None else None

    def list_active_opportunities(self, filter: Optional[OpportunityFilter] = None) -> List[OpportunityRecord]:
        filter = filter or OpportunityFilter()
        stmt = select(Opportunity).where(Opportunity.is_active.is_(True))

        if filter.category:
            stmt = stmt.where(
                or_(Opportunity.category == filter.category, Opportunity.category.is_(None))
            )
        if filter.exclude_ids:
            stmt = stmt.where(Opportunity.id.notin_(filter.exclude_ids))

        stmt = stmt.order_by(Opportunity.created_at.desc())
        if filter.limit:
            stmt = stmt.limit(filter.limit)

        return [to_record(row) for row in self.db.execute(stmt).scalars().all()]

    def add_opportunity(self, **fields) -> Opportunity:
        """Insert an opportunity (ingestion side and fixtures)."""
        row = Opportunity(**fields)
        self.db.add(row)
        self.db.flush()
        return row

    def restrict(self, opportunity_id: str, until: datetime, unlock_cost: Optional[int] = None) -> int:
        values = {'is_restricted': True, 'restricted_until': until}
        if unlock_cost is not None:
            values['unlock_cost'] = unlock_cost

        stmt = (
            update(Opportunity)
            .where(Opportunity.id == opportunity_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        count = self.db.execute(stmt).rowcount
        if count:
            logger.info(f"Opportunity {opportunity_id} restricted until {until.isoformat()}")
        return count

    def lift_restriction(self, opportunity_id: str) -> int:
        stmt = (
            update(Opportunity)
            .where(Opportunity.id == opportunity_id)
            .values(is_restricted=False, restricted_until=None)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def set_active(self, opportunity_id: str, is_active: bool) -> int:
        stmt = (
            update(Opportunity)
            .where(Opportunity.id == opportunity_id)
            .values(is_active=is_active)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

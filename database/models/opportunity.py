import uuid

from sqlalchemy import Column, Text, Integer, Boolean, TIMESTAMP, Index

from core.utils import utcnow
from .base import Base, JsonType


class Opportunity(Base):
    """
    A postable unit of work.

    Content is written by the ingestion side; the engine only touches the
    access-state columns (is_restricted, restricted_until, unlock_cost) and
    the activation flag.
    """
    __tablename__ = 'opportunity'

    id = Column(Text, primary_key=True, default=lambda: str(uuid.uuid4()))

    title = Column(Text, nullable=False)
    company = Column(Text, nullable=False)
    description = Column(Text)
    category = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    # === AI tags (populated asynchronously by the categorizer) ===
    ai_category = Column(JsonType, nullable=False, default=list)
    ai_match_keywords = Column(JsonType, nullable=False, default=list)
    ai_skills_required = Column(JsonType, nullable=False, default=list)
    ai_education_match = Column(JsonType, nullable=False, default=list)
    ai_industry_tags = Column(JsonType, nullable=False, default=list)

    # === Manually curated tags ===
    required_degrees = Column(JsonType, nullable=False, default=list)
    preferred_majors = Column(JsonType, nullable=False, default=list)
    required_skills = Column(JsonType, nullable=False, default=list)
    industries = Column(JsonType, nullable=False, default=list)
    matching_tags = Column(JsonType, nullable=False, default=list)

    # === Early access ===
    is_restricted = Column(Boolean, nullable=False, default=False)
    restricted_until = Column(TIMESTAMP(timezone=True))
    unlock_cost = Column(Integer, nullable=False, default=5)

    __table_args__ = (
        Index('idx_opportunity_active_created', 'is_active', 'created_at'),
        Index('idx_opportunity_restricted', 'is_restricted', 'restricted_until'),
    )

from sqlalchemy import Column, Text, TIMESTAMP

from core.utils import utcnow
from .base import Base, JsonType


class StudentProfile(Base):
    """
    Matchable profile attributes, superseded in place on every edit.

    The structured cv_* columns are written by the profile builder and hold
    lists of dicts (education: degree_type, degree_title, field_of_study,
    institution; experience: title, employer).
    """
    __tablename__ = 'student_profile'

    user_id = Column(Text, primary_key=True)

    skills = Column(JsonType, nullable=False, default=list)
    interests = Column(JsonType, nullable=False, default=list)
    major = Column(Text)
    education = Column(Text)
    goals = Column(JsonType, nullable=False, default=list)

    cv_skills = Column(JsonType, nullable=False, default=list)
    cv_education = Column(JsonType, nullable=False, default=list)
    cv_experience = Column(JsonType, nullable=False, default=list)

    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

import logging
from dataclasses import asdict
from typing import Optional

from core.utils import utcnow
from core.matching.models import EducationEntry, ExperienceEntry, Profile
from database.models import StudentProfile
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


def _education_entries(raw) -> list:
    entries = []
    for item in raw or []:
        if isinstance(item, dict):
            entries.append(EducationEntry(
                degree_type=item.get('degree_type'),
                degree_title=item.get('degree_title'),
                field_of_study=item.get('field_of_study'),
                institution=item.get('institution'),
            ))
    return entries


def _experience_entries(raw) -> list:
    return [
        ExperienceEntry(title=item.get('title'), employer=item.get('employer'))
        for item in raw or []
        if isinstance(item, dict)
    ]


class ProfileRepository(BaseRepository):
    """Read side of the profile builder's data; the engine never edits it."""

    def get_profile(self, user_id: str) -> Optional[Profile]:
        row = self.db.get(StudentProfile, user_id)
        if row is None:
            return None

        return Profile(
            skills=set(row.skills or []),
            interests=set(row.interests or []),
            major=row.major,
            education=row.education,
            goals=set(row.goals or []),
            cv_skills=list(row.cv_skills or []),
            cv_education=_education_entries(row.cv_education),
            cv_experience=_experience_entries(row.cv_experience),
        )

    def save_profile(self, user_id: str, profile: Profile) -> StudentProfile:
        """Supersede the stored profile (profile builder and fixtures)."""
        row = self.db.get(StudentProfile, user_id)
        if row is None:
            row = StudentProfile(user_id=user_id)
            self.db.add(row)

        row.skills = sorted(profile.skills)
        row.interests = sorted(profile.interests)
        row.major = profile.major
        row.education = profile.education
        row.goals = sorted(profile.goals)
        row.cv_skills = list(profile.cv_skills)
        row.cv_education = [asdict(e) for e in profile.cv_education]
        row.cv_experience = [asdict(e) for e in profile.cv_experience]
        row.updated_at = utcnow()

        self.db.flush()
        return row

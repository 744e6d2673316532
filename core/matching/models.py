#!/usr/bin/env python3
"""
Matching Models - Plain records for profiles, opportunities and scores.

These are decoupled from the ORM so the scorer and feed selector stay
pure; repositories convert rows into these records.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set

from core.access.state import AccessStatus


@dataclass(frozen=True)
class EducationEntry:
    degree_type: Optional[str] = None
    degree_title: Optional[str] = None
    field_of_study: Optional[str] = None
    institution: Optional[str] = None


@dataclass(frozen=True)
class ExperienceEntry:
    title: Optional[str] = None
    employer: Optional[str] = None


@dataclass
class Profile:
    """A user's matchable attributes."""
    skills: Set[str] = field(default_factory=set)
    interests: Set[str] = field(default_factory=set)
    major: Optional[str] = None
    education: Optional[str] = None
    goals: Set[str] = field(default_factory=set)

    # Structured sub-records from the profile builder
    cv_skills: List[str] = field(default_factory=list)
    cv_education: List[EducationEntry] = field(default_factory=list)
    cv_experience: List[ExperienceEntry] = field(default_factory=list)


@dataclass
class AccessState:
    is_restricted: bool = False
    restricted_until: Optional[datetime] = None
    unlock_cost: int = 5


@dataclass
class Opportunity:
    id: str
    title: str
    company: str
    created_at: datetime
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True

    # AI-derived tags (filled asynchronously by the categorizer)
    ai_category: List[str] = field(default_factory=list)
    ai_match_keywords: List[str] = field(default_factory=list)
    ai_skills_required: List[str] = field(default_factory=list)
    ai_education_match: List[str] = field(default_factory=list)
    ai_industry_tags: List[str] = field(default_factory=list)

    # Manually curated tags
    required_degrees: List[str] = field(default_factory=list)
    preferred_majors: List[str] = field(default_factory=list)
    required_skills: List[str] = field(default_factory=list)
    industries: List[str] = field(default_factory=list)
    matching_tags: List[str] = field(default_factory=list)

    access: AccessState = field(default_factory=AccessState)


@dataclass(frozen=True)
class ScoreResult:
    score: int
    reasons: List[str]


@dataclass
class ScoredOpportunity:
    """An opportunity annotated for the feed."""
    opportunity: Opportunity
    score: int
    reasons: List[str] = field(default_factory=list)
    status: AccessStatus = AccessStatus.NOT_RESTRICTED

    @property
    def locked(self) -> bool:
        return self.status == AccessStatus.RESTRICTED_LOCKED


@dataclass
class Feed:
    restricted_pick: Optional[ScoredOpportunity] = None
    regular_picks: List[ScoredOpportunity] = field(default_factory=list)

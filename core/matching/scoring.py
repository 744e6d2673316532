#!/usr/bin/env python3
"""
Scoring Engine - Rule-based relevance of an opportunity for a profile.

Five additive signals, each capped independently:

1. Skills      - profile skills vs required skills and keywords
2. Interests   - profile interests vs categories and industries
3. Education   - major / education / CV education vs degree and major tags
4. Experience  - CV experience titles and employers vs matching tags
5. Recency     - bonus for opportunities posted in the last week

When none of the profile-overlap signals (1-4) fires the opportunity gets
a fixed baseline so sparse profiles still receive a rankable feed.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from core.config_loader import ScoringConfig
from core.utils import utcnow, as_utc
from core.matching.models import Opportunity, Profile, ScoreResult
from core.matching.normalize import normalize, normalize_all, count_matches

logger = logging.getLogger(__name__)

BASELINE_REASON = "general opportunity"


def _plural(count: int, noun: str) -> str:
    if count == 1:
        return f"1 {noun} matches"
    return f"{count} {noun}s match"


class ScoringEngine:
    """Pure, deterministic scorer. Never raises on sparse data."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def score(
        self,
        profile: Profile,
        opportunity: Opportunity,
        now: Optional[datetime] = None
    ) -> ScoreResult:
        cfg = self.config
        now = as_utc(now) if now else utcnow()

        student_skills = normalize_all(list(profile.skills) + list(profile.cv_skills))
        student_interests = normalize_all(profile.interests)
        student_education = normalize_all(
            [profile.major, profile.education]
            + [e.field_of_study for e in profile.cv_education]
            + [e.degree_type for e in profile.cv_education]
            + [e.degree_title for e in profile.cv_education]
            + [e.institution for e in profile.cv_education]
        )
        student_experience = normalize_all(
            [e.title for e in profile.cv_experience]
            + [e.employer for e in profile.cv_experience]
        )

        opp_skills = normalize_all(
            opportunity.ai_skills_required
            + opportunity.required_skills
            + opportunity.ai_match_keywords
        )
        opp_categories = normalize_all(
            opportunity.ai_category
            + opportunity.industries
            + opportunity.ai_industry_tags
            + [opportunity.category]
        )
        opp_education = normalize_all(
            opportunity.ai_education_match
            + opportunity.required_degrees
            + opportunity.preferred_majors
        )
        opp_keywords = normalize_all(opportunity.matching_tags + opportunity.ai_match_keywords)
        opp_text = normalize(" ".join(
            part for part in (opportunity.title, opportunity.company, opportunity.description) if part
        ))

        score = 0
        reasons: List[str] = []

        skill_matches = count_matches(student_skills, opp_skills, opp_text)
        if skill_matches:
            score += min(cfg.skill_cap, skill_matches * cfg.skill_weight)
            reasons.append(_plural(skill_matches, "skill"))

        interest_matches = count_matches(student_interests, opp_categories, opp_text)
        if interest_matches:
            score += min(cfg.interest_cap, interest_matches * cfg.interest_weight)
            reasons.append(_plural(interest_matches, "interest"))

        education_matches = count_matches(student_education, opp_education, opp_text)
        if education_matches:
            score += min(cfg.education_cap, education_matches * cfg.education_weight)
            reasons.append("education background matches")

        experience_matches = count_matches(student_experience, opp_keywords, opp_text)
        if experience_matches:
            score += min(cfg.experience_cap, experience_matches * cfg.experience_weight)
            reasons.append("related experience")

        if not reasons:
            logger.debug(
                f"No overlap for '{opportunity.title}' "
                f"(skills={sorted(student_skills)[:5]}, interests={sorted(student_interests)[:5]})"
            )
            return ScoreResult(score=cfg.baseline_score, reasons=[BASELINE_REASON])

        recency = self.recency_bonus(opportunity.created_at, now)
        if recency > 0:
            score += recency
            reasons.append("posted recently")

        return ScoreResult(score=max(0, min(100, score)), reasons=reasons)

    def recency_bonus(self, created_at: Optional[datetime], now: datetime) -> int:
        if created_at is None:
            return 0
        elapsed = now - as_utc(created_at)
        days = max(0, elapsed.days)
        if days >= self.config.recency_window_days:
            return 0
        return max(0, min(self.config.recency_cap, self.config.recency_cap - days))

    def rank(
        self,
        profile: Profile,
        opportunities: Iterable[Opportunity],
        top_n: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> List[tuple]:
        """Score and sort (opportunity, ScoreResult) pairs, best first, newest on ties."""
        now = as_utc(now) if now else utcnow()
        scored = [(opp, self.score(profile, opp, now)) for opp in opportunities]
        scored.sort(key=lambda pair: (pair[1].score, as_utc(pair[0].created_at)), reverse=True)
        return scored[:top_n] if top_n is not None else scored

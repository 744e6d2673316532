#!/usr/bin/env python3
"""
Matching Module - Opportunity relevance and daily feed selection.

Public API:
- ScoringEngine: 0-100 score with ordered reasons
- DailyPicksSelector: restricted pick plus top regular picks
- Profile, Opportunity, AccessState: input records
- ScoredOpportunity, Feed, ScoreResult: output records
"""

from core.matching.models import (
    AccessState,
    AccessStatus,
    EducationEntry,
    ExperienceEntry,
    Feed,
    Opportunity,
    Profile,
    ScoredOpportunity,
    ScoreResult,
)
from core.matching.normalize import normalize, normalize_all, overlaps, count_matches
from core.matching.scoring import ScoringEngine, BASELINE_REASON
from core.matching.daily_picks import DailyPicksSelector

__all__ = [
    'AccessState',
    'AccessStatus',
    'EducationEntry',
    'ExperienceEntry',
    'Feed',
    'Opportunity',
    'Profile',
    'ScoredOpportunity',
    'ScoreResult',
    'normalize',
    'normalize_all',
    'overlaps',
    'count_matches',
    'ScoringEngine',
    'BASELINE_REASON',
    'DailyPicksSelector',
]

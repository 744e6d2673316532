#!/usr/bin/env python3
"""
Daily Picks - One early-access slot plus the best regular opportunities.

The restricted slot is filled by visibility, not pure relevance: the best
restricted opportunity is surfaced even when unselected regular items
score higher.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from core.utils import utcnow, as_utc
from core.access.state import access_status, is_restriction_active
from core.matching.models import Feed, Opportunity, Profile, ScoredOpportunity
from core.matching.scoring import ScoringEngine

logger = logging.getLogger(__name__)


def _sort_key(item: ScoredOpportunity):
    return (item.score, as_utc(item.opportunity.created_at))


class DailyPicksSelector:
    def __init__(self, scoring_engine: Optional[ScoringEngine] = None, regular_picks: int = 2):
        self.scoring_engine = scoring_engine or ScoringEngine()
        self.regular_picks = regular_picks

    def select_feed(
        self,
        profile: Profile,
        candidates: Iterable[Opportunity],
        applied_ids: Iterable[str] = (),
        unlocked_ids: Iterable[str] = (),
        now: Optional[datetime] = None
    ) -> Feed:
        now = as_utc(now) if now else utcnow()
        applied = {str(i) for i in applied_ids}
        unlocked = {str(i) for i in unlocked_ids}

        restricted: List[ScoredOpportunity] = []
        regular: List[ScoredOpportunity] = []

        for opp in candidates:
            if str(opp.id) in applied:
                continue

            result = self.scoring_engine.score(profile, opp, now)
            status = access_status(
                opp.access.is_restricted,
                opp.access.restricted_until,
                str(opp.id) in unlocked,
                now
            )
            item = ScoredOpportunity(
                opportunity=opp,
                score=result.score,
                reasons=list(result.reasons),
                status=status
            )

            if is_restriction_active(opp.access.is_restricted, opp.access.restricted_until, now):
                restricted.append(item)
            else:
                regular.append(item)

        restricted.sort(key=_sort_key, reverse=True)
        regular.sort(key=_sort_key, reverse=True)

        logger.debug(f"Feed buckets: {len(restricted)} restricted, {len(regular)} regular")

        return Feed(
            restricted_pick=restricted[0] if restricted else None,
            regular_picks=regular[:self.regular_picks]
        )

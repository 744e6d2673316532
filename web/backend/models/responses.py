#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from core.access import QuotaCheck, UnlockResult
from core.engine import ApplyResult, CreditSummary
from core.matching import Feed, ScoredOpportunity
from core.utils import as_utc


class OpportunityCard(BaseModel):
    """An opportunity as shown in the feed."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "opp-123",
                "title": "Data Analyst Intern",
                "company": "Acme Analytics",
                "category": "internship",
                "score": 72,
                "reasons": ["2 skills match", "posted recently"],
                "access_status": "restricted_locked",
                "locked": True,
                "restricted_until": "2026-02-03T12:00:00+00:00",
                "unlock_cost": 5,
                "created_at": "2026-02-01T12:00:00+00:00"
            }
        }
    )

    id: str
    title: str
    company: str
    category: Optional[str] = None
    score: int = Field(ge=0, le=100)
    reasons: List[str]
    access_status: str
    locked: bool
    restricted_until: Optional[str] = None
    unlock_cost: int
    created_at: str

    @classmethod
    def from_scored(cls, item: ScoredOpportunity) -> "OpportunityCard":
        opp = item.opportunity
        until = opp.access.restricted_until
        return cls(
            id=opp.id,
            title=opp.title,
            company=opp.company,
            category=opp.category,
            score=item.score,
            reasons=list(item.reasons),
            access_status=item.status.value,
            locked=item.locked,
            restricted_until=as_utc(until).isoformat() if until else None,
            unlock_cost=opp.access.unlock_cost,
            created_at=as_utc(opp.created_at).isoformat()
        )


class FeedResponse(BaseModel):
    """Daily picks: at most one early-access pick plus the regular picks."""
    success: bool = True
    restricted_pick: Optional[OpportunityCard] = None
    regular_picks: List[OpportunityCard]

    @classmethod
    def from_feed(cls, feed: Feed) -> "FeedResponse":
        return cls(
            restricted_pick=OpportunityCard.from_scored(feed.restricted_pick) if feed.restricted_pick else None,
            regular_picks=[OpportunityCard.from_scored(item) for item in feed.regular_picks]
        )


class UnlockResponse(BaseModel):
    success: bool
    method: Optional[str] = None
    already_unlocked: bool = False
    credits_spent: int = 0
    credits_remaining: int
    free_unlocks_remaining: Optional[int] = None

    @classmethod
    def from_result(cls, result: UnlockResult) -> "UnlockResponse":
        return cls(
            success=result.success,
            method=result.method.value if result.method else None,
            already_unlocked=result.already_unlocked,
            credits_spent=result.credits_spent,
            credits_remaining=result.credits_remaining,
            free_unlocks_remaining=result.free_unlocks_remaining
        )


class QuotaResponse(BaseModel):
    """Monthly action quota. `remaining` is null and `max` is -1 for unlimited tiers."""
    model_config = ConfigDict(populate_by_name=True)

    allowed: bool
    used: int = Field(ge=0)
    remaining: Optional[int] = None
    max_actions: int = Field(serialization_alias="max")
    next_reset_at: str

    @classmethod
    def from_check(cls, check: QuotaCheck) -> "QuotaResponse":
        return cls(
            allowed=check.allowed,
            used=check.used,
            remaining=check.remaining,
            max_actions=check.max_actions,
            next_reset_at=as_utc(check.next_reset_at).isoformat()
        )


class ApplicationResponse(BaseModel):
    success: bool
    opportunity_id: str
    already_applied: bool
    quota: QuotaResponse

    @classmethod
    def from_result(cls, result: ApplyResult) -> "ApplicationResponse":
        return cls(
            success=result.success,
            opportunity_id=result.opportunity_id,
            already_applied=result.already_applied,
            quota=QuotaResponse.from_check(result.quota)
        )


class CreditTransactionItem(BaseModel):
    id: str
    amount: int
    kind: str
    reason: Optional[str] = None
    balance_after: int
    created_at: str


class CreditsResponse(BaseModel):
    user_id: str
    tier: str
    balance: int = Field(ge=0)
    lifetime_spent: int = Field(ge=0)
    free_unlocks_remaining: int = Field(ge=0)
    history: List[CreditTransactionItem] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: CreditSummary, history: List[dict]) -> "CreditsResponse":
        return cls(
            user_id=summary.user_id,
            tier=summary.tier,
            balance=summary.balance,
            lifetime_spent=summary.lifetime_spent,
            free_unlocks_remaining=summary.free_unlocks_remaining,
            history=[CreditTransactionItem(**item) for item in history]
        )


class SpendResponse(BaseModel):
    success: bool
    new_balance: int
    transaction_id: str


class HealthResponse(BaseModel):
    status: str
    service: str

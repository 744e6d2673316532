#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field


class UnlockRequest(BaseModel):
    """Request to unlock an early-access opportunity."""
    opportunity_id: str = Field(..., min_length=1, description="Opportunity to unlock")


class ApplicationRequest(BaseModel):
    """Request to record an application (consumes one quota unit)."""
    opportunity_id: str = Field(..., min_length=1, description="Opportunity applied to")


class SpendRequest(BaseModel):
    """Request to pay for a premium action with credits."""
    action: str = Field(..., description="Action type: EARLY_ACCESS, CUSTOM_CV, CUSTOM_COVER_LETTER")


class AccountRequest(BaseModel):
    """Request to open a credit account."""
    tier: str = Field(default="FREE", description="Subscription tier: FREE, STUDENT_PREMIUM, STUDENT_PRO")
    balance: int = Field(default=0, ge=0, description="Opening credit balance")

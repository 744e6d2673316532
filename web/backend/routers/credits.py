#!/usr/bin/env python3
"""
Credit endpoints - balance, history, spending and account provisioning.
"""

import logging
from fastapi import APIRouter, Depends, Query

from core.engine import EngineService
from ..dependencies import get_engine_service
from ..models.requests import AccountRequest, SpendRequest
from ..models.responses import CreditsResponse, SpendResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["credits"])


@router.get("/{user_id}/credits", response_model=CreditsResponse)
def get_credits(
    user_id: str,
    limit: int = Query(default=20, ge=1, le=200, description="Number of transactions to include"),
    service: EngineService = Depends(get_engine_service)
):
    """Get balance, lifetime spend, free unlocks remaining and recent transactions."""
    summary = service.credits(user_id)
    history = service.credit_history(user_id, limit=limit)
    return CreditsResponse.from_summary(summary, history)


@router.post("/{user_id}/credits/spend", response_model=SpendResponse)
def spend_credits(
    user_id: str,
    request: SpendRequest,
    service: EngineService = Depends(get_engine_service)
):
    """Pay for a premium action (EARLY_ACCESS, CUSTOM_CV, CUSTOM_COVER_LETTER)."""
    result = service.spend(user_id, request.action)
    return SpendResponse(
        success=result.success,
        new_balance=result.new_balance,
        transaction_id=str(result.transaction_id)
    )


@router.post("/{user_id}/credits/refresh", response_model=CreditsResponse)
def refresh_credits(user_id: str, service: EngineService = Depends(get_engine_service)):
    """Apply the monthly credit allocation if one is due."""
    result = service.refresh_credits(user_id)
    if result is None:
        logger.debug(f"No credit refresh due for {user_id}")
    return CreditsResponse.from_summary(service.credits(user_id), service.credit_history(user_id, limit=20))


@router.post("/{user_id}/account", response_model=CreditsResponse)
def open_account(
    user_id: str,
    request: AccountRequest,
    service: EngineService = Depends(get_engine_service)
):
    """Create a credit account for a user. Existing accounts are returned unchanged."""
    summary = service.open_account(user_id, tier=request.tier, balance=request.balance)
    return CreditsResponse.from_summary(summary, service.credit_history(user_id, limit=20))

#!/usr/bin/env python3
"""
Quota endpoints - monthly action allowance.
"""

from fastapi import APIRouter, Depends

from core.engine import EngineService
from ..dependencies import get_engine_service
from ..models.responses import QuotaResponse

router = APIRouter(prefix="/api/v1/users", tags=["quota"])


@router.get("/{user_id}/quota", response_model=QuotaResponse)
def get_quota(user_id: str, service: EngineService = Depends(get_engine_service)):
    """Get used/remaining actions for the current period and the next reset time."""
    return QuotaResponse.from_check(service.quota(user_id))

#!/usr/bin/env python3
"""
Unlock endpoints - early access to restricted opportunities.
"""

import logging
from fastapi import APIRouter, Depends

from core.engine import EngineService
from ..dependencies import get_engine_service
from ..models.requests import UnlockRequest
from ..models.responses import UnlockResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["unlocks"])


@router.post("/{user_id}/unlocks", response_model=UnlockResponse)
def unlock_opportunity(
    user_id: str,
    request: UnlockRequest,
    service: EngineService = Depends(get_engine_service)
):
    """
    Unlock an early-access opportunity.

    Access is granted by tier first, then by the free-unlock allowance,
    then by spending credits. Repeating an unlock is free and reports
    `already_unlocked`.

    - 402 when the balance cannot cover the unlock cost
    - 404 when the opportunity or account does not exist
    """
    result = service.unlock(user_id, request.opportunity_id)
    return UnlockResponse.from_result(result)

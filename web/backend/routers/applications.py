#!/usr/bin/env python3
"""
Application endpoints - the quota-gated action.
"""

from fastapi import APIRouter, Depends

from core.engine import EngineService
from ..dependencies import get_engine_service
from ..models.requests import ApplicationRequest
from ..models.responses import ApplicationResponse

router = APIRouter(prefix="/api/v1/users", tags=["applications"])


@router.post("/{user_id}/applications", response_model=ApplicationResponse)
def apply_to_opportunity(
    user_id: str,
    request: ApplicationRequest,
    service: EngineService = Depends(get_engine_service)
):
    """
    Record an application and consume one action from the monthly quota.

    - 403 when the opportunity is still locked for this user
    - 429 when the monthly quota is exhausted
    """
    result = service.apply(user_id, request.opportunity_id)
    return ApplicationResponse.from_result(result)

#!/usr/bin/env python3
"""
Feed endpoints - daily picks for a student.
"""

from fastapi import APIRouter, Depends

from core.engine import EngineService
from ..dependencies import get_engine_service
from ..models.responses import FeedResponse

router = APIRouter(prefix="/api/v1/users", tags=["feed"])


@router.get("/{user_id}/feed", response_model=FeedResponse)
def get_feed(user_id: str, service: EngineService = Depends(get_engine_service)):
    """
    Get today's picks for a user.

    Returns at most one early-access pick (locked unless the user's tier or
    an unlock grants access) and up to two regular picks, each with its
    match score and reasons. Never fails because of quota or credit state.
    """
    feed = service.get_feed(user_id)
    return FeedResponse.from_feed(feed)

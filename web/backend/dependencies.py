#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from fastapi import Request

from core.engine import EngineService


def get_engine_service(request: Request) -> EngineService:
    """
    FastAPI dependency that returns the engine service built at startup.

    Usage:
        @router.get("/endpoint")
        def my_endpoint(service: EngineService = Depends(get_engine_service)):
            ...
    """
    return request.app.state.engine_service

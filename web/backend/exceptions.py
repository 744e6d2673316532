#!/usr/bin/env python3
"""
Error handlers for the web application.

Engine errors are mapped to status codes; the body always carries
`success`, `error` and `type`, plus the error's own details.
"""

import logging
from typing import Dict, Type

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.access import (
    EngineError,
    NotFound,
    InsufficientCredits,
    QuotaExceeded,
    OpportunityLocked,
    ConcurrentModification,
)

logger = logging.getLogger(__name__)


STATUS_CODES: Dict[Type[EngineError], int] = {
    NotFound: 404,
    InsufficientCredits: 402,
    QuotaExceeded: 429,
    OpportunityLocked: 403,
    ConcurrentModification: 409,
}


def status_code_for(exc: EngineError) -> int:
    for exc_type, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def engine_exception_handler(
    request: Request,
    exc: EngineError
) -> JSONResponse:
    """
    Handle engine errors.

    Args:
        request: The FastAPI request.
        exc: The engine error.

    Returns:
        JSONResponse with error details.
    """
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Engine error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"{exc.__class__.__name__} in {request.url.path}: {exc}")

    content = {
        "success": False,
        "error": str(exc),
        "type": exc.__class__.__name__
    }
    content.update(exc.to_dict())

    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


async def value_error_handler(
    request: Request,
    exc: ValueError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": str(exc),
            "type": "ValueError"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )

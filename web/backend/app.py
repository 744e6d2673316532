#!/usr/bin/env python3
"""
Opportunity Engine - FastAPI Application

HTTP surface over the matching, quota, credit and early-access engine.

Usage:
    python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import sys
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from fastapi import FastAPI, HTTPException

from core.access import EngineError
from core.config_loader import AppConfig, load_config
from core.engine import EngineService
from database.database import Database

from .exceptions import (
    engine_exception_handler,
    http_exception_handler,
    value_error_handler,
    general_exception_handler
)
from .models.responses import HealthResponse
from .routers import (
    feed_router,
    unlocks_router,
    quota_router,
    applications_router,
    credits_router
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    engine_service: Optional[EngineService] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    When no engine service is supplied, the lifespan builds a Database from
    config and disposes it on shutdown.
    """
    config = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = None
        if engine_service is None:
            db = Database(config.database)
            app.state.engine_service = EngineService(db, config)
            logger.info("Engine service started")
        else:
            app.state.engine_service = engine_service
        try:
            yield
        finally:
            if db is not None:
                db.dispose()
                logger.info("Database connections disposed")

    app = FastAPI(
        title="Opportunity Engine API",
        description="Opportunity matching, monthly quotas, credits and early-access unlocks",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # Register exception handlers
    app.add_exception_handler(EngineError, engine_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(feed_router)
    app.include_router(unlocks_router)
    app.include_router(quota_router)
    app.include_router(applications_router)
    app.include_router(credits_router)

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        return HealthResponse(status="healthy", service="opportunity-engine")

    return app


def main():
    """Run the web server."""
    import uvicorn

    config = load_config()

    logger.info(f"Starting Opportunity Engine on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        create_app(config),
        host=config.web.host,
        port=config.web.port,
        log_level="info"
    )


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests run against an in-memory SQLite database, so no external services
are required:

    python -m pytest tests/ -v

    # Only tests that touch the database
    python -m pytest tests/ -v -m "db"

Set TEST_DATABASE_URL to run the storage tests against PostgreSQL instead.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.config_loader import DatabaseConfig
from core.matching.models import AccessState, Opportunity
from database.database import Database

TEST_DB_URL = os.environ.get("TEST_DATABASE_URL", "sqlite://")

# Fixed clock for deterministic period and restriction arithmetic
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def make_database(url: Optional[str] = None) -> Database:
    """Create a fresh database with all tables."""
    db = Database(DatabaseConfig(url=url or TEST_DB_URL))
    db.drop_all()
    db.create_all()
    return db


def make_opportunity(opp_id: str = "opp-1", **overrides) -> Opportunity:
    """Build a plain opportunity record for scorer/selector tests."""
    restricted_until = overrides.pop('restricted_until', None)
    unlock_cost = overrides.pop('unlock_cost', 5)
    is_restricted = overrides.pop('is_restricted', restricted_until is not None)

    fields = {
        'id': opp_id,
        'title': "Opportunity",
        'company': "Company",
        'created_at': NOW - timedelta(days=30),
    }
    fields.update(overrides)
    return Opportunity(
        access=AccessState(
            is_restricted=is_restricted,
            restricted_until=restricted_until,
            unlock_cost=unlock_cost
        ),
        **fields
    )

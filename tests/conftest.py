"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from core.config_loader import AppConfig
from core.engine import EngineService
from notification.events import EventPublisher
from tests import make_database


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def database():
    """Fresh in-memory database per test, disposed afterwards."""
    db = make_database()
    yield db
    db.dispose()


@pytest.fixture
def published_events():
    return []


@pytest.fixture
def engine_service(database, published_events):
    """Engine service on the test database; published events are collected."""
    config = AppConfig()
    publisher = EventPublisher(config.notifications)
    publisher.subscribe(published_events.append)
    return EngineService(database, config, publisher)

#!/usr/bin/env python3
"""
HTTP tests for the FastAPI application.

Each test runs the app against an in-memory database through TestClient;
engine errors must come back as structured bodies with the mapped status.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from core.access import QuotaCheck
from core.config_loader import AppConfig
from core.matching.models import Profile
from core.utils import utcnow
from database.uow import engine_uow
from web.backend.app import create_app
from web.backend.models.responses import QuotaResponse

pytestmark = pytest.mark.db


@pytest.fixture
def client(engine_service):
    now = utcnow()
    with engine_uow(engine_service.db) as uow:
        uow.profiles.save_profile("student", Profile(skills={"python"}))
        uow.opportunities.add_opportunity(
            id="early", title="Quant Intern", company="Fund",
            is_restricted=True, restricted_until=now + timedelta(days=1), unlock_cost=5
        )
        uow.opportunities.add_opportunity(
            id="open", title="Python Developer", company="Shop", ai_skills_required=["python"]
        )
    engine_service.open_account("student", balance=6)

    app = create_app(AppConfig(), engine_service=engine_service)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_feed(client):
    response = client.get("/api/v1/users/student/feed")

    assert response.status_code == 200
    body = response.json()
    assert body["restricted_pick"]["id"] == "early"
    assert body["restricted_pick"]["locked"] is True
    assert body["restricted_pick"]["unlock_cost"] == 5
    assert body["regular_picks"][0]["id"] == "open"
    assert "1 skill matches" in body["regular_picks"][0]["reasons"]


def test_unlock_with_credits(client):
    response = client.post("/api/v1/users/student/unlocks", json={"opportunity_id": "early"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["method"] == "credits"
    assert body["credits_remaining"] == 1

    feed = client.get("/api/v1/users/student/feed").json()
    assert feed["restricted_pick"]["locked"] is False


def test_unlock_insufficient_credits_is_402(client):
    client.post("/api/v1/users/student/credits/spend", json={"action": "CUSTOM_CV"})

    response = client.post("/api/v1/users/student/unlocks", json={"opportunity_id": "early"})

    assert response.status_code == 402
    body = response.json()
    assert body["success"] is False
    assert body["type"] == "InsufficientCredits"
    assert body["shortfall"] == 4


def test_unlock_missing_opportunity_is_404(client):
    response = client.post("/api/v1/users/student/unlocks", json={"opportunity_id": "nope"})

    assert response.status_code == 404
    assert response.json()["entity"] == "opportunity"


def test_unlock_requires_opportunity_id(client):
    response = client.post("/api/v1/users/student/unlocks", json={})

    assert response.status_code == 422


def test_quota(client):
    response = client.get("/api/v1/users/student/quota")

    assert response.status_code == 200
    body = response.json()
    assert body["used"] == 0
    assert body["max"] == 4
    assert body["remaining"] == 4
    assert "next_reset_at" in body


def test_apply_until_quota_exhausted_is_429(client, engine_service):
    with engine_uow(engine_service.db) as uow:
        for i in range(4):
            uow.opportunities.add_opportunity(id=f"extra-{i}", title=f"Role {i}", company="Co")

    for i in range(4):
        response = client.post("/api/v1/users/student/applications", json={"opportunity_id": f"extra-{i}"})
        assert response.status_code == 200

    response = client.post("/api/v1/users/student/applications", json={"opportunity_id": "open"})

    assert response.status_code == 429
    body = response.json()
    assert body["type"] == "QuotaExceeded"
    assert body["used"] == 4
    assert body["max"] == 4
    assert "next_reset_at" in body
    assert "STUDENT_PREMIUM" in body["suggestion"]


def test_apply_to_locked_opportunity_is_403(client):
    response = client.post("/api/v1/users/student/applications", json={"opportunity_id": "early"})

    assert response.status_code == 403
    assert response.json()["unlock_cost"] == 5


def test_apply_reports_quota(client):
    response = client.post("/api/v1/users/student/applications", json={"opportunity_id": "open"})

    assert response.status_code == 200
    body = response.json()
    assert body["already_applied"] is False
    assert body["quota"]["used"] == 1
    assert body["quota"]["max"] == 4


def test_credits(client):
    response = client.get("/api/v1/users/student/credits")

    assert response.status_code == 200
    body = response.json()
    assert body["balance"] == 6
    assert body["tier"] == "FREE"
    assert body["history"][0]["reason"] == "opening_balance"


def test_credits_unknown_user_is_404(client):
    response = client.get("/api/v1/users/ghost/credits")

    assert response.status_code == 404
    assert response.json()["type"] == "NotFound"


def test_spend_unknown_action_is_400(client):
    response = client.post("/api/v1/users/student/credits/spend", json={"action": "TELEPORT"})

    assert response.status_code == 400
    assert response.json()["type"] == "ValueError"


def test_open_account_and_refresh(client):
    response = client.post("/api/v1/users/newcomer/account", json={"tier": "STUDENT_PREMIUM"})
    assert response.status_code == 200
    assert response.json()["balance"] == 0

    response = client.post("/api/v1/users/newcomer/credits/refresh")
    assert response.status_code == 200
    assert response.json()["balance"] == 100


def test_quota_response_for_unlimited_tier():
    check = QuotaCheck(allowed=True, used=12, remaining=None, max_actions=-1, next_reset_at=utcnow())

    data = QuotaResponse.from_check(check).model_dump(by_alias=True)

    assert data["max"] == -1
    assert data["remaining"] is None

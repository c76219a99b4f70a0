"""
E2E tests for user personas against the real finance data client.

These tests require the mock finance server to be running:
    uvicorn mock.finance_server.main:app --port 8001

User personas:
- user_steady: salary, rent, daily coffee, a lapsed gym pass and one big purchase
- user_empty: account with no records yet
"""

import pytest
from fastapi.testclient import TestClient
from insights_gateway.api.dependencies import get_now


@pytest.fixture
def live_client(client: TestClient) -> TestClient:
    """Persona fixtures are dated relative to today, so use the real clock"""
    client.app.dependency_overrides.pop(get_now, None)
    return client


@pytest.mark.integration
def test_user_steady_insights(live_client: TestClient):
    """
    user_steady: three months of regular activity
    Expected: stale subscription flagged, goal tracked, everything ordered by priority
    """
    response = live_client.post("/v1/insights/generate", json={"user_id": "user_steady"})

    assert response.status_code == 200
    data = response.json()
    assert data["generated"] is True
    assert data["count"] > 0

    keys = {i["key"] for i in data["insights"]}
    assert "unused-subscription-GymPass" in keys, "GymPass stopped charging over 60 days ago"
    assert "recurring-expense-Bean There" in keys, "Daily coffee adds up"
    assert any(k.startswith("large-expense-") for k in keys)

    ranks = {"critical": 4, "high": 3, "medium": 2, "low": 1}
    priorities = [ranks[i["priority"]] for i in data["insights"]]
    assert priorities == sorted(priorities, reverse=True)


@pytest.mark.integration
def test_user_steady_lifecycle(live_client: TestClient):
    """
    user_steady: generate, then act on an insight
    Expected: cooldown on repeat generation, dismissed insight leaves the active list
    """
    generated = live_client.post("/v1/insights/generate", json={"user_id": "user_steady"}).json()
    repeat = live_client.post("/v1/insights/generate", json={"user_id": "user_steady"}).json()
    assert repeat["generated"] is False

    insight_id = generated["insights"][0]["id"]
    response = live_client.post(f"/v1/insights/{insight_id}/dismiss", json={"user_id": "user_steady"})
    assert response.status_code == 200

    active = live_client.get("/v1/insights", params={"user_id": "user_steady"}).json()["insights"]
    assert len(active) == generated["count"] - 1


@pytest.mark.integration
def test_user_empty_no_insights(live_client: TestClient):
    """
    user_empty: no transactions, budgets or goals
    Expected: successful run with nothing to report
    """
    response = live_client.post("/v1/insights/generate", json={"user_id": "user_empty"})

    assert response.status_code == 200
    data = response.json()
    assert data["generated"] is True
    assert data["count"] == 0


@pytest.mark.integration
def test_unknown_user_unavailable(live_client: TestClient):
    """
    Unknown user: finance server answers 404
    Expected: 503 from the gateway
    """
    response = live_client.post("/v1/insights/generate", json={"user_id": "user_missing"})

    assert response.status_code == 503

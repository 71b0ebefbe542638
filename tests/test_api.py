"""Tests for the HTTP trigger and service endpoints."""

import pytest
from fastapi.testclient import TestClient

from conftest import FailingStore, seed_example
from ourarchive_stats.aggregators import StatsAggregator, get_aggregator
from ourarchive_stats.main import app


@pytest.fixture
def client(aggregator):
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def failing_client(clock):
    store = FailingStore("list", "/items")
    seed_example(store)
    app.dependency_overrides[get_aggregator] = lambda: StatsAggregator(store, clock=clock)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.parametrize("method", ["GET", "POST"])
def test_aggregate_returns_stats(client, method):
    response = client.request(method, "/aggregate")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    stats = body["stats"]
    assert stats["userCount"] == 3
    assert stats["householdCount"] == 2
    assert stats["itemCount"] == 4
    assert stats["containerCount"] == 0
    assert stats["itemTypes"] == {"box": 2, "unknown": 1, "bin": 1}
    assert stats["lastUpdated"].startswith("2025-12-03T14:30:00")


def test_aggregate_publishes(client, store):
    client.post("/aggregate")

    assert store.get("public_stats/ourarchive")["itemCount"] == 4
    assert store.get("public_stats/ourarchive/history/2025-12-03") is not None


def test_aggregate_failure_returns_500(failing_client):
    response = failing_client.post("/aggregate")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "list failed for households/h1/items: store unavailable",
    }


def test_cors_allows_any_origin(client):
    response = client.post("/aggregate", headers={"Origin": "https://portfolio.example.com"})

    assert response.headers["access-control-allow-origin"] == "*"


def test_cors_preflight(client):
    response = client.options(
        "/aggregate",
        headers={
            "Origin": "https://portfolio.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert "POST" in response.headers["access-control-allow-methods"]


def test_request_id_header(client):
    response = client.get("/", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Welcome to OurArchive Stats"


def test_service_stats_reports_runs(client):
    client.post("/aggregate")

    response = client.get("/stats")

    assert response.status_code == 200
    aggregator_stats = response.json()["aggregator"]
    assert aggregator_stats["runs"] == 1
    assert aggregator_stats["failures"] == 0


def test_health_degraded_without_scheduler(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["scheduler_running"] is False


def test_metrics_endpoint(client):
    client.post("/aggregate")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "stats_aggregation_runs_total" in response.text


def test_metrics_label_requests_by_route(client):
    client.post("/aggregate")
    client.get("/wp-login.php")

    response = client.get("/metrics")

    assert 'endpoint="/aggregate"' in response.text
    assert 'endpoint="unmatched"' in response.text
    assert "wp-login.php" not in response.text

"""Tests for error handling in the recommendation API and engine errors."""

import logging

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.api.metrics import metrics_service
from src.api.routes.recommend import get_engine
from src.recommender.engine import RecommendationEngine
from src.recommender.exceptions import (
    InvalidArgument,
    InvalidConfiguration,
    RecommenderError,
    StoreUnavailable,
)
from src.recommender.store import InMemoryEventStore

# Create test client
client = TestClient(app)


class BrokenStore:
    """Store whose backend connection always fails."""

    def __init__(self):
        self.calls = 0

    def fetch_events(self, user_id, since):
        self.calls += 1
        raise ConnectionError("database connection refused")


@pytest.fixture
def override_engine():
    """Fixture that installs a given engine for the duration of a test."""

    def install(engine):
        app.dependency_overrides[get_engine] = lambda: engine
        return engine

    metrics_service.reset()
    yield install
    app.dependency_overrides.clear()


def test_negative_limit_returns_400(override_engine):
    """Test that a negative limit is rejected before the store is queried."""
    store = BrokenStore()
    override_engine(RecommendationEngine(store))

    response = client.get("/recommend/u1?limit=-1")

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "InvalidArgument"
    assert data["details"]["argument"] == "limit"
    assert store.calls == 0


def test_store_failure_returns_503(override_engine):
    """Test that a store failure surfaces as StoreUnavailable."""
    store = BrokenStore()
    override_engine(RecommendationEngine(store))

    response = client.get("/recommend/u1?limit=3")

    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "StoreUnavailable"
    assert "recommendations" not in data
    assert data["details"]["error_type"] == "ConnectionError"
    assert metrics_service.get_metrics()["store_failure_count"] == 1
    assert metrics_service.get_metrics()["recommendation_count"] == 0


def test_limit_above_maximum_returns_422(override_engine):
    override_engine(RecommendationEngine(InMemoryEventStore()))

    response = client.get("/recommend/u1?limit=100000")

    assert response.status_code == 422


def test_invalid_limit_type_returns_422(override_engine):
    override_engine(RecommendationEngine(InMemoryEventStore()))

    response = client.get("/recommend/u1?limit=many")

    assert response.status_code == 422
    assert "detail" in response.json()


def test_error_response_structure(override_engine):
    """Test that engine errors share one response shape."""
    override_engine(RecommendationEngine(BrokenStore()))

    for url in ["/recommend/u1?limit=-3", "/recommend/u1"]:
        data = client.get(url).json()
        assert set(data) == {"error", "message", "details"}


def test_store_failure_is_logged(override_engine, caplog):
    override_engine(RecommendationEngine(BrokenStore()))

    with caplog.at_level(logging.ERROR):
        client.get("/recommend/u1")

    assert any(record.levelno == logging.ERROR for record in caplog.records)


def test_health_check_not_affected_by_store_errors(override_engine):
    override_engine(RecommendationEngine(BrokenStore()))

    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_exception_status_codes():
    """Test the HTTP status carried by each engine error."""
    assert InvalidArgument("limit", -1, "must be non-negative").status_code == 400
    assert InvalidConfiguration("lookback", "negative").status_code == 500
    assert StoreUnavailable("u1", error=OSError("boom")).status_code == 503
    assert issubclass(StoreUnavailable, RecommenderError)


def test_store_unavailable_message_includes_cause():
    error = StoreUnavailable("u1", error=TimeoutError("read timed out"))

    assert "u1" in error.message
    assert "read timed out" in error.message
    assert error.details == {
        "user_id": "u1",
        "error": "read timed out",
        "error_type": "TimeoutError",
    }

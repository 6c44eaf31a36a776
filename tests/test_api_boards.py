"""Tests for boards and analytics API endpoints."""

import pytest
from fastapi.testclient import TestClient

from growthboard.api.app import create_app
from growthboard.config import Settings
from growthboard.store.memory import InMemoryStore


@pytest.fixture
def client():
    """Client over a fresh demo-data store."""
    app = create_app(store=InMemoryStore.with_demo_data(), settings=Settings())
    return TestClient(app)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "mode": "mock", "pending_writes": 0}


class TestListBoards:
    """Tests for GET /api/boards."""

    def test_demo_boards(self, client):
        response = client.get("/api/boards")

        assert response.status_code == 200
        ids = [b["id"] for b in response.json()]
        assert ids == ["board-growth", "board-product"]

    def test_config_included(self, client):
        product = client.get("/api/boards").json()[1]

        assert product["config"]["use_custom_dimensions"] is True
        assert [d["id"] for d in product["config"]["dimensions"]] == ["strategic", "reach"]


class TestCreateAndUpdateBoard:
    """Tests for POST/PATCH/PUT board endpoints."""

    def test_create(self, client):
        response = client.post("/api/boards", json={"name": "Retention", "description": "D30"})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Retention"
        assert data["config"]["use_custom_dimensions"] is False
        assert len(client.get("/api/boards").json()) == 3

    def test_create_blank_name(self, client):
        assert client.post("/api/boards", json={"name": ""}).status_code == 422
        assert client.post("/api/boards", json={"name": "   "}).status_code == 422

    def test_rename(self, client):
        response = client.patch("/api/boards/board-growth", json={"name": "Growth Squad"})

        assert response.status_code == 200
        assert response.json()["name"] == "Growth Squad"
        assert response.json()["description"] == "Acquisition and activation experiments"

    def test_rename_missing_board(self, client):
        response = client.patch("/api/boards/nope", json={"name": "X"})

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    def test_save_config(self, client):
        body = {
            "metrics": [
                {"id": "m-signup", "name": "Signup rate", "unit": "%"},
                {"id": "m-blank", "name": ""},
            ],
            "dimensions": [{"id": "reach", "name": "Reach", "min": 1, "max": 5}],
            "use_custom_dimensions": True,
        }
        response = client.put("/api/boards/board-growth/config", json=body)

        assert response.status_code == 200
        config = response.json()["config"]
        assert [m["id"] for m in config["metrics"]] == ["m-signup"]
        assert [d["id"] for d in config["dimensions"]] == ["reach"]

    def test_save_config_invalid_range(self, client):
        body = {
            "dimensions": [{"id": "reach", "name": "Reach", "min": 5, "max": 5}],
            "use_custom_dimensions": True,
        }
        response = client.put("/api/boards/board-growth/config", json=body)

        assert response.status_code == 422
        assert "must exceed" in response.json()["detail"]


class TestVaultListing:
    """Tests for GET /api/boards/{id}/experiments."""

    def test_lists_archived_with_scores(self, client):
        response = client.get("/api/boards/board-growth/experiments")

        assert response.status_code == 200
        rows = {r["id"]: r for r in response.json()}
        assert set(rows) == {"exp-referral", "exp-onboarding", "exp-pricing"}
        assert rows["exp-onboarding"]["composite_score"] == 8.0
        assert rows["exp-onboarding"]["score_band"] == "high"
        assert rows["exp-pricing"]["composite_score"] == 6.0

    def test_search(self, client):
        response = client.get("/api/boards/board-growth/experiments", params={"q": "REFERRAL"})
        assert [r["id"] for r in response.json()] == ["exp-referral"]

    def test_result_filter(self, client):
        won = client.get("/api/boards/board-growth/experiments", params={"result": "won"})
        pending = client.get("/api/boards/board-growth/experiments", params={"result": "pending"})

        assert [r["id"] for r in won.json()] == ["exp-onboarding"]
        assert {r["id"] for r in pending.json()} == {"exp-referral", "exp-pricing"}

    def test_market_filter(self, client):
        response = client.get(
            "/api/boards/board-growth/experiments", params={"market": "AU", "type": "all"}
        )
        assert [r["id"] for r in response.json()] == ["exp-pricing"]

    def test_unknown_board(self, client):
        assert client.get("/api/boards/nope/experiments").status_code == 404


class TestKanban:
    """Tests for GET /api/boards/{id}/kanban."""

    def test_columns(self, client):
        response = client.get("/api/boards/board-growth/kanban")

        assert response.status_code == 200
        columns = response.json()["columns"]
        assert [c["label"] for c in columns] == [
            "Idea/Backlog",
            "Prioritized",
            "In Progress",
            "Complete",
            "Learnings",
        ]
        by_status = {c["status"]: [e["id"] for e in c["experiments"]] for c in columns}
        assert by_status["idea"] == ["exp-pricing"]
        assert by_status["running"] == ["exp-referral"]
        assert by_status["learnings"] == []


class TestAnalytics:
    """Tests for board analytics endpoints."""

    def test_board_analytics(self, client):
        response = client.get("/api/boards/board-growth/analytics")

        assert response.status_code == 200
        data = response.json()
        assert data["active_count"] == 2
        assert data["completed_count"] == 1
        assert data["win_rate"] == 100
        assert [m["metric_id"] for m in data["metric_summaries"]] == ["m-signup", "m-cac"]

    def test_metric_summary(self, client):
        response = client.get("/api/boards/board-growth/metrics/m-signup/summary")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert data["avg_actual"] == pytest.approx(3.5)
        assert data["hit"] is True

    def test_empty_metric_summary(self, client):
        data = client.get("/api/boards/board-growth/metrics/m-cac/summary").json()

        assert data["count"] == 0
        assert data["avg_baseline"] is None

    def test_unknown_metric(self, client):
        response = client.get("/api/boards/board-growth/metrics/nope/summary")
        assert response.status_code == 404

"""
Tests for the Dashboard Layout API.

Tests cover:
- Root and health endpoints
- Widget layout endpoints and error mapping
- Column layout endpoints
- Holdings query endpoint
"""

import json

import pytest
from fastapi.testclient import TestClient

from dashboard.main import app
from layout_engine import HOLDINGS_COLUMNS


DEFAULT_COLUMN_ORDER = [col.id for col in HOLDINGS_COLUMNS]


@pytest.fixture
def client():
    return TestClient(app)


def ids(response):
    return [p["id"] for p in response.json()["placements"]]


# =============================================================
# TEST: Root / Health
# =============================================================

class TestRoot:
    """Root and health endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["uptime_seconds"] >= 0


# =============================================================
# TEST: Widgets
# =============================================================

class TestWidgetEndpoints:
    """Dashboard widget layout."""

    def test_registry(self, client):
        response = client.get("/widgets/registry")
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 8
        assert data[0]["id"] == "commission"
        assert data[0]["default_width"] == "1/2"

    def test_initial_layout(self, client):
        response = client.get("/widgets/layout")
        assert response.status_code == 200
        data = response.json()
        assert data["rows"][0] == ["commission", "aum"]
        assert "recently-viewed" in ids(response)

    def test_initial_layout_simple_mode(self, client):
        response = client.get("/widgets/layout", params={"simple_mode": True})
        assert "recently-viewed" not in ids(response)

    def test_calculate(self, client):
        response = client.post("/widgets/layout/calculate", json={"items": [
            {"id": "aum", "width": "1/1"},
            {"id": "market", "width": "1/3"},
            {"id": "activity", "width": "1/3"},
        ]})
        assert response.status_code == 200
        assert [p["row"] for p in response.json()["placements"]] == [0, 1, 1]
        assert response.json()["placements"][0]["title"] == "Total AUM"

    def test_calculate_unknown_widget(self, client):
        response = client.post("/widgets/layout/calculate", json={"items": [{"id": "nope"}]})
        assert response.status_code == 404

    def test_calculate_bad_width(self, client):
        response = client.post("/widgets/layout/calculate", json={"items": [{"id": "aum", "width": "2/3"}]})
        assert response.status_code == 400

    def test_calculate_duplicate(self, client):
        response = client.post("/widgets/layout/calculate", json={"items": [{"id": "aum"}, {"id": "aum"}]})
        assert response.status_code == 400

    def test_move(self, client):
        response = client.post("/widgets/layout/move", json={
            "items": [{"id": "aum"}, {"id": "market"}, {"id": "activity"}],
            "active_id": "activity",
            "over_id": "aum",
        })
        assert response.status_code == 200
        assert response.json()["changed"] is True
        assert ids(response) == ["activity", "aum", "market"]

    def test_move_onto_nothing(self, client):
        response = client.post("/widgets/layout/move", json={
            "items": [{"id": "aum"}, {"id": "market"}],
            "active_id": "aum",
        })
        assert response.json()["changed"] is False
        assert ids(response) == ["aum", "market"]

    def test_enabled_keeps_width(self, client):
        response = client.post("/widgets/layout/enabled", json={
            "items": [{"id": "aum", "width": "1/1"}],
            "enabled_ids": ["market", "aum"],
        })
        placements = response.json()["placements"]
        assert [(p["id"], p["width"], p["row"]) for p in placements] == [
            ("market", "1/3", 0),
            ("aum", "1/1", 1),
        ]

    def test_enabled_unknown(self, client):
        response = client.post("/widgets/layout/enabled", json={"items": [], "enabled_ids": ["nope"]})
        assert response.status_code == 404

    def test_remove(self, client):
        response = client.post("/widgets/layout/remove", json={
            "items": [{"id": "aum"}, {"id": "market"}],
            "widget_id": "aum",
        })
        assert response.json()["changed"] is True
        assert ids(response) == ["market"]

    @pytest.mark.parametrize("pointer_x,expected", [
        (10.0, "before"),
        (50.0, None),
        (95.0, "after"),
    ])
    def test_drop_indicator(self, client, pointer_x, expected):
        response = client.post("/widgets/drop-indicator", json={
            "active_id": "aum",
            "over_id": "market",
            "pointer_x": pointer_x,
            "box": {"left": 0, "width": 100},
        })
        indicator = response.json()["indicator"]
        if expected is None:
            assert indicator is None
        else:
            assert indicator == {"over_id": "market", "position": expected}

    def test_drop_indicator_over_self(self, client):
        response = client.post("/widgets/drop-indicator", json={
            "active_id": "aum",
            "over_id": "aum",
            "pointer_x": 1.0,
            "box": {"left": 0, "width": 100},
        })
        assert response.json()["indicator"] is None


# =============================================================
# TEST: Columns
# =============================================================

class TestColumnEndpoints:
    """Holdings table columns."""

    def test_defaults(self, client):
        data = client.get("/columns/holdings").json()
        assert data["preferences"]["order"] == DEFAULT_COLUMN_ORDER
        assert data["movable_columns"] == DEFAULT_COLUMN_ORDER[2:]
        assert data["visible_columns"] == DEFAULT_COLUMN_ORDER

    def test_load_not_json(self, client):
        data = client.post("/columns/holdings/load", json={"blob": "not json"}).json()
        assert data["preferences"]["order"] == DEFAULT_COLUMN_ORDER

    def test_load_stale_blob_merged(self, client):
        blob = {"order": ["symbol", "avgPrice", "legacy"], "visibility": {"avgPrice": False}}
        data = client.post("/columns/holdings/load", json={"blob": json.dumps(blob)}).json()
        order = data["preferences"]["order"]
        assert order[:3] == ["actions", "symbol", "avgPrice"]
        assert "legacy" not in order
        assert sorted(order) == sorted(DEFAULT_COLUMN_ORDER)
        assert "avgPrice" not in data["visible_columns"]

    def test_move(self, client):
        prefs = client.get("/columns/holdings").json()["preferences"]
        data = client.post("/columns/holdings/move", json={
            "preferences": prefs,
            "active_id": "avgPrice",
            "over_id": "assetClass",
        }).json()
        assert data["changed"] is True
        assert data["preferences"]["order"][2] == "avgPrice"

    def test_move_onto_pinned(self, client):
        prefs = client.get("/columns/holdings").json()["preferences"]
        data = client.post("/columns/holdings/move", json={
            "preferences": prefs,
            "active_id": "quantity",
            "over_id": "actions",
        }).json()
        assert data["changed"] is False
        assert data["preferences"]["order"] == DEFAULT_COLUMN_ORDER

    def test_toggle(self, client):
        prefs = client.get("/columns/holdings").json()["preferences"]
        data = client.post("/columns/holdings/toggle", json={
            "preferences": prefs,
            "column_id": "description",
        }).json()
        assert data["changed"] is True
        assert data["preferences"]["visibility"]["description"] is False
        assert "description" not in data["visible_columns"]

    def test_toggle_pinned(self, client):
        prefs = client.get("/columns/holdings").json()["preferences"]
        data = client.post("/columns/holdings/toggle", json={
            "preferences": prefs,
            "column_id": "symbol",
        }).json()
        assert data["changed"] is False
        assert "symbol" in data["visible_columns"]


# =============================================================
# TEST: Holdings
# =============================================================

class TestHoldingsEndpoint:
    """Holdings sort / search / filter."""

    ROWS = [
        {"symbol": "MSFT", "marketValue": 4100.0, "accountType": "Cash",
         "security": {"description": "Microsoft Corp"}},
        {"symbol": "VFIAX", "marketValue": 5000.0, "accountType": "Margin",
         "security": {"description": "Vanguard 500 Index Fund"}},
        {"symbol": "AAPL", "marketValue": 1950.0, "accountType": "Cash",
         "security": {"description": "Apple Inc"}},
    ]

    def test_sort_and_filter(self, client):
        response = client.post("/holdings/query", json={
            "rows": self.ROWS,
            "asset_class": "Equities",
            "sort_key": "marketValue",
            "sort_direction": "desc",
        })
        assert response.status_code == 200
        data = response.json()
        assert [r["symbol"] for r in data["rows"]] == ["MSFT", "AAPL"]
        assert data["total"] == 2

    def test_bad_direction(self, client):
        response = client.post("/holdings/query", json={"rows": [], "sort_direction": "up"})
        assert response.status_code == 422

    def test_numeric_fields(self, client):
        response = client.post("/holdings/query", json={
            "rows": [
                {"symbol": 123, "security": {"cusip": 4567, "description": 8}},
                {"symbol": "AAPL", "security": "n/a"},
            ],
            "search_term": "1",
            "sort_key": "symbol",
        })
        assert response.status_code == 200
        assert [r["symbol"] for r in response.json()["rows"]] == [123]

"""HTTP surface exercised through FastAPI's TestClient."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tripslot.api.routes import schedule as schedule_routes
from tripslot.api.server import app
from tripslot.modules.observability.logger import StructuredLogger
from tripslot.modules.tool_usage.travel_cache import InMemoryTravelTimeCache


@pytest.fixture
def travel_cache():
    return InMemoryTravelTimeCache(ttl_seconds=60, max_entries=100)


@pytest.fixture
def client(travel_cache):
    app.dependency_overrides[schedule_routes.get_travel_cache] = lambda: travel_cache
    app.dependency_overrides[schedule_routes.get_perf_logger] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/v1/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "tripslot"}


def test_auto_schedule_with_date_range(client, travel_cache):
    body = {
        "candidates": [
            {"id": "a", "name": "Louvre", "durationMinutes": 90,
             "coordinates": {"lat": 48.8606, "lng": 2.3376}, "types": ["museum"]},
            {"id": "b", "name": "Tuileries", "duration": "45 min",
             "coordinates": {"lat": 48.8635, "lng": 2.3275}, "types": ["park"]},
            {"id": "", "name": "broken"},
        ],
        "fixed_blocks": [{"date": "2024-06-01", "start_time": "12:00", "end_time": "13:00"}],
        "date_from": "2024-06-01",
        "date_to": "2024-06-02",
        "preferences": {"pace": "balanced", "dayStart": "09:00", "dayEnd": "18:00"},
        "message": "museum day please",
    }
    resp = client.post("/v1/schedule/auto", json=body)
    assert resp.status_code == 200
    data = resp.json()

    assert data["requested_theme"] == "museums"
    assert {p["id"] for p in data["placements"]} == {"a", "b"}
    assert data["unplaced"] == []
    assert [r["index"] for r in data["rejected"]] == [2]
    assert data["day_plans"][0]["rationale"].startswith("Focused on museums")
    assert all(op["op"] == "update_activity" for op in data["operations"])
    assert len(travel_cache) >= 1


def test_auto_schedule_rejects_unknown_strategy(client):
    resp = client.post("/v1/schedule/auto", json={"strategy": "random"})
    assert resp.status_code == 422


def test_auto_schedule_without_dates_reports_unplaced(client):
    resp = client.post("/v1/schedule/auto", json={"candidates": [{"id": "a"}]})
    assert resp.status_code == 200
    assert resp.json()["unplaced"] == [{"id": "a", "reason": "No valid dates to schedule into."}]


def test_overlaps_endpoint(client):
    body = {
        "planned": [{"id": "1", "name": "Colosseum", "date": "2026-03-18",
                     "start_time": "10:00", "end_time": "11:00"}],
        "blocks": [{"id": "f", "title": "Flight to Rome", "kind": "flight", "date": "2026-03-18",
                    "start_time": "10:30", "end_time": "12:30"}],
    }
    resp = client.post("/v1/schedule/overlaps", json=body)
    assert resp.status_code == 200
    assert resp.json()["warnings"] == [
        'Overlap on 2026-03-18: "Colosseum" (10:00-11:00) overlaps Flight "Flight to Rome" (10:30-12:30).',
    ]


def test_alternatives_endpoint(client):
    body = {
        "target": {"id": "10", "destination_id": "1", "date": "2026-01-05",
                   "start_time": "10:00", "end_time": "11:00",
                   "type_tags": ["museum"], "coordinates": {"lat": 0, "lng": 0}},
        "candidates": [
            {"id": "11", "destination_id": "1", "type_tags": ["museum"],
             "coordinates": {"lat": 0, "lng": 0.01},
             "open_hours": [{"day": 1, "open_hour": 9, "open_minute": 0, "close_hour": 17, "close_minute": 0}]},
            {"id": "12", "destination_id": "1", "coordinates": {"lat": 0, "lng": 0.02},
             "open_hours": [{"day": 1, "open_hour": 12, "open_minute": 0, "close_hour": 13, "close_minute": 0}]},
        ],
    }
    resp = client.post("/v1/schedule/alternatives", json=body)
    assert resp.status_code == 200
    alts = resp.json()["alternatives"]
    assert [a["id"] for a in alts] == ["11"]
    assert alts[0]["is_open_during_slot"] is True


def test_preferences_infer_layers_explicit_over_hints(client):
    body = {
        "activities": [
            {"date": "2024-06-01", "start_time": "10:00", "end_time": "11:00", "types": ["museum"]},
        ],
        "message": "keep it relaxed, lots of food",
        "explicit": {"travel_mode": "transit"},
    }
    resp = client.post("/v1/preferences/infer", json=body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["preferences"]["pace"] == "relaxed"
    assert data["preferences"]["travel_mode"] == "transit"
    assert data["preferences"]["interests"] == ["food"]
    assert data["preferences"]["day_start"] == "10:00"
    assert data["hints"] == {"pace": "relaxed", "interests": ["food"]}
    assert data["theme"] == "food"


def test_session_id_with_path_characters_is_rejected(client):
    resp = client.post("/v1/schedule/auto", json={"session_id": "../escaped"})
    assert resp.status_code == 422


def test_perf_log_handle_is_closed_after_each_run(tmp_path, travel_cache):
    perf = StructuredLogger(tmp_path)
    app.dependency_overrides[schedule_routes.get_travel_cache] = lambda: travel_cache
    app.dependency_overrides[schedule_routes.get_perf_logger] = lambda: perf
    try:
        client = TestClient(app)
        for i in range(3):
            body = {"candidates": [{"id": "a"}], "date_pool": ["2024-06-01"], "session_id": f"req_{i}"}
            assert client.post("/v1/schedule/auto", json=body).status_code == 200
    finally:
        app.dependency_overrides.clear()

    assert perf.open_sessions == []
    assert sorted(p.name for p in tmp_path.iterdir()) == ["req_0.jsonl", "req_1.jsonl", "req_2.jsonl"]


def test_requested_theme_is_lower_cased(client):
    body = {"candidates": [{"id": "a"}], "date_pool": ["2024-06-01"], "requested_theme": "Museums"}
    resp = client.post("/v1/schedule/auto", json=body)
    assert resp.status_code == 200
    assert resp.json()["requested_theme"] == "museums"


def test_single_string_interest_is_not_split(client):
    resp = client.post("/v1/preferences/infer", json={"explicit": {"interests": "food"}})
    assert resp.status_code == 200
    assert resp.json()["preferences"]["interests"] == ["food"]

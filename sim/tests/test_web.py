"""Tests for the FastAPI endpoints."""

import shutil

import pytest
from fastapi.testclient import TestClient

from sc2_sim import web


@pytest.fixture
def client(tmp_path, monkeypatch, build_orders_dir):
    for f in build_orders_dir.glob("*.yaml"):
        shutil.copy(f, tmp_path / f.name)
    monkeypatch.setattr(web, "BUILD_ORDERS_DIR", tmp_path)
    return TestClient(web.app)


def test_units_catalog(client):
    resp = client.get("/api/units", params={"race": "zerg"})
    assert resp.status_code == 200
    units = resp.json()["units"]
    assert units["Drone"]["type"] == "worker"
    assert units["Drone"]["minerals"] == 50
    assert units["inject"]["type"] == "action"
    assert "SCV" not in units


def test_units_unknown_race(client):
    assert client.get("/api/units", params={"race": "elves"}).status_code == 400


def test_list_build_orders(client):
    files = client.get("/api/build-orders").json()["build_orders"]
    assert {"filename": "terran_reaper_expand.yaml", "stem": "terran_reaper_expand"} in files


def test_build_order_detail(client):
    resp = client.get("/api/build-orders/zerg_hatch_first.yaml")
    assert resp.status_code == 200
    data = resp.json()
    assert data["race"] == "zerg"
    assert data["settings"] == {"idle_limit": 60.0}
    assert data["build_order"][0] == "Drone"


def test_build_order_detail_missing(client):
    assert client.get("/api/build-orders/nope.yaml").status_code == 404


def test_simulate_inline(client):
    resp = client.post("/api/simulate", json={
        "build_order": {
            "name": "Inline",
            "race": "protoss",
            "build_order": ["Probe", {"name": "Pylon", "type": "structure"}],
        },
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "completed"
    assert data["completed"] is True
    assert data["bo_index"] == 2
    assert data["unit_counts"]["Pylon"] == 1
    assert [e["name"] for e in data["events"]] == ["Probe", "Pylon"]


def test_simulate_file(client):
    resp = client.post("/api/simulate", json={"filename": "terran_reaper_expand.yaml"})
    assert resp.status_code == 200
    assert resp.json()["build_order_name"] == "Reaper Expand"


def test_simulate_infeasible_is_not_an_error(client):
    resp = client.post("/api/simulate", json={
        "build_order": {"race": "terran", "build_order": ["Marine"]},
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "stalled"
    assert data["blocked_item"] == {"name": "Marine", "type": "unit"}


@pytest.mark.parametrize("payload", [
    {},
    {"build_order": {"race": "terran", "build_order": ["Zergling"]}},
    {"build_order": {"race": "terran", "build_order": ["Marinee"]}},
    {"build_order": {"race": "terran", "settings": {"idle_limt": 5}}},
    {"filename": "../secrets.yaml"},
])
def test_simulate_bad_requests(client, payload):
    assert client.post("/api/simulate", json=payload).status_code == 400


def test_simulate_missing_file(client):
    assert client.post("/api/simulate", json={"filename": "nope.yaml"}).status_code == 404


def test_compare(client):
    resp = client.post("/api/compare", json={
        "build_orders": [{"name": "One SCV", "build_order": ["SCV"]}],
        "filenames": ["protoss_gate_expand.yaml"],
    })
    assert resp.status_code == 200
    names = [r["build_order_name"] for r in resp.json()["results"]]
    assert names == ["One SCV", "Gate Expand"]


def test_save(client, tmp_path):
    resp = client.post("/api/save", json={
        "build_order": {"name": "Saved", "race": "zerg", "build_order": ["Drone", "Overlord"]},
        "filename": "saved",
    })
    assert resp.status_code == 200
    assert resp.json() == {"saved": "saved.yaml"}
    assert (tmp_path / "saved.yaml").exists()

    detail = client.get("/api/build-orders/saved.yaml").json()
    assert detail["build_order"] == ["Drone", "Overlord"]


def test_save_rejects_invalid_order(client, tmp_path):
    resp = client.post("/api/save", json={
        "build_order": {"race": "zerg", "build_order": ["SCV"]},
        "filename": "bad",
    })
    assert resp.status_code == 400
    assert not (tmp_path / "bad.yaml").exists()

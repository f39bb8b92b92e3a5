from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from main import app
from services.calibration.calibration_singleton import set_calibration_service

POINTS = [
    {"x": 0, "y": 0, "axis1": 0, "axis2": 0},
    {"x": 1, "y": 0, "axis1": 0, "axis2": 1},
    {"x": 0, "y": 1, "axis1": 1, "axis2": 0},
]


@pytest.fixture
def calibration_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "calibration.json"
    monkeypatch.setenv("CALIBRATION_FILE", str(path))
    set_calibration_service(None)
    yield path
    set_calibration_service(None)


@pytest.fixture
def client(calibration_file: Path) -> TestClient:
    return TestClient(app)


def _capture_all(client: TestClient) -> dict:
    body = {}
    for point in POINTS:
        body = client.post("/api/calibration/capture", json=point).json()
    return body


def test_status_starts_uncalibrated(client: TestClient) -> None:
    body = client.get("/api/calibration/status").json()
    assert body["state"] == "uncalibrated"
    assert body["calibrated"] is False
    assert body["capture"] == {"captured": 0}


def test_capture_commits_and_persists(client: TestClient, calibration_file: Path) -> None:
    first = client.post("/api/calibration/capture", json=POINTS[0]).json()
    assert first["captured"] == 1
    assert first["committed"] is False
    assert not calibration_file.exists()

    client.post("/api/calibration/capture", json=POINTS[1])
    last = client.post("/api/calibration/capture", json=POINTS[2]).json()
    assert last["success"] and last["committed"]

    saved = json.loads(calibration_file.read_text(encoding="utf-8"))
    assert len(saved["points"]) == 3
    assert client.get("/api/calibration/status").json()["state"] == "calibrated"


def test_collinear_capture_is_not_committed(client: TestClient, calibration_file: Path) -> None:
    for i in range(3):
        body = client.post("/api/calibration/capture", json={"x": i, "y": i, "axis1": i, "axis2": i}).json()
    assert body["success"] is False
    assert body["issue"] == "geometry_degenerate"
    assert not calibration_file.exists()


def test_cancel(client: TestClient) -> None:
    client.post("/api/calibration/capture", json=POINTS[0])
    assert client.post("/api/calibration/capture/cancel").json() == {"success": True, "dropped": 1}
    assert client.get("/api/calibration/status").json()["capture"]["captured"] == 0


def test_transforms(client: TestClient) -> None:
    _capture_all(client)
    to_geo = client.post("/api/calibration/to-geo", json={"points": [[3, 7]]}).json()
    assert to_geo["points"] == [pytest.approx([7, 3])]

    to_local = client.post("/api/calibration/to-local", json={"points": [[7, 3]]}).json()
    assert to_local["points"] == [pytest.approx([3, 7])]

    bad = client.post("/api/calibration/to-geo", json={"points": [[1, 2, 3]]})
    assert bad.status_code == 400


def test_reset_deletes_file(client: TestClient, calibration_file: Path) -> None:
    _capture_all(client)
    assert calibration_file.exists()

    body = client.delete("/api/calibration").json()
    assert body["success"] and body["calibrated"] is False
    assert not calibration_file.exists()
    assert client.get("/api/calibration/status").json()["state"] == "uncalibrated"


def test_export(client: TestClient) -> None:
    _capture_all(client)
    document = client.get("/api/calibration/export").json()
    assert set(document) == {"points", "updated_at", "note"}
    assert document["points"][1] == {"local": {"x": 1.0, "y": 0.0}, "geo": {"axis1": 0.0, "axis2": 1.0}}


def test_geojson(client: TestClient) -> None:
    _capture_all(client)
    parcel = {"id": "a", "block_key": "1", "boundary": [[0, 0], [1, 0], [1, 1], [0, 1]]}
    collection = client.post("/api/calibration/geojson", json={"parcels": [parcel]}).json()

    assert collection["type"] == "FeatureCollection"
    geometry = collection["features"][0]["geometry"]
    assert geometry["type"] == "Polygon"
    assert geometry["coordinates"][0][:4] == [[0, 0], [1, 0], [1, 1], [0, 1]]


def test_health_and_logs(client: TestClient) -> None:
    health = client.get("/api/health").json()
    assert health["status"] == "success"
    assert health["calibration_state"] == "uncalibrated"

    logs = client.get("/api/logs/recent", params={"limit": 5})
    assert logs.status_code == 200
    assert "logs" in logs.json()

"""
API Tests
=========

HTTP surface of the surfacing engine.
"""

from concurrent.futures import ThreadPoolExecutor

from fastapi.testclient import TestClient

from surfacing_engine.main import app, reset_state


client = TestClient(app)


def setup_function():
    reset_state()


def fire(ts, score=0.96, coord=(11.50, 48.71), **extra):
    return {"label": "fire", "score": score, "coord": list(coord), "ts": ts, **extra}


CONSOLE_CONTEXT = {
    "aois": {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"id": "school", "name": "Primary school"},
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[
                        [11.49, 48.70], [11.51, 48.70], [11.51, 48.72],
                        [11.49, 48.72], [11.49, 48.70],
                    ]],
                },
            }
        ],
    },
    "assets": [[11.495, 48.708]],
}


def test_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["service"] == "DroneEventSurfacing"


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_context_console_shape():
    response = client.post("/missions/m-1/context", json=CONSOLE_CONTEXT)

    assert response.status_code == 200
    assert response.json() == {
        "mission_id": "m-1",
        "areas_of_interest": 1,
        "critical_assets": 1,
    }


def test_context_invalid():
    payload = {"areas_of_interest": [{"ring": [[0, 0], [1, 1]]}]}
    response = client.post("/missions/m-1/context", json=payload)
    assert response.status_code == 422


def test_persistent_fire_auto_dispatch():
    first = client.post("/missions/m-1/events", json=fire(0, event_id="e1")).json()
    second = client.post("/missions/m-1/events", json=fire(1000, event_id="e2")).json()

    assert first["decision"] == "record"
    assert first["reason_code"] == "FIRE_SINGLE_FRAME"
    assert second["decision"] == "auto-dispatch"
    assert second["reason_code"] == "FIRE_PERSISTENT_HIGH_CONFIDENCE"
    assert second["event_id"] == "e2"
    assert second["signals"]["persistence_count"] == 2
    assert second["presentation"] == {"icon": "🔥", "name": "Fire"}


def test_invalid_event_is_ignored():
    response = client.post("/missions/m-1/events", json={"label": "fire", "score": 3})

    assert response.status_code == 200
    body = response.json()
    assert body["decision"] == "ignore"
    assert body["reason_code"] == "INVALID_INPUT"


def test_chemical_near_asset_uses_context():
    client.post("/missions/m-1/context", json=CONSOLE_CONTEXT)
    body = client.post(
        "/missions/m-1/events",
        json={"label": "chemical", "score": 0.9, "coord": [11.495, 48.708], "ts": 0},
    ).json()

    assert body["decision"] == "surface"
    assert body["presentation"]["icon"] == "🧪"


def test_alerts():
    client.post("/missions/m-1/events", json=fire(0))
    client.post("/missions/m-1/events", json=fire(1000))
    client.post("/missions/m-1/events", json={"label": "car", "score": 0.9, "coord": [0, 0], "ts": 2000})

    body = client.get("/missions/m-1/alerts").json()
    assert body["mission_id"] == "m-1"
    assert [a["decision"] for a in body["alerts"]] == ["auto-dispatch"]


def test_peek_does_not_commit():
    client.post("/missions/m-1/events", json=fire(0))
    peeked = client.post("/missions/m-1/peek", json=fire(1000)).json()
    committed = client.post("/missions/m-1/events", json=fire(1000)).json()

    assert peeked["decision"] == committed["decision"] == "auto-dispatch"


def test_unknown_mission_404():
    assert client.post("/missions/nope/peek", json=fire(0)).status_code == 404
    assert client.get("/missions/nope/alerts").status_code == 404
    assert client.delete("/missions/nope").status_code == 404


def test_close_mission():
    client.post("/missions/m-1/events", json=fire(0))

    response = client.delete("/missions/m-1")
    assert response.json() == {"mission_id": "m-1", "status": "closed"}
    assert client.get("/missions/m-1/alerts").status_code == 404


def test_metrics():
    client.post("/missions/m-1/events", json=fire(0))

    body = client.get("/metrics").json()
    assert body["sessions"] == 1
    assert body["missions"]["m-1"]["events_processed"] == 1
    assert body["missions"]["m-1"]["decisions"]["record"] == 1


def test_concurrent_submissions():
    def post(i):
        event = {"label": "car", "score": 0.5, "coord": [0, 0], "ts": i * 100}
        return client.post("/missions/busy/events", json=event).status_code

    with ThreadPoolExecutor(max_workers=8) as pool:
        statuses = list(pool.map(post, range(40)))

    assert statuses == [200] * 40
    body = client.get("/metrics").json()
    assert body["missions"]["busy"]["events_processed"] == 40

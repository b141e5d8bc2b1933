# tests/test_routes.py

from src.Services.settings_store import settings_store


def _register(client, device_id="LAMP-001", name="Hallway lamp", location="1st floor"):
    return client.post("/devices/", json={"device_id": device_id, "device_name": name, "location": location})


def _auto(client, device_id="LAMP-001"):
    return client.put(f"/devices/{device_id}/mode", json={"mode": "AUTO"}, headers={"X-Actor-ID": "admin"})


# ==========================================================
# Devices
# ==========================================================

def test_register_and_get_device(client):
    response = _register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["device_id"] == "LAMP-001"
    assert body["location"] == "1st floor"

    device = client.get("/devices/LAMP-001").json()
    assert device["status"] == "OFF"
    assert device["mode"] == "MANUAL"
    assert device["is_online"] is False
    assert device["connectivity"] == "OFFLINE"


def test_register_duplicate_returns_conflict(client):
    _register(client)
    response = _register(client, name="Other")

    assert response.status_code == 409
    assert response.json() == {
        "success": False,
        "error": "Conflict",
        "message": "Device 'LAMP-001' already registered",
    }


def test_register_missing_name_is_invalid_argument(client):
    response = client.post("/devices/", json={"device_id": "LAMP-001"})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgument"


def test_unknown_device_is_not_found(client):
    for method, path, payload in [
        ("get", "/devices/GHOST", None),
        ("put", "/devices/GHOST/control", {"status": "ON"}),
        ("put", "/devices/GHOST/mode", {"mode": "AUTO"}),
        ("post", "/devices/GHOST/heartbeat", None),
        ("delete", "/devices/GHOST", None),
    ]:
        response = client.request(method.upper(), path, json=payload)
        assert response.status_code == 404, path
        assert response.json()["error"] == "NotFound"


def test_control_endpoint_records_actor(client):
    _register(client)
    _auto(client)

    response = client.put("/devices/LAMP-001/control", json={"status": "ON"}, headers={"X-Actor-ID": "operator-7"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Device turned ON",
        "status": "ON",
        "mode": "MANUAL",
    }

    logs = client.get("/logs/", params={"device_id": "LAMP-001", "action": "ON"}).json()["logs"]
    assert logs[0]["actor"] == "operator-7"
    assert logs[0]["mode"] == "MANUAL"


def test_control_invalid_status(client):
    _register(client)

    response = client.put("/devices/LAMP-001/control", json={"status": "BLINK"})

    assert response.status_code == 400
    assert response.json()["message"] == "Valid status (ON/OFF) is required"


def test_mode_change_response(client):
    _register(client)

    response = _auto(client)

    assert response.status_code == 200
    assert response.json()["mode"] == "AUTO"
    assert response.json()["status"] == "OFF"


def test_heartbeat_sets_online(client):
    _register(client)

    assert client.post("/devices/LAMP-001/heartbeat").status_code == 200

    device = client.get("/devices/LAMP-001").json()
    assert device["is_online"] is True
    assert device["connectivity"] == "ONLINE"
    assert device["last_seen"] is not None


def test_list_devices(client):
    _register(client, "LAMP-001")
    _register(client, "LAMP-002", "Garage lamp")

    body = client.get("/devices/").json()

    assert body["total"] == 2
    assert {d["device_id"] for d in body["devices"]} == {"LAMP-001", "LAMP-002"}


def test_delete_device_cascades(client):
    _register(client)
    _auto(client)
    client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": 350})

    assert client.delete("/devices/LAMP-001").status_code == 200

    assert client.get("/devices/LAMP-001").status_code == 404
    assert client.get("/logs/").json()["total"] == 0
    assert client.get("/sensors/latest").json()["data"] == []


# ==========================================================
# Sensors
# ==========================================================

def test_ingest_response_shape(client):
    _register(client)
    _auto(client)

    body = client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": 350}).json()

    assert body == {
        "success": True,
        "message": "Sensor data received",
        "changed": True,
        "status": "ON",
        "auto_action": "ON",
        "current_status": "ON",
    }


def test_ingest_unknown_device(client):
    response = client.post("/sensors/data", json={"device_id": "GHOST", "light_intensity": 350})

    assert response.status_code == 404
    assert response.json()["message"] == "Device 'GHOST' not found. Please register device first."


def test_ingest_missing_reading(client):
    _register(client)

    response = client.post("/sensors/data", json={"device_id": "LAMP-001"})

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgument"


def test_ingest_negative_reading(client):
    _register(client)

    response = client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": -5})

    assert response.status_code == 400


def test_sensor_history_latest_and_stats(client):
    _register(client)
    for value in (100, 200, 300):
        client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": value})

    history = client.get("/sensors/data/LAMP-001", params={"limit": 2}).json()["data"]
    assert [r["light_intensity"] for r in history] == [300, 200]

    latest = client.get("/sensors/latest").json()["data"]
    assert latest[0]["light_intensity"] == 300

    stats = client.get("/sensors/stats").json()
    assert stats["hours"] == 24
    assert stats["stats"][0]["reading_count"] == 3
    assert stats["stats"][0]["avg_intensity"] == 200
    assert stats["stats"][0]["min_intensity"] == 100
    assert stats["stats"][0]["max_intensity"] == 300


# ==========================================================
# Logs
# ==========================================================

def test_log_filters_and_pagination(client):
    _register(client)
    _auto(client)
    for value in (350, 100, 350, 100):
        client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": value})

    everything = client.get("/logs/").json()
    assert everything["total"] == 5
    assert everything["logs"][0]["action"] == "OFF"
    assert everything["logs"][-1]["action"] == "MODE_CHANGE"

    auto_only = client.get("/logs/", params={"mode": "AUTO", "action": "ON"}).json()
    assert auto_only["total"] == 2
    assert {e["action"] for e in auto_only["logs"]} == {"ON"}

    page = client.get("/logs/", params={"limit": 2, "offset": 2}).json()
    assert page["total"] == 5
    assert page["limit"] == 2
    assert page["offset"] == 2
    assert len(page["logs"]) == 2


def test_log_limit_is_capped(client):
    body = client.get("/logs/", params={"limit": 10000}).json()

    assert body["limit"] == 500


def test_device_and_recent_logs(client):
    _register(client)
    client.put("/devices/LAMP-001/control", json={"status": "ON"})

    device_logs = client.get("/logs/device/LAMP-001").json()["logs"]
    recent = client.get("/logs/recent").json()["logs"]

    assert len(device_logs) == 1
    assert device_logs[0]["device_name"] == "Hallway lamp"
    assert len(recent) == 1
    assert client.get("/logs/device/GHOST").status_code == 404


# ==========================================================
# Settings & dashboard
# ==========================================================

def test_settings_roundtrip(client, db):
    settings_store.seed_defaults(db)

    before = client.get("/settings/").json()["settings"]
    assert before == {"auto_mode_enabled": "false", "light_threshold": "300", "polling_interval": "5000"}

    response = client.put("/settings/", json={"light_threshold": 450, "polling_interval": 2000})
    assert response.status_code == 200
    assert response.json()["updated_keys"] == ["light_threshold", "polling_interval"]

    after = client.get("/settings/").json()["settings"]
    assert after["light_threshold"] == "450"
    assert after["polling_interval"] == "2000"


def test_settings_rejects_invalid_values(client):
    assert client.put("/settings/", json={"light_threshold": -1}).status_code == 400
    assert client.put("/settings/", json={"polling_interval": 0}).status_code == 400
    assert client.get("/settings/").json()["settings"] == {}


def test_threshold_update_applies_to_next_reading(client):
    _register(client)
    _auto(client)
    client.put("/settings/", json={"light_threshold": 400})

    body = client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": 350}).json()

    assert body["status"] == "OFF"
    assert body["changed"] is False


def test_dashboard_stats(client):
    _register(client, "LAMP-001")
    _register(client, "LAMP-002", "Garage lamp")
    _auto(client, "LAMP-001")
    client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": 350})
    client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": 100})
    client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": 350})

    stats = client.get("/settings/dashboard-stats").json()["stats"]

    assert stats == {
        "total_devices": 2,
        "active_lamps": 1,
        "online_devices": 1,
        "auto_mode_devices": 1,
        "recent_readings": 3,
        "energy_saved": "0.05",
    }


# ==========================================================
# Service endpoints
# ==========================================================

def test_health_and_api_info(client):
    assert client.get("/health").json() == {"status": "ok", "database": "ok"}
    assert client.get("/api").json()["status"] == "online"


def test_log_stream_answers_ping(client):
    from src.Core import log_ws

    with client.websocket_connect("/logs/stream") as ws:
        assert log_ws.log_ws_manager.has_clients
        ws.send_text("ping")
        assert ws.receive_json() == {"msg_type": "pong"}



def test_store_failure_on_read_path_is_persistence_failure(client):
    from src.DB.database import drop_all_tables

    _register(client)
    drop_all_tables()

    response = client.get("/devices/LAMP-001")

    assert response.status_code == 503
    assert response.json()["success"] is False
    assert response.json()["error"] == "PersistenceFailure"


def test_ingest_rejects_boolean_and_string_readings(client):
    _register(client)

    for value in (True, "350"):
        response = client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": value})
        assert response.status_code == 400, value
        assert response.json()["error"] == "InvalidArgument"

    assert client.get("/sensors/data/LAMP-001").json()["data"] == []
    assert client.post("/sensors/data", json={"device_id": "LAMP-001", "light_intensity": 312.5}).status_code == 200

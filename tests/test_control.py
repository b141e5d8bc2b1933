# tests/test_control.py

import pytest

from src.Core.errors import InvalidArgument, NotFound
from src.Models.device import MODE_AUTO
from src.Repositories import control_log as control_log_repo
from src.Repositories import device as device_repo
from src.Services.device_control import device_control
from src.Services.liveness import liveness_tracker
from src.Services.telemetry_ingest import telemetry_ingest


def _logs(db, device_id):
    device = device_repo.get_device_by_id(db, device_id)
    return control_log_repo.get_device_log_entries(db, device.id)


def test_manual_control_forces_manual_mode(db, register):
    register(mode=MODE_AUTO)

    device = device_control.set_status(db, "LAMP-001", "ON", "operator-7")

    assert device.status == "ON"
    assert device.mode == "MANUAL"

    entry = _logs(db, "LAMP-001")[-1]
    assert entry.action == "ON"
    assert entry.mode == "MANUAL"
    assert entry.actor == "operator-7"
    assert entry.details == "Manual control: ON"


def test_manual_control_logs_even_without_change(db, register):
    register()

    device_control.set_status(db, "LAMP-001", "OFF", "operator-7")
    device_control.set_status(db, "LAMP-001", "OFF", None)

    entries = _logs(db, "LAMP-001")
    assert len(entries) == 2
    assert entries[1].actor is None


def test_automation_stops_after_manual_override(db, register):
    register(mode=MODE_AUTO)
    device_control.set_status(db, "LAMP-001", "OFF", "operator-7")

    result = telemetry_ingest.ingest(db, "LAMP-001", 900)

    assert result.status == "OFF"
    assert len(_logs(db, "LAMP-001")) == 1


@pytest.mark.parametrize("status", ["on", "DIM", "", None])
def test_invalid_status_rejected(db, register, status):
    register()

    with pytest.raises(InvalidArgument):
        device_control.set_status(db, "LAMP-001", status, None)

    assert _logs(db, "LAMP-001") == []


def test_manual_control_unknown_device(db):
    with pytest.raises(NotFound):
        device_control.set_status(db, "GHOST", "ON", None)


def test_mode_change_keeps_status(db, register):
    register()
    device_control.set_status(db, "LAMP-001", "ON", "operator-7")

    device = device_control.set_mode(db, "LAMP-001", "AUTO", "operator-7")

    assert device.mode == "AUTO"
    assert device.status == "ON"

    entry = _logs(db, "LAMP-001")[-1]
    assert entry.action == "MODE_CHANGE"
    assert entry.mode == "AUTO"
    assert entry.details == "Mode changed to AUTO"


def test_next_reading_decides_after_entering_auto(db, register):
    register()
    device_control.set_status(db, "LAMP-001", "ON", None)
    device_control.set_mode(db, "LAMP-001", "AUTO", None)

    result = telemetry_ingest.ingest(db, "LAMP-001", 100)

    assert result.status == "OFF"
    assert [e.action for e in _logs(db, "LAMP-001")] == ["ON", "MODE_CHANGE", "OFF"]


@pytest.mark.parametrize("mode", ["auto", "SEMI", ""])
def test_invalid_mode_rejected(db, register, mode):
    register()

    with pytest.raises(InvalidArgument):
        device_control.set_mode(db, "LAMP-001", mode, None)


def test_heartbeat_marks_device_online(db, register):
    register()
    assert liveness_tracker.connectivity(device_repo.get_device_by_id(db, "LAMP-001")) == "OFFLINE"

    liveness_tracker.heartbeat(db, "LAMP-001")

    device = device_repo.get_device_by_id(db, "LAMP-001")
    assert device.is_online is True
    assert liveness_tracker.connectivity(device) == "ONLINE"


def test_heartbeat_unknown_device(db):
    with pytest.raises(NotFound):
        liveness_tracker.heartbeat(db, "GHOST")


def test_stale_device_is_offline(db, register):
    from datetime import timedelta
    from src.Core.timeutil import now_utc

    register()
    liveness_tracker.heartbeat(db, "LAMP-001")
    device = device_repo.get_device_by_id(db, "LAMP-001")

    assert liveness_tracker.connectivity(device, now_utc() + timedelta(seconds=301)) == "OFFLINE"

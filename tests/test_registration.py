# tests/test_registration.py

import pytest

from src.Core.errors import Conflict, InvalidArgument
from src.Repositories import device as device_repo
from src.Services.device_control import device_control
from src.Services.settings_store import settings_store


def test_register_defaults(db):
    device = device_control.register(db, "LAMP-001", "Hallway lamp")

    assert device.status == "OFF"
    assert device.mode == "MANUAL"
    assert device.is_online is False
    assert device.last_seen is None
    assert device.location == ""


def test_duplicate_registration_conflicts_and_keeps_row(db):
    device_control.register(db, "LAMP-001", "Hallway lamp", "1st floor")
    device_control.set_status(db, "LAMP-001", "ON", None)

    with pytest.raises(Conflict):
        device_control.register(db, "LAMP-001", "Other name", "Basement")

    device = device_repo.get_device_by_id(db, "LAMP-001")
    assert device.device_name == "Hallway lamp"
    assert device.location == "1st floor"
    assert device.status == "ON"
    assert device_repo.count_devices(db) == 1


@pytest.mark.parametrize("device_id, name", [("", "Lamp"), ("LAMP-001", ""), ("  ", "Lamp")])
def test_missing_identity_rejected(db, device_id, name):
    with pytest.raises(InvalidArgument):
        device_control.register(db, device_id, name)


def test_auto_mode_enabled_setting_applies_to_new_devices(db):
    settings_store.update(db, auto_mode_enabled=True)

    device = device_control.register(db, "LAMP-002", "Garage lamp")

    assert device.mode == "AUTO"
    assert device.status == "OFF"


def test_delete_removes_history(db):
    from src.Models.device import MODE_AUTO
    from src.Repositories import control_log as control_log_repo
    from src.Repositories import sensor_reading as sensor_repo
    from src.Services.telemetry_ingest import telemetry_ingest

    device_control.register(db, "LAMP-001", "Hallway lamp")
    device_control.set_mode(db, "LAMP-001", MODE_AUTO, None)
    telemetry_ingest.ingest(db, "LAMP-001", 350)

    device_control.delete(db, "LAMP-001")

    assert device_repo.get_device_by_id(db, "LAMP-001") is None
    assert sensor_repo.count_readings(db) == 0
    assert control_log_repo.count_logs(db) == 0

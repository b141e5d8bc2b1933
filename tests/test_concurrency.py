# tests/test_concurrency.py

import threading

import pytest
from sqlalchemy.exc import OperationalError

from src.Core.errors import NotFound, PersistenceFailure
from src.DB.session import SessionLocal
from src.Models.device import MODE_AUTO
from src.Repositories import control_log as control_log_repo
from src.Repositories import device as device_repo
from src.Repositories import sensor_reading as sensor_repo
from src.Services.device_control import device_control
from src.Services.telemetry_ingest import telemetry_ingest


def _run_parallel(jobs):
    errors = []
    barrier = threading.Barrier(len(jobs))

    def worker(job):
        session = SessionLocal()
        try:
            barrier.wait()
            job(session)
        except Exception as e:  # collected and asserted on by the test
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(job,)) for job in jobs]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return errors


def test_identical_concurrent_readings_log_once(db, register):
    register(mode=MODE_AUTO)

    jobs = [lambda s: telemetry_ingest.ingest(s, "LAMP-001", 350) for _ in range(8)]
    errors = _run_parallel(jobs)

    assert errors == []
    db.expire_all()
    device = device_repo.get_device_by_id(db, "LAMP-001")
    assert device.status == "ON"
    assert control_log_repo.count_logs(db, device_ref=device.id) == 1
    assert sensor_repo.count_readings(db, device_ref=device.id) == 8


def test_opposite_concurrent_readings_stay_consistent(db, register):
    register(mode=MODE_AUTO)

    jobs = [
        (lambda s: telemetry_ingest.ingest(s, "LAMP-001", 350)),
        (lambda s: telemetry_ingest.ingest(s, "LAMP-001", 100)),
    ] * 4
    errors = _run_parallel(jobs)

    assert errors == []
    db.expire_all()
    device = device_repo.get_device_by_id(db, "LAMP-001")
    entries = control_log_repo.get_device_log_entries(db, device.id)

    # Every logged flip alternates and the last one matches the stored status
    actions = [e.action for e in entries]
    assert all(a != b for a, b in zip(actions, actions[1:]))
    if actions:
        assert actions[0] == "ON"
        assert actions[-1] == device.status
    else:
        assert device.status == "OFF"


def test_failed_log_write_rolls_back_status_and_reading(db, register, monkeypatch):
    register(mode=MODE_AUTO)

    def broken_append(*args, **kwargs):
        raise OperationalError("INSERT INTO control_logs", {}, Exception("disk I/O error"))

    monkeypatch.setattr(control_log_repo, "append_log", broken_append)

    with pytest.raises(PersistenceFailure):
        telemetry_ingest.ingest(db, "LAMP-001", 350)

    check = SessionLocal()
    try:
        device = device_repo.get_device_by_id(check, "LAMP-001")
        assert device.status == "OFF"
        assert device.is_online is False
        assert sensor_repo.count_readings(check) == 0
    finally:
        check.close()


def test_failed_manual_log_write_keeps_previous_state(db, register, monkeypatch):
    register()

    def broken_append(*args, **kwargs):
        raise OperationalError("INSERT INTO control_logs", {}, Exception("disk I/O error"))

    monkeypatch.setattr(control_log_repo, "append_log", broken_append)

    with pytest.raises(PersistenceFailure):
        device_control.set_status(db, "LAMP-001", "ON", "operator-7")

    check = SessionLocal()
    try:
        assert device_repo.get_device_by_id(check, "LAMP-001").status == "OFF"
    finally:
        check.close()


def test_unknown_ids_leave_no_lock_entries(db, register):
    from src.Services.device_locks import device_locks
    from src.Services.liveness import liveness_tracker

    register()
    before = len(device_locks)

    for i in range(50):
        with pytest.raises(NotFound):
            telemetry_ingest.ingest(db, f"GHOST-{i}", 350)
        with pytest.raises(NotFound):
            liveness_tracker.heartbeat(db, f"GHOST-{i}")

    telemetry_ingest.ingest(db, "LAMP-001", 350)

    assert len(device_locks) == before


def test_lock_entry_released_after_concurrent_holders(db, register):
    from src.Services.device_locks import device_locks

    register(mode=MODE_AUTO)
    errors = _run_parallel([lambda s: telemetry_ingest.ingest(s, "LAMP-001", 350) for _ in range(4)])

    assert errors == []
    assert len(device_locks) == 0

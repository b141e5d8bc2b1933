# src/Repositories/device.py

"""
Device Repository Module

Database access functions for the Device model.

Responsibilities:
- Lookups by external device_id (plain and row-locking)
- Creation, state writes and cascading deletion
- Counts used by the dashboard

Transaction handling:
    Functions in this module flush but never commit. The calling service
    owns the transaction (src/Services/unit_of_work.py) so that a status
    write and its control_logs entry are committed together.

Usage:
    from src.Repositories import device as device_repo

    device = device_repo.get_device_for_update(db, "LAMP-001")
"""

from sqlalchemy.orm import Session
from sqlalchemy import delete
from src.Models.device import Device, STATUS_OFF
from src.Models.sensor_reading import SensorReading
from src.Models.control_log import ControlLog
from typing import List, Optional
from datetime import datetime


# ==========================================================
# 📌 LOOKUPS
# ==========================================================

def get_all_devices(db: Session) -> List[Device]:
    """
    Get all devices, most recently registered first.
    """
    return (
        db.query(Device)
        .order_by(Device.created_at.desc(), Device.id.desc())
        .all()
    )


def get_device_by_id(db: Session, device_id: str) -> Optional[Device]:
    """
    Get a device by its external identifier.

    Args:
        db: SQLAlchemy session
        device_id: External identifier (case-sensitive)

    Returns:
        Device object or None if not registered
    """
    return db.query(Device).filter(Device.device_id == device_id).first()


def get_device_for_update(db: Session, device_id: str) -> Optional[Device]:
    """
    Get a device and lock its row until the current transaction ends.

    Emits SELECT ... FOR UPDATE on PostgreSQL/MySQL. SQLite ignores the
    clause; there the in-process DeviceLockRegistry provides the exclusion.
    populate_existing() discards any stale copy held by the session.
    """
    return (
        db.query(Device)
        .filter(Device.device_id == device_id)
        .populate_existing()
        .with_for_update()
        .first()
    )


def device_exists(db: Session, device_id: str) -> bool:
    return db.query(Device.id).filter(Device.device_id == device_id).first() is not None


# ==========================================================
# 📌 WRITES (flush only)
# ==========================================================

def add_device(
    db: Session,
    device_id: str,
    device_name: str,
    location: str,
    mode: str,
) -> Device:
    """
    Insert a new device with status OFF and is_online False.

    Raises:
        IntegrityError: On flush if device_id is already taken
    """
    new_device = Device(
        device_id=device_id,
        device_name=device_name,
        location=location,
        status=STATUS_OFF,
        mode=mode,
        is_online=False,
    )
    db.add(new_device)
    db.flush()
    return new_device


def set_status(db: Session, device: Device, status: str) -> Device:
    device.status = status
    db.flush()
    return device


def set_status_and_mode(db: Session, device: Device, status: str, mode: str) -> Device:
    device.status = status
    device.mode = mode
    db.flush()
    return device


def set_mode(db: Session, device: Device, mode: str) -> Device:
    device.mode = mode
    db.flush()
    return device


def update_last_seen(db: Session, device: Device, timestamp: datetime) -> Device:
    """
    Mark the device online and record the contact time.

    Unlike GPS timestamps, contact times come from the server clock, so the
    value always moves forward and is written unconditionally.
    """
    device.is_online = True
    device.last_seen = timestamp
    db.flush()
    return device


def delete_device_cascade(db: Session, device: Device) -> None:
    """
    Delete a device together with its sensor readings and log entries.

    The child rows are removed explicitly so the behaviour does not depend
    on the database honouring ON DELETE CASCADE.
    """
    db.execute(delete(SensorReading).where(SensorReading.device_ref == device.id))
    db.execute(delete(ControlLog).where(ControlLog.device_ref == device.id))
    db.delete(device)
    db.flush()


# ==========================================================
# 📌 COUNTS
# ==========================================================

def count_devices(
    db: Session,
    status: Optional[str] = None,
    mode: Optional[str] = None,
) -> int:
    """
    Count devices, optionally filtered by status and/or mode.

    Example:
        active_lamps = count_devices(db, status="ON")
    """
    query = db.query(Device)

    if status is not None:
        query = query.filter(Device.status == status)

    if mode is not None:
        query = query.filter(Device.mode == mode)

    return query.count()


def count_devices_seen_since(db: Session, threshold: datetime) -> int:
    """
    Count devices flagged online whose last contact is at or after threshold.

    This is the query form of the derived ONLINE view.
    """
    return (
        db.query(Device)
        .filter(Device.is_online == True)  # noqa: E712
        .filter(Device.last_seen != None)  # noqa: E711
        .filter(Device.last_seen >= threshold)
        .count()
    )

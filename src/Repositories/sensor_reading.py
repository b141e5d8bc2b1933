# src/Repositories/sensor_reading.py

from sqlalchemy.orm import Session
from sqlalchemy import func, and_
from src.Models.sensor_reading import SensorReading
from src.Models.device import Device
from datetime import datetime
from typing import Any, Dict, List, Optional


# ==========================================================
# ✅ Insert (flush only, committed by the ingest service)
# ==========================================================
def create_reading(
    db: Session,
    device_ref: int,
    light_intensity: float,
    timestamp: datetime
) -> SensorReading:
    reading = SensorReading(
        device_ref=device_ref,
        light_intensity=float(light_intensity),
        timestamp=timestamp,
    )
    db.add(reading)
    db.flush()
    return reading


# ==========================================================
# ✅ History of one device, newest first
# ==========================================================
def get_readings_by_device(
    db: Session,
    device_ref: int,
    limit: int = 50,
    offset: int = 0
) -> List[SensorReading]:
    return (
        db.query(SensorReading)
        .filter(SensorReading.device_ref == device_ref)
        .order_by(SensorReading.timestamp.desc(), SensorReading.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def count_readings(
    db: Session,
    device_ref: Optional[int] = None,
    since: Optional[datetime] = None
) -> int:
    query = db.query(SensorReading)

    if device_ref is not None:
        query = query.filter(SensorReading.device_ref == device_ref)

    if since is not None:
        query = query.filter(SensorReading.timestamp >= since)

    return query.count()


# ==========================================================
# ✅ Latest reading for every device
# ==========================================================
def get_latest_per_device(db: Session) -> List[Dict[str, Any]]:
    """
    Return one row per device with its most recent reading.

    Readings are append-only, so the highest id per device is the latest.
    Devices that never reported are included with null reading fields.
    """
    latest_ids = (
        db.query(
            SensorReading.device_ref.label("device_ref"),
            func.max(SensorReading.id).label("reading_id")
        )
        .group_by(SensorReading.device_ref)
        .subquery()
    )

    rows = (
        db.query(Device, SensorReading)
        .outerjoin(latest_ids, latest_ids.c.device_ref == Device.id)
        .outerjoin(SensorReading, SensorReading.id == latest_ids.c.reading_id)
        .order_by(Device.id)
        .all()
    )

    return [
        {
            "id": device.id,
            "device_id": device.device_id,
            "device_name": device.device_name,
            "location": device.location,
            "status": device.status,
            "mode": device.mode,
            "light_intensity": reading.light_intensity if reading else None,
            "timestamp": reading.timestamp if reading else None,
        }
        for device, reading in rows
    ]


# ==========================================================
# ✅ Per-device statistics over a time window
# ==========================================================
def get_stats_since(db: Session, since: datetime) -> List[Dict[str, Any]]:
    """
    Aggregate avg/min/max/count of readings at or after `since`, per device.

    The window condition sits in the join so devices without readings in
    the window are still listed (count 0, aggregates null).
    """
    rows = (
        db.query(
            Device.id,
            Device.device_id,
            Device.device_name,
            func.avg(SensorReading.light_intensity),
            func.min(SensorReading.light_intensity),
            func.max(SensorReading.light_intensity),
            func.count(SensorReading.id),
        )
        .outerjoin(
            SensorReading,
            and_(
                SensorReading.device_ref == Device.id,
                SensorReading.timestamp >= since
            )
        )
        .group_by(Device.id, Device.device_id, Device.device_name)
        .order_by(Device.id)
        .all()
    )

    return [
        {
            "id": row[0],
            "device_id": row[1],
            "device_name": row[2],
            "avg_intensity": float(row[3]) if row[3] is not None else None,
            "min_intensity": row[4],
            "max_intensity": row[5],
            "reading_count": row[6],
        }
        for row in rows
    ]

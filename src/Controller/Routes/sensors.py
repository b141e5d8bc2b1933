# src/Controller/Routes/sensors.py

"""
Sensor Data REST API

Endpoints:
- POST /sensors/data                Telemetry ingest (devices)
- GET  /sensors/data/{device_id}    Reading history of one device
- GET  /sensors/latest              Latest reading of every device
- GET  /sensors/stats               Per-device aggregates over ?hours=
"""

from datetime import timedelta
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from src.Controller.deps import get_DB
from src.Core.timeutil import now_utc
from src.Repositories import sensor_reading as sensor_repo
from src.Schemas import sensor_reading as sensor_schema
from src.Services.device_control import device_control
from src.Services.telemetry_ingest import telemetry_ingest

router = APIRouter()


# ==========================================================
# 📌 Telemetry Ingest
# ==========================================================

@router.post("/data", response_model=sensor_schema.SensorData_ingest_response)
def receive_sensor_data(data: sensor_schema.SensorData_create, db: Session = Depends(get_DB)):
    """
    Receive a light reading from a device.

    The reading is stored, the device is marked online and, in AUTO mode,
    the lamp is switched when the reading crosses the threshold.

    Example Request:
        POST /sensors/data
        {"device_id": "LAMP-001", "light_intensity": 350}

    Example Response:
        {
            "success": true,
            "message": "Sensor data received",
            "changed": true,
            "status": "ON",
            "auto_action": "ON",
            "current_status": "ON"
        }

    Raises:
        404: Device not registered (nothing stored)
        400: light_intensity negative or not finite
    """
    result = telemetry_ingest.ingest(db, data.device_id, data.light_intensity)
    return {
        "success": True,
        "message": "Sensor data received",
        "changed": result.changed,
        "status": result.status,
        "auto_action": result.auto_action,
        "current_status": result.status,
    }


# ==========================================================
# 📌 Reading History
# ==========================================================

@router.get("/data/{device_id}", response_model=sensor_schema.SensorData_list_response)
def get_sensor_data(
    device_id: str,
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_DB)
):
    device = device_control.get_device(db, device_id)
    rows = sensor_repo.get_readings_by_device(db, device.id, limit=limit, offset=offset)
    return {"success": True, "data": rows}


# ==========================================================
# 📌 Latest Readings
# ==========================================================

@router.get("/latest", response_model=sensor_schema.SensorData_latest_response)
def get_latest(db: Session = Depends(get_DB)):
    return {"success": True, "data": sensor_repo.get_latest_per_device(db)}


# ==========================================================
# 📌 Statistics
# ==========================================================

@router.get("/stats", response_model=sensor_schema.SensorData_stats_response)
def get_stats(hours: int = Query(24, ge=1, le=24 * 31), db: Session = Depends(get_DB)):
    """
    Average/min/max/count of readings per device over the last `hours`.
    Devices without readings in the window report a count of 0.
    """
    since = now_utc() - timedelta(hours=hours)
    return {"success": True, "hours": hours, "stats": sensor_repo.get_stats_since(db, since)}

# src/Controller/Routes/devices.py

"""
Device Management REST API

Endpoints:
- GET    /devices/                         List all devices
- POST   /devices/                         Register new device
- GET    /devices/{device_id}              Get device details
- PUT    /devices/{device_id}/control      Manual ON/OFF (forces MANUAL mode)
- PUT    /devices/{device_id}/mode         Switch AUTO/MANUAL
- POST   /devices/{device_id}/heartbeat    Liveness ping from the device
- DELETE /devices/{device_id}              Delete device and its history

Identity:
- Control and mode endpoints record the X-Actor-ID header as the actor of
  the log entry. The header is set by the authentication gateway in front
  of this service and is not validated here.

Errors:
- Service errors (NotFound, Conflict, InvalidArgument, PersistenceFailure)
  propagate to the CoreError handler in main.py.

Usage:
    # In main.py
    from src.Controller.Routes import devices
    app.include_router(devices.router, prefix="/devices", tags=["devices"])
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from src.Controller.deps import get_DB, get_actor
from src.Core.timeutil import now_utc
from src.Models.device import Device
from src.Repositories import device as device_repo
from src.Schemas import device as device_schema
from src.Services.device_control import device_control
from src.Services.liveness import liveness_tracker

router = APIRouter()


def _to_schema(device: Device, now=None) -> device_schema.Device_get:
    out = device_schema.Device_get.model_validate(device)
    out.connectivity = liveness_tracker.connectivity(device, now)
    return out


# ==========================================================
# 📌 List Devices
# ==========================================================

@router.get("/", response_model=device_schema.Device_list_response)
def list_devices(db: Session = Depends(get_DB)):
    """
    Get all registered devices, most recently registered first.

    Each device carries the stored is_online flag and the derived
    connectivity (ONLINE/OFFLINE from last_seen staleness).
    """
    now = now_utc()
    devices = [_to_schema(d, now) for d in device_repo.get_all_devices(db)]
    return {"success": True, "devices": devices, "total": len(devices)}


# ==========================================================
# 📌 Get Specific Device
# ==========================================================

@router.get("/{device_id}", response_model=device_schema.Device_get)
def get_device(device_id: str, db: Session = Depends(get_DB)):
    """
    Get details of a specific device.

    Raises:
        404: Device not found
    """
    return _to_schema(device_control.get_device(db, device_id))


# ==========================================================
# 📌 Register New Device
# ==========================================================

@router.post("/", response_model=device_schema.Device_identity, status_code=201)
def register_device(device: device_schema.Device_create, db: Session = Depends(get_DB)):
    """
    Register a new lamp. Called by the device on first boot or by an admin.

    The device starts OFF and offline, in MANUAL mode unless the
    auto_mode_enabled setting is true.

    Example Request:
        POST /devices/
        {"device_id": "LAMP-001", "device_name": "Hallway lamp", "location": "1st floor"}

    Raises:
        409: Device already registered
        400: Missing device_id or device_name
    """
    return device_control.register(db, device.device_id, device.device_name, device.location)


# ==========================================================
# 📌 Manual Control
# ==========================================================

@router.put("/{device_id}/control", response_model=device_schema.Device_control_response)
def control_device(
    device_id: str,
    body: device_schema.Device_control_request,
    db: Session = Depends(get_DB),
    actor: Optional[str] = Depends(get_actor),
):
    """
    Turn a lamp ON or OFF.

    Manual control takes the device out of AUTO mode. Every command is
    logged, including repeats that do not change the status.

    Raises:
        400: status is not ON/OFF
        404: Device not found
    """
    device = device_control.set_status(db, device_id, body.status, actor)
    return {
        "success": True,
        "message": f"Device turned {device.status}",
        "status": device.status,
        "mode": device.mode,
    }


# ==========================================================
# 📌 Mode Change
# ==========================================================

@router.put("/{device_id}/mode", response_model=device_schema.Device_mode_response)
def change_mode(
    device_id: str,
    body: device_schema.Device_mode_request,
    db: Session = Depends(get_DB),
    actor: Optional[str] = Depends(get_actor),
):
    """
    Switch a device between AUTO and MANUAL. Status is left unchanged;
    in AUTO the next sensor reading decides.

    Raises:
        400: mode is not AUTO/MANUAL
        404: Device not found
    """
    device = device_control.set_mode(db, device_id, body.mode, actor)
    return {
        "success": True,
        "message": f"Device mode changed to {device.mode}",
        "mode": device.mode,
        "status": device.status,
    }


# ==========================================================
# 📌 Heartbeat
# ==========================================================

@router.post("/{device_id}/heartbeat", response_model=device_schema.Device_ack)
def heartbeat(device_id: str, db: Session = Depends(get_DB)):
    """
    Liveness ping. Sets is_online and last_seen.

    Raises:
        404: Device not found
    """
    liveness_tracker.heartbeat(db, device_id)
    return {"success": True, "message": "Heartbeat received"}


# ==========================================================
# 📌 Delete Device
# ==========================================================

@router.delete("/{device_id}", response_model=device_schema.Device_ack)
def delete_device(device_id: str, db: Session = Depends(get_DB)):
    """
    Delete a device. Its sensor readings and control log entries are
    deleted in the same transaction.

    Raises:
        404: Device not found
    """
    device_control.delete(db, device_id)
    return {"success": True, "message": "Device deleted successfully"}

# src/Schemas/device.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional


class Device_base(BaseModel):
    """
    Base schema for lamps with the attributes supplied at registration.
    """
    model_config = ConfigDict(from_attributes=True)

    device_id: str = Field(..., min_length=1, max_length=100, description="Unique external device identifier")
    device_name: str = Field(..., min_length=1, max_length=200, description="Descriptive name (e.g., 'Hallway lamp')")
    location: Optional[str] = Field(None, max_length=200, description="Where the lamp is installed")


class Device_create(Device_base):
    """
    Schema for registering new lamps.
    status, mode and liveness are never accepted from the caller.
    """
    pass


class Device_identity(BaseModel):
    """Identity returned by the registration endpoint."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    device_id: str
    device_name: str
    location: str


class Device_get(Device_base):
    """
    Schema for device responses.

    connectivity is the derived liveness view (ONLINE/OFFLINE) computed
    from last_seen at read time; is_online is the stored flag.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    location: str = ""
    status: str
    mode: str
    is_online: bool
    last_seen: Optional[datetime] = None
    created_at: datetime
    connectivity: str = "OFFLINE"


class Device_list_response(BaseModel):
    success: bool = True
    devices: List[Device_get]
    total: int


class Device_control_request(BaseModel):
    """Manual ON/OFF command. Value checked by the control service (ON|OFF)."""
    status: str = Field(..., description="Target status: ON or OFF")


class Device_mode_request(BaseModel):
    """Mode change command. Value checked by the control service (AUTO|MANUAL)."""
    mode: str = Field(..., description="Target mode: AUTO or MANUAL")


class Device_control_response(BaseModel):
    success: bool = True
    message: str
    status: str
    mode: str


class Device_mode_response(BaseModel):
    success: bool = True
    message: str
    mode: str
    status: str


class Device_ack(BaseModel):
    """Generic acknowledgement (heartbeat, delete)."""
    success: bool = True
    message: str

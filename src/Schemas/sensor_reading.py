# src/Schemas/sensor_reading.py

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt
from datetime import datetime
from typing import List, Optional, Union


"""
Payload pushed by a device on every sample.
light_intensity range (finite, non-negative) is enforced by the ingest service.
"""
class SensorData_create(BaseModel):
    device_id: str = Field(..., min_length=1, max_length=100, description="External device identifier")
    # Strict: booleans and numeric strings are rejected, not coerced
    light_intensity: Union[StrictInt, StrictFloat] = Field(..., description="Raw LDR value; higher = darker")


"""
Result of an ingest. auto_action is the new status when automation flipped
the lamp, otherwise null; current_status is the post-decision status.
"""
class SensorData_ingest_response(BaseModel):
    success: bool = True
    message: str = "Sensor data received"
    changed: bool
    status: str
    auto_action: Optional[str] = None
    current_status: str


class SensorData_get(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    light_intensity: float
    timestamp: datetime


class SensorData_list_response(BaseModel):
    success: bool = True
    data: List[SensorData_get]


class SensorData_latest(BaseModel):
    """Latest reading per device; reading fields are null for silent devices."""
    id: int
    device_id: str
    device_name: str
    location: str
    status: str
    mode: str
    light_intensity: Optional[float] = None
    timestamp: Optional[datetime] = None


class SensorData_latest_response(BaseModel):
    success: bool = True
    data: List[SensorData_latest]


class SensorData_stats(BaseModel):
    id: int
    device_id: str
    device_name: str
    avg_intensity: Optional[float] = None
    min_intensity: Optional[float] = None
    max_intensity: Optional[float] = None
    reading_count: int = 0


class SensorData_stats_response(BaseModel):
    success: bool = True
    hours: int
    stats: List[SensorData_stats]

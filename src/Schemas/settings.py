# src/Schemas/settings.py

from pydantic import BaseModel, Field
from typing import Dict, Optional, Union


class Settings_update(BaseModel):
    """
    Partial update of runtime settings. Omitted fields are left unchanged.
    Ranges are validated by the settings store so every caller gets the
    same InvalidArgument error.
    """
    auto_mode_enabled: Optional[bool] = None
    light_threshold: Optional[float] = Field(None, description="ON when reading > threshold")
    polling_interval: Optional[int] = Field(None, description="Device push interval (ms)")


class Settings_response(BaseModel):
    success: bool = True
    settings: Dict[str, str]


class Settings_update_response(BaseModel):
    success: bool = True
    message: str = "Settings updated successfully"
    updated_keys: list[str]


class Dashboard_stats(BaseModel):
    total_devices: int
    active_lamps: int
    online_devices: int
    auto_mode_devices: int
    recent_readings: int
    energy_saved: str


class Dashboard_stats_response(BaseModel):
    success: bool = True
    stats: Dashboard_stats


class Error_response(BaseModel):
    success: bool = False
    error: str
    message: Union[str, None] = None

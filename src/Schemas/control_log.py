# src/Schemas/control_log.py

from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional


class ControlLog_get(BaseModel):
    """
    One transition log entry joined with its device identity.
    actor is null for automatic transitions.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    device_id: str
    device_name: str
    action: str
    mode: str
    actor: Optional[str] = None
    details: str
    timestamp: datetime


class ControlLog_page(BaseModel):
    success: bool = True
    logs: List[ControlLog_get]
    total: int
    limit: int
    offset: int


class ControlLog_list(BaseModel):
    success: bool = True
    logs: List[ControlLog_get]

# src/Controller/Routes/settings.py

"""
System Settings REST API

Endpoints:
- GET /settings/                  All runtime settings (string values)
- PUT /settings/                  Partial update (threshold, auto mode, polling)
- GET /settings/dashboard-stats   Dashboard counters and energy estimate

A new light_threshold applies to the very next sensor reading.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from src.Controller.deps import get_DB
from src.Schemas import settings as settings_schema
from src.Services.dashboard import dashboard_service
from src.Services.settings_store import settings_store

router = APIRouter()


@router.get("/", response_model=settings_schema.Settings_response)
def get_settings(db: Session = Depends(get_DB)):
    return {"success": True, "settings": settings_store.get_all(db)}


@router.put("/", response_model=settings_schema.Settings_update_response)
def update_settings(body: settings_schema.Settings_update, db: Session = Depends(get_DB)):
    """
    Update runtime settings. Omitted fields are left unchanged.

    Example Request:
        PUT /settings/
        {"light_threshold": 450}

    Raises:
        400: light_threshold negative/non-finite or polling_interval <= 0
    """
    updated = settings_store.update(
        db,
        light_threshold=body.light_threshold,
        auto_mode_enabled=body.auto_mode_enabled,
        polling_interval=body.polling_interval,
    )
    return {"success": True, "message": "Settings updated successfully", "updated_keys": updated}


@router.get("/dashboard-stats", response_model=settings_schema.Dashboard_stats_response)
def dashboard_stats(db: Session = Depends(get_DB)):
    return {"success": True, "stats": dashboard_service.get_stats(db)}

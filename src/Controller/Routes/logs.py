# src/Controller/Routes/logs.py

"""
Control Log REST API

Endpoints:
- GET /logs/                       Filtered, paginated log (newest first)
- GET /logs/device/{device_id}     Log of one device
- GET /logs/recent                 Last 20 entries within ?hours=
"""

from datetime import timedelta
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from src.Controller.deps import get_DB
from src.Core.config import settings
from src.Core.timeutil import now_utc
from src.Repositories import control_log as control_log_repo
from src.Schemas import control_log as log_schema
from src.Services.device_control import device_control

router = APIRouter()


@router.get("/", response_model=log_schema.ControlLog_page)
def list_logs(
    device_id: Optional[str] = Query(None, description="External device identifier"),
    action: Optional[str] = Query(None, description="ON, OFF or MODE_CHANGE"),
    mode: Optional[str] = Query(None, description="AUTO or MANUAL"),
    limit: int = Query(50, ge=1),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_DB)
):
    """
    List control log entries with optional filters.

    Example Requests:
        GET /logs/?device_id=LAMP-001
        GET /logs/?mode=AUTO&action=OFF&limit=20&offset=40

    total is the number of entries matching the filters, independent of
    limit/offset. limit is capped at LOG_PAGE_MAX_LIMIT.
    """
    limit = min(limit, settings.LOG_PAGE_MAX_LIMIT)
    logs, total = control_log_repo.list_logs(
        db, device_id=device_id, action=action, mode=mode, limit=limit, offset=offset
    )
    return {"success": True, "logs": logs, "total": total, "limit": limit, "offset": offset}


# Registered before /device/{device_id} would not matter, but /recent must
# not be shadowed by a catch-all; keep static paths first.
@router.get("/recent", response_model=log_schema.ControlLog_list)
def recent_logs(hours: int = Query(24, ge=1, le=24 * 31), db: Session = Depends(get_DB)):
    since = now_utc() - timedelta(hours=hours)
    return {"success": True, "logs": control_log_repo.get_recent_logs(db, since, limit=20)}


@router.get("/device/{device_id}", response_model=log_schema.ControlLog_list)
def device_logs(device_id: str, limit: int = Query(50, ge=1), db: Session = Depends(get_DB)):
    device = device_control.get_device(db, device_id)
    limit = min(limit, settings.LOG_PAGE_MAX_LIMIT)
    return {"success": True, "logs": control_log_repo.get_logs_by_device(db, device.id, limit=limit)}

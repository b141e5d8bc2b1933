# src/Repositories/control_log.py

"""
Control Log Repository Module

Append and query functions for the transition log (control_logs).

Responsibilities:
- Append one entry per accepted transition (flush only; the caller commits
  it in the same transaction as the device write)
- Filtered, paginated listings joined with device identity
- Counts for the dashboard energy estimate

Ordering:
    Every listing is newest first by (timestamp DESC, id DESC), the reverse
    of the log's total order.

The repository never updates or deletes individual entries.
"""

from sqlalchemy.orm import Session, Query
from src.Models.control_log import ControlLog
from src.Models.device import Device
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


# ==========================================================
# 📌 APPEND
# ==========================================================

def append_log(
    db: Session,
    device_ref: int,
    action: str,
    mode: str,
    actor: Optional[str],
    details: str,
    timestamp: datetime,
) -> ControlLog:
    """
    Append one transition entry.

    Args:
        device_ref: Internal id of the device
        action: "ON", "OFF" or "MODE_CHANGE"
        mode: Device mode at the time of the action
        actor: Opaque principal, None for automatic actions
        details: Human-readable description
        timestamp: UTC time of the transition

    Returns:
        The flushed ControlLog (id assigned)
    """
    entry = ControlLog(
        device_ref=device_ref,
        action=action,
        mode=mode,
        actor=actor,
        details=details,
        timestamp=timestamp,
    )
    db.add(entry)
    db.flush()
    return entry


# ==========================================================
# 📌 QUERIES
# ==========================================================

def _joined(db: Session) -> Query:
    return (
        db.query(ControlLog, Device.device_id, Device.device_name)
        .join(Device, Device.id == ControlLog.device_ref)
    )


def _newest_first(query: Query) -> Query:
    return query.order_by(ControlLog.timestamp.desc(), ControlLog.id.desc())


def serialize_log_row(row) -> Dict[str, Any]:
    entry, device_id, device_name = row
    return {
        "id": entry.id,
        "device_id": device_id,
        "device_name": device_name,
        "action": entry.action,
        "mode": entry.mode,
        "actor": entry.actor,
        "details": entry.details,
        "timestamp": entry.timestamp,
    }


def list_logs(
    db: Session,
    device_id: Optional[str] = None,
    action: Optional[str] = None,
    mode: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[List[Dict[str, Any]], int]:
    """
    List log entries with optional filters and pagination.

    Returns:
        (entries for the requested page, total number of matching entries)

    Example:
        logs, total = list_logs(db, device_id="LAMP-001", mode="AUTO", limit=20)
    """
    query = _joined(db)

    if device_id:
        query = query.filter(Device.device_id == device_id)

    if action:
        query = query.filter(ControlLog.action == action)

    if mode:
        query = query.filter(ControlLog.mode == mode)

    total = query.count()
    rows = _newest_first(query).offset(offset).limit(limit).all()

    return [serialize_log_row(row) for row in rows], total


def get_logs_by_device(db: Session, device_ref: int, limit: int = 50) -> List[Dict[str, Any]]:
    rows = _newest_first(_joined(db).filter(ControlLog.device_ref == device_ref)).limit(limit).all()
    return [serialize_log_row(row) for row in rows]


def get_recent_logs(db: Session, since: datetime, limit: int = 20) -> List[Dict[str, Any]]:
    rows = _newest_first(_joined(db).filter(ControlLog.timestamp >= since)).limit(limit).all()
    return [serialize_log_row(row) for row in rows]


def get_device_log_entries(db: Session, device_ref: int) -> List[ControlLog]:
    """All entries of one device in log order (oldest first)."""
    return (
        db.query(ControlLog)
        .filter(ControlLog.device_ref == device_ref)
        .order_by(ControlLog.timestamp.asc(), ControlLog.id.asc())
        .all()
    )


# ==========================================================
# 📌 COUNTS
# ==========================================================

def count_logs(
    db: Session,
    device_ref: Optional[int] = None,
    action: Optional[str] = None,
    mode: Optional[str] = None,
    since: Optional[datetime] = None,
) -> int:
    """
    Count entries matching all given filters.

    Example:
        # automatic OFF transitions in the last 24 h (energy estimate)
        count_logs(db, action="OFF", mode="AUTO", since=now - timedelta(hours=24))
    """
    query = db.query(ControlLog)

    if device_ref is not None:
        query = query.filter(ControlLog.device_ref == device_ref)

    if action is not None:
        query = query.filter(ControlLog.action == action)

    if mode is not None:
        query = query.filter(ControlLog.mode == mode)

    if since is not None:
        query = query.filter(ControlLog.timestamp >= since)

    return query.count()

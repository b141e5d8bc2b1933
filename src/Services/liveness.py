# src/Services/liveness.py
"""
Liveness Tracker - online flag and last contact time.

Heartbeats and telemetry both mark a device as seen. There is no stored
OFFLINE transition: a device is reported OFFLINE when it was never seen,
or when last_seen is older than DEVICE_STALE_AFTER_S. Deriving the state
at read time avoids a second writer racing the telemetry path.
"""

from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from src.Core.config import settings
from src.Core.errors import NotFound
from src.Core.timeutil import now_utc, as_utc
from src.Models.device import Device
from src.Repositories import device as device_repo
from src.Services.device_locks import device_locks
from src.Services.unit_of_work import transaction


CONNECTIVITY_ONLINE = "ONLINE"
CONNECTIVITY_OFFLINE = "OFFLINE"


class LivenessTracker:

    def mark_seen(self, db: Session, device: Device, timestamp: Optional[datetime] = None) -> Device:
        """Set is_online and last_seen. Runs inside the caller's transaction."""
        return device_repo.update_last_seen(db, device, timestamp or now_utc())

    def heartbeat(self, db: Session, device_id: str) -> Device:
        """
        Record a heartbeat for a registered device.

        Raises:
            NotFound: device_id is not registered
        """
        with device_locks.hold(device_id):
            with transaction(db, f"heartbeat from '{device_id}'"):
                device = device_repo.get_device_for_update(db, device_id)
                if device is None:
                    raise NotFound(f"Device '{device_id}' not found")
                self.mark_seen(db, device)
        return device

    def stale_threshold(self, now: Optional[datetime] = None) -> datetime:
        return (now or now_utc()) - timedelta(seconds=settings.DEVICE_STALE_AFTER_S)

    def connectivity(self, device: Device, now: Optional[datetime] = None) -> str:
        """Derived ONLINE/OFFLINE view of a device."""
        last_seen = as_utc(device.last_seen)
        if not device.is_online or last_seen is None:
            return CONNECTIVITY_OFFLINE
        if last_seen < self.stale_threshold(now):
            return CONNECTIVITY_OFFLINE
        return CONNECTIVITY_ONLINE


# --------------------------------------------------------
# GLOBAL INSTANCE (Singleton)
# --------------------------------------------------------
liveness_tracker = LivenessTracker()

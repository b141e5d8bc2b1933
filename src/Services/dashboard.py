# src/Services/dashboard.py

from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

from src.Core.config import settings
from src.Core.timeutil import now_utc
from src.Models.device import STATUS_ON, STATUS_OFF, MODE_AUTO
from src.Repositories import device as device_repo
from src.Repositories import sensor_reading as sensor_repo
from src.Repositories import control_log as control_log_repo
from src.Services.liveness import liveness_tracker


class DashboardService:
    """
    Aggregated counters for the dashboard header.

    energy_saved is a rough estimate: every automatic OFF in the last 24 h
    is credited ENERGY_PER_AUTO_OFF_KWH (a 50 W lamp off for one hour).
    """

    def get_stats(self, db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or now_utc()

        auto_off_count = control_log_repo.count_logs(
            db, action=STATUS_OFF, mode=MODE_AUTO, since=now - timedelta(hours=24)
        )
        energy_saved = auto_off_count * settings.ENERGY_PER_AUTO_OFF_KWH

        return {
            "total_devices": device_repo.count_devices(db),
            "active_lamps": device_repo.count_devices(db, status=STATUS_ON),
            "online_devices": device_repo.count_devices_seen_since(db, liveness_tracker.stale_threshold(now)),
            "auto_mode_devices": device_repo.count_devices(db, mode=MODE_AUTO),
            "recent_readings": sensor_repo.count_readings(db, since=now - timedelta(hours=1)),
            "energy_saved": f"{energy_saved:.2f}",
        }


# --------------------------------------------------------
# GLOBAL INSTANCE (Singleton)
# --------------------------------------------------------
dashboard_service = DashboardService()

# src/Services/settings_store.py
"""
Settings Store - typed access to the system_settings key/value table.

Keys:
    light_threshold    float ≥ 0   read fresh by every AUTO decision
    auto_mode_enabled  "true"/"false"  mode given to newly registered devices
    polling_interval   int > 0 (ms) advertised to device firmware

Values are stored as strings. Readers never cache: an operator update is
visible to the next ingest.
"""

import math
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from src.Core.config import settings
from src.Core.errors import InvalidArgument
from src.Core import log_ws
from src.Models.system_setting import (
    KEY_LIGHT_THRESHOLD,
    KEY_AUTO_MODE_ENABLED,
    KEY_POLLING_INTERVAL,
)
from src.Repositories import system_setting as setting_repo
from src.Services.automation import format_number
from src.Services.unit_of_work import transaction


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


class SettingsStore:

    def defaults(self) -> Dict[str, str]:
        return {
            KEY_LIGHT_THRESHOLD: format_number(settings.DEFAULT_LIGHT_THRESHOLD),
            KEY_AUTO_MODE_ENABLED: _format_bool(settings.DEFAULT_AUTO_MODE_ENABLED),
            KEY_POLLING_INTERVAL: str(settings.DEFAULT_POLLING_INTERVAL_MS),
        }

    # ==========================================================
    # Typed reads
    # ==========================================================

    def get_threshold(self, db: Session) -> float:
        """
        Current light threshold.

        Falls back to DEFAULT_LIGHT_THRESHOLD when the key is missing or the
        stored text is not a finite number.
        """
        raw = setting_repo.get_setting(db, KEY_LIGHT_THRESHOLD)
        if raw is None:
            return float(settings.DEFAULT_LIGHT_THRESHOLD)

        try:
            value = float(raw)
        except ValueError:
            value = math.nan

        if not math.isfinite(value):
            log_ws.log_from_thread(
                f"[SETTINGS] ⚠️  Invalid light_threshold {raw!r}, "
                f"using default {format_number(settings.DEFAULT_LIGHT_THRESHOLD)}",
                "warning"
            )
            return float(settings.DEFAULT_LIGHT_THRESHOLD)

        return value

    def get_auto_mode_enabled(self, db: Session) -> bool:
        raw = setting_repo.get_setting(db, KEY_AUTO_MODE_ENABLED)
        if raw is None:
            return settings.DEFAULT_AUTO_MODE_ENABLED
        return raw.strip().lower() in ("true", "1", "yes")

    def get_all(self, db: Session) -> Dict[str, str]:
        return setting_repo.get_all_settings(db)

    # ==========================================================
    # Writes
    # ==========================================================

    def update(
        self,
        db: Session,
        light_threshold: Optional[float] = None,
        auto_mode_enabled: Optional[bool] = None,
        polling_interval: Optional[int] = None,
    ) -> List[str]:
        """
        Validate and store the provided settings in one transaction.

        Returns:
            Keys that were written, in a stable order

        Raises:
            InvalidArgument: threshold not finite/non-negative or polling
                interval not a positive integer (nothing is written)
        """
        updates: Dict[str, str] = {}

        if light_threshold is not None:
            if isinstance(light_threshold, bool) or not math.isfinite(float(light_threshold)) or light_threshold < 0:
                raise InvalidArgument("light_threshold must be a finite number >= 0")
            updates[KEY_LIGHT_THRESHOLD] = format_number(light_threshold)

        if auto_mode_enabled is not None:
            updates[KEY_AUTO_MODE_ENABLED] = _format_bool(bool(auto_mode_enabled))

        if polling_interval is not None:
            if isinstance(polling_interval, bool) or int(polling_interval) != polling_interval or polling_interval <= 0:
                raise InvalidArgument("polling_interval must be a positive integer (milliseconds)")
            updates[KEY_POLLING_INTERVAL] = str(int(polling_interval))

        with transaction(db, "settings update"):
            for key, value in updates.items():
                setting_repo.upsert_setting(db, key, value)

        if updates:
            log_ws.log_from_thread(f"[SETTINGS] Updated: {updates}")

        return list(updates.keys())

    def seed_defaults(self, db: Session) -> List[str]:
        """Insert default values for missing keys. Returns the inserted keys."""
        inserted = []
        with transaction(db, "settings seed"):
            for key, value in self.defaults().items():
                if setting_repo.insert_if_missing(db, key, value):
                    inserted.append(key)
        return inserted


# --------------------------------------------------------
# GLOBAL INSTANCE (Singleton)
# --------------------------------------------------------
settings_store = SettingsStore()

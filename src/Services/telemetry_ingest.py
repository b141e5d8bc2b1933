# src/Services/telemetry_ingest.py
"""
Telemetry Ingest
================
Entry point for every light reading pushed by a device.

Pipeline (one transaction, device lock held throughout):
    1. Lock and load the device            → NotFound if unregistered
    2. Insert the SensorReading
    3. Mark the device seen (liveness)
    4. If mode is AUTO: read the threshold fresh, run the automation engine
       (status write + AUTO log entry only when the status flips)
    5. Commit; publish the transition to log subscribers

An unknown device or invalid value aborts before anything is written.
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Optional
from sqlalchemy.orm import Session

from src.Core.errors import InvalidArgument, NotFound
from src.Core.timeutil import now_utc
from src.Core import log_ws
from src.Models.device import MODE_AUTO
from src.Repositories import device as device_repo
from src.Repositories import sensor_reading as sensor_repo
from src.Services.automation import automation_engine, format_number
from src.Services.device_locks import device_locks
from src.Services.liveness import liveness_tracker
from src.Services.settings_store import settings_store
from src.Services.unit_of_work import transaction


@dataclass(frozen=True)
class IngestResult:
    device_id: str
    status: str
    changed: bool
    auto_action: Optional[str]
    reading_id: int


def _validate(device_id, light_intensity) -> float:
    if not isinstance(device_id, str) or not device_id.strip():
        raise InvalidArgument("device_id and light_intensity are required")

    if light_intensity is None or isinstance(light_intensity, bool) or not isinstance(light_intensity, Real):
        raise InvalidArgument("device_id and light_intensity are required")

    value = float(light_intensity)
    if not math.isfinite(value) or value < 0:
        raise InvalidArgument("light_intensity must be a finite number >= 0")

    return value


class TelemetryIngest:

    def ingest(self, db: Session, device_id: str, light_intensity: float) -> IngestResult:
        """
        Store a reading and apply automation.

        Returns:
            IngestResult with the post-decision status; auto_action is the new
            status when automation switched the lamp, otherwise None

        Raises:
            InvalidArgument: missing id or non-finite/negative reading
            NotFound: device_id is not registered (no reading stored)
            PersistenceFailure: the transaction could not be committed
        """
        value = _validate(device_id, light_intensity)

        with device_locks.hold(device_id):
            with transaction(db, f"ingest for '{device_id}'"):
                device = device_repo.get_device_for_update(db, device_id)
                if device is None:
                    raise NotFound(f"Device '{device_id}' not found. Please register device first.")

                now = now_utc()
                reading = sensor_repo.create_reading(db, device.id, value, now)
                liveness_tracker.mark_seen(db, device, now)

                decision = None
                entry = None
                if device.mode == MODE_AUTO:
                    threshold = settings_store.get_threshold(db)
                    decision, entry = automation_engine.apply(db, device, value, threshold, now)

            if entry is not None:
                log_ws.log_from_thread(
                    f"[AUTOMATION] Device '{device_id}': "
                    f"{decision.previous_status} → {decision.desired_status} ({decision.details})"
                )
                log_ws.publish_transition(
                    device_id, entry.action, entry.mode, entry.actor, entry.details, entry.timestamp
                )

        print(
            f"[INGEST] Device '{device_id}': reading={format_number(value)} "
            f"mode={device.mode} status={device.status}"
        )

        return IngestResult(
            device_id=device_id,
            status=device.status,
            changed=entry is not None,
            auto_action=entry.action if entry is not None else None,
            reading_id=reading.id,
        )


# --------------------------------------------------------
# GLOBAL INSTANCE (Singleton)
# --------------------------------------------------------
telemetry_ingest = TelemetryIngest()

# src/Services/device_control.py
"""
Device Control Service - registration, manual control, mode change, deletion.

These operations bypass the automation engine and write the registry
directly, each in one transaction under the device lock.

Policies:
- Manual control always wins: set_status() forces mode MANUAL and logs
  the command even when the status does not change (operator intent is
  audited, not only effective changes).
- set_mode() writes the mode only. Entering AUTO does not trigger a
  decision; the next reading does.
- delete() cascades: the device's readings and log entries go with it.
"""

from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from src.Core.errors import Conflict, InvalidArgument, NotFound
from src.Core.timeutil import now_utc
from src.Core import log_ws
from src.Models.device import Device, DEVICE_STATUSES, DEVICE_MODES, MODE_AUTO, MODE_MANUAL
from src.Models.control_log import ControlLog, ACTION_MODE_CHANGE
from src.Repositories import device as device_repo
from src.Repositories import control_log as control_log_repo
from src.Services.device_locks import device_locks
from src.Services.settings_store import settings_store
from src.Services.unit_of_work import transaction


def _publish(device: Device, entry: ControlLog):
    log_ws.publish_transition(
        device.device_id, entry.action, entry.mode, entry.actor, entry.details, entry.timestamp
    )


class DeviceControlService:

    # ==========================================================
    # Reads
    # ==========================================================

    def get_device(self, db: Session, device_id: str) -> Device:
        device = device_repo.get_device_by_id(db, device_id)
        if device is None:
            raise NotFound(f"Device '{device_id}' not found")
        return device

    # ==========================================================
    # Registration
    # ==========================================================

    def register(
        self,
        db: Session,
        device_id: str,
        device_name: str,
        location: Optional[str] = None,
    ) -> Device:
        """
        Register a new device (status OFF, offline).

        The mode is AUTO when the auto_mode_enabled setting is true,
        MANUAL otherwise.

        Raises:
            InvalidArgument: device_id or device_name missing/blank
            Conflict: device_id already registered (existing row untouched)
        """
        if not device_id or not str(device_id).strip() or not device_name or not str(device_name).strip():
            raise InvalidArgument("device_id and device_name are required")

        with device_locks.hold(device_id):
            with transaction(db, f"registration of '{device_id}'"):
                if device_repo.device_exists(db, device_id):
                    raise Conflict(f"Device '{device_id}' already registered")

                mode = MODE_AUTO if settings_store.get_auto_mode_enabled(db) else MODE_MANUAL
                try:
                    device = device_repo.add_device(db, device_id, device_name, location or "", mode)
                except IntegrityError as e:
                    # Another process inserted the same device_id first
                    raise Conflict(f"Device '{device_id}' already registered") from e

        log_ws.log_from_thread(f"[CONTROL] Device '{device_id}' registered (mode={device.mode})")
        return device

    # ==========================================================
    # Manual control
    # ==========================================================

    def set_status(self, db: Session, device_id: str, status: str, actor: Optional[str]) -> Device:
        """
        Manually switch a lamp ON or OFF.

        Always writes status, forces mode MANUAL and appends a MANUAL log
        entry carrying the actor, whether or not the status changed.

        Raises:
            InvalidArgument: status not ON/OFF
            NotFound: device_id is not registered
        """
        if status not in DEVICE_STATUSES:
            raise InvalidArgument("Valid status (ON/OFF) is required")

        with device_locks.hold(device_id):
            with transaction(db, f"manual control of '{device_id}'"):
                device = device_repo.get_device_for_update(db, device_id)
                if device is None:
                    raise NotFound(f"Device '{device_id}' not found")

                device_repo.set_status_and_mode(db, device, status, MODE_MANUAL)
                entry = control_log_repo.append_log(
                    db,
                    device_ref=device.id,
                    action=status,
                    mode=MODE_MANUAL,
                    actor=actor,
                    details=f"Manual control: {status}",
                    timestamp=now_utc(),
                )

            log_ws.log_from_thread(f"[CONTROL] Device '{device_id}' turned {status} by {actor or 'anonymous'}")
            _publish(device, entry)

        return device

    def set_mode(self, db: Session, device_id: str, mode: str, actor: Optional[str]) -> Device:
        """
        Switch a device between AUTO and MANUAL. Status is never touched.

        Raises:
            InvalidArgument: mode not AUTO/MANUAL
            NotFound: device_id is not registered
        """
        if mode not in DEVICE_MODES:
            raise InvalidArgument("Valid mode (AUTO/MANUAL) is required")

        with device_locks.hold(device_id):
            with transaction(db, f"mode change of '{device_id}'"):
                device = device_repo.get_device_for_update(db, device_id)
                if device is None:
                    raise NotFound(f"Device '{device_id}' not found")

                device_repo.set_mode(db, device, mode)
                entry = control_log_repo.append_log(
                    db,
                    device_ref=device.id,
                    action=ACTION_MODE_CHANGE,
                    mode=mode,
                    actor=actor,
                    details=f"Mode changed to {mode}",
                    timestamp=now_utc(),
                )

            log_ws.log_from_thread(f"[CONTROL] Device '{device_id}' mode changed to {mode} by {actor or 'anonymous'}")
            _publish(device, entry)

        return device

    # ==========================================================
    # Deletion
    # ==========================================================

    def delete(self, db: Session, device_id: str) -> None:
        """
        Delete a device with its readings and log history.

        Raises:
            NotFound: device_id is not registered
        """
        with device_locks.hold(device_id):
            with transaction(db, f"deletion of '{device_id}'"):
                device = device_repo.get_device_for_update(db, device_id)
                if device is None:
                    raise NotFound(f"Device '{device_id}' not found")
                device_repo.delete_device_cascade(db, device)

        log_ws.log_from_thread(f"[CONTROL] Device '{device_id}' deleted with its history", "warning")


# --------------------------------------------------------
# GLOBAL INSTANCE (Singleton)
# --------------------------------------------------------
device_control = DeviceControlService()

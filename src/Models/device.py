# src/Models/device.py

"""
Device Model - Lamp Registry

SQLAlchemy model for registered lamp actuators.

The devices table is the canonical state of each lamp: identity, current
commanded status, automation mode and liveness. It is mutated by:

    - the automation engine (status, only on an actual change)
    - manual control (status + forces mode MANUAL)
    - mode change (mode only)
    - the liveness tracker (is_online / last_seen only)

Database Table: devices
Primary Key: id (internal integer, referenced by sensor_data and control_logs)
Unique Key: device_id (external identifier flashed into the device firmware)

Usage:
    from src.Models.device import Device

    device = Device(device_id="LAMP-001", device_name="Hallway lamp")
    db.add(device)
"""

from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, Integer, String, DateTime, Boolean, CheckConstraint
from src.DB.base_class import Base
from src.Core.timeutil import now_utc


STATUS_ON = "ON"
STATUS_OFF = "OFF"
DEVICE_STATUSES = (STATUS_ON, STATUS_OFF)

MODE_AUTO = "AUTO"
MODE_MANUAL = "MANUAL"
DEVICE_MODES = (MODE_AUTO, MODE_MANUAL)


class Device(Base):
    """
    SQLAlchemy model representing a registered lamp.

    Schema:
    - id (PK): Internal identifier
    - device_id: External identifier (e.g., "LAMP-001"), unique, immutable
    - device_name: Human-readable name
    - location: Free-text location ("" when not provided)
    - status: Commanded actuator state, ON or OFF
    - mode: AUTO (threshold rule) or MANUAL (operator commands)
    - is_online: Set by heartbeat/telemetry; OFFLINE is derived, never stored
    - last_seen: Last heartbeat or telemetry arrival
    - created_at: Registration time

    status and mode are independent: mode never implies a status value.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "devices"

    __table_args__ = (
        CheckConstraint("status IN ('ON', 'OFF')", name="ck_devices_status"),
        CheckConstraint("mode IN ('AUTO', 'MANUAL')", name="ck_devices_mode"),
    )

    # ============================================================
    # Identity
    # ============================================================
    id = Column(Integer, primary_key=True, autoincrement=True)

    device_id = Column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
        doc="External identifier assigned to the device (e.g., 'LAMP-001')"
    )

    # ============================================================
    # Device Metadata
    # ============================================================
    device_name = Column(String(200), nullable=False)

    location = Column(String(200), nullable=False, default="")

    # ============================================================
    # Actuator State
    # ============================================================
    status = Column(String(3), nullable=False, default=STATUS_OFF)

    mode = Column(String(6), nullable=False, default=MODE_MANUAL)

    # ============================================================
    # Liveness
    # ============================================================
    is_online = Column(Boolean, nullable=False, default=False)

    last_seen = Column(
        DateTime(timezone=True),
        nullable=True,
        doc="Last heartbeat or telemetry arrival (UTC)"
    )

    # ============================================================
    # Timestamps
    # ============================================================
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_utc)

    def __repr__(self) -> str:
        return (
            f"<Device(device_id={self.device_id!r}, status={self.status!r}, "
            f"mode={self.mode!r}, is_online={self.is_online})>"
        )

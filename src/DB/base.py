"""
src/DB/base.py
==========================
SQLAlchemy Model Registry
==========================

Imports every model so Base.metadata is complete before create_all() or
Alembic autogenerate run.

Models Registered:
-----------------
- Device: Registered lamp actuators and their current status/mode/liveness
- SensorReading: Append-only light-intensity history
- ControlLog: Append-only transition log (MANUAL / AUTO / MODE_CHANGE)
- SystemSetting: Key/value runtime settings (light threshold, ...)

Any new model class MUST be imported here.
"""

from src.DB.base_class import Base

# ============================================================
# MODEL IMPORTS - DO NOT REMOVE
# ============================================================
from src.Models.device import Device
from src.Models.sensor_reading import SensorReading
from src.Models.control_log import ControlLog
from src.Models.system_setting import SystemSetting

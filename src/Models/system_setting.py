# src/Models/system_setting.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, String, DateTime
from src.DB.base_class import Base
from src.Core.timeutil import now_utc


KEY_LIGHT_THRESHOLD = "light_threshold"
KEY_AUTO_MODE_ENABLED = "auto_mode_enabled"
KEY_POLLING_INTERVAL = "polling_interval"


class SystemSetting(Base):
    """
    Key/value runtime setting.

    Values are stored as strings, exactly as operators submit them, and
    parsed by src/Services/settings_store.py on every read.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "system_settings"

    setting_key = Column(String(100), primary_key=True)

    setting_value = Column(String(255), nullable=False)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    def __repr__(self) -> str:
        return f"<SystemSetting({self.setting_key}={self.setting_value!r})>"

# src/Repositories/system_setting.py

from sqlalchemy.orm import Session
from src.Models.system_setting import SystemSetting
from src.Core.timeutil import now_utc
from typing import Dict, Optional


def get_setting(db: Session, key: str) -> Optional[str]:
    """
    Read one raw setting value, or None if the key is not stored.

    Always hits the database: the automation engine relies on this to pick
    up threshold changes immediately.
    """
    row = db.query(SystemSetting).filter(SystemSetting.setting_key == key).first()
    return row.setting_value if row else None


def get_all_settings(db: Session) -> Dict[str, str]:
    rows = db.query(SystemSetting).order_by(SystemSetting.setting_key).all()
    return {row.setting_key: row.setting_value for row in rows}


def upsert_setting(db: Session, key: str, value: str) -> SystemSetting:
    row = db.query(SystemSetting).filter(SystemSetting.setting_key == key).first()

    if row is None:
        row = SystemSetting(setting_key=key, setting_value=value)
        db.add(row)
    else:
        row.setting_value = value
        row.updated_at = now_utc()

    db.flush()
    return row


def insert_if_missing(db: Session, key: str, value: str) -> bool:
    """
    Insert a default value unless the key already exists.

    Returns:
        True if a row was inserted
    """
    if get_setting(db, key) is not None:
        return False

    db.add(SystemSetting(setting_key=key, setting_value=value))
    db.flush()
    return True

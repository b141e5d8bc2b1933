# src/Models/control_log.py

"""
Control Log Model - Transition Audit Trail

Append-only record of every accepted status or mode change.

    action       mode     actor      written by
    ----------   ------   --------   -------------------------------
    ON / OFF     AUTO     NULL       automation engine (only on a flip)
    ON / OFF     MANUAL   operator   manual control (every command)
    MODE_CHANGE  target   operator   mode change

Ordering:
    Entries are totally ordered by (timestamp, id); the autoincrement id
    breaks ties between entries written within the same clock tick.

Database Table: control_logs
"""

from sqlalchemy.orm import declared_attr
from sqlalchemy import (
    Column, BigInteger, Integer, String, Text, DateTime,
    ForeignKey, Index, CheckConstraint
)
from src.DB.base_class import Base
from src.Core.timeutil import now_utc


ACTION_MODE_CHANGE = "MODE_CHANGE"
LOG_ACTIONS = ("ON", "OFF", ACTION_MODE_CHANGE)


class ControlLog(Base):
    """SQLAlchemy model for one transition log entry."""

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "control_logs"

    __table_args__ = (
        CheckConstraint("action IN ('ON', 'OFF', 'MODE_CHANGE')", name="ck_control_logs_action"),
        CheckConstraint("mode IN ('AUTO', 'MANUAL')", name="ck_control_logs_mode"),
        Index("ix_control_logs_device_timestamp", "device_ref", "timestamp"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    device_ref = Column(
        Integer,
        ForeignKey("devices.id", ondelete="CASCADE"),
        nullable=False,
    )

    action = Column(String(11), nullable=False)

    mode = Column(String(6), nullable=False, doc="Device mode at the time of the action")

    actor = Column(
        String(100),
        nullable=True,
        doc="Opaque principal for manual actions; NULL for automatic ones"
    )

    details = Column(Text, nullable=False, default="")

    timestamp = Column(DateTime(timezone=True), nullable=False, default=now_utc, index=True)

    def __repr__(self) -> str:
        return (
            f"<ControlLog(id={self.id}, device_ref={self.device_ref}, "
            f"action={self.action!r}, mode={self.mode!r}, actor={self.actor!r})>"
        )

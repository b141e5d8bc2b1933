# src/Models/sensor_reading.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, BigInteger, Integer, Float, DateTime, ForeignKey, Index
from src.DB.base_class import Base
from src.Core.timeutil import now_utc


class SensorReading(Base):
    """
    SQLAlchemy model for light-intensity readings pushed by devices.

    Rows are append-only: the service never updates or deletes a reading,
    except through the device deletion cascade. Higher values mean a darker
    room (raw LDR count).
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "sensor_data"

    __table_args__ = (
        Index("ix_sensor_data_device_timestamp", "device_ref", "timestamp"),
    )

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    device_ref = Column(
        Integer,
        ForeignKey("devices.id", ondelete="CASCADE"),
        nullable=False,
        doc="Internal id of the reporting device"
    )

    light_intensity = Column(Float, nullable=False)

    timestamp = Column(DateTime(timezone=True), nullable=False, default=now_utc, index=True)

    def __repr__(self) -> str:
        return (
            f"<SensorReading(device_ref={self.device_ref}, "
            f"light_intensity={self.light_intensity}, timestamp={self.timestamp})>"
        )

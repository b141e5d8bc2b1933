"""
src/DB/base_class.py
=================================
SQLAlchemy Base Model Definition
=================================

Declarative base (SQLAlchemy 2.0 style) shared by every ORM model.

Convention:
----------
Table names default to the lowercase class name. Models in this project
override __tablename__ with declared_attr.directive to keep the table names
used by the existing MySQL/PostgreSQL deployments:

    - Device         → devices
    - SensorReading  → sensor_data
    - ControlLog     → control_logs
    - SystemSetting  → system_settings
"""

from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models in the application."""

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

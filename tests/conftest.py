# tests/conftest.py

import os
import tempfile

# The engine is built at import time from DATABASE_URL; point it at a
# throwaway SQLite file before anything under src/ is imported.
_DB_DIR = tempfile.mkdtemp(prefix="lighting-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.setdefault("DB_AUTO_CREATE", "false")

import pytest
from fastapi.testclient import TestClient

from src.DB.database import create_all_tables, drop_all_tables
from src.DB.session import SessionLocal
from src.Models.device import MODE_AUTO
from src.Repositories import device as device_repo
from src.Services.device_control import device_control
from src.Services.unit_of_work import transaction


@pytest.fixture(autouse=True)
def _schema():
    create_all_tables()
    yield
    drop_all_tables()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from src.main import app

    # No context manager: the lifespan (DB probe, seeding) is not needed here
    return TestClient(app)


@pytest.fixture
def register(db):
    """Register a device, optionally switching it to AUTO straight away."""

    def _register(device_id="LAMP-001", device_name="Hallway lamp", location="1st floor", mode=None):
        device = device_control.register(db, device_id, device_name, location)
        if mode == MODE_AUTO:
            with transaction(db, "test setup"):
                device_repo.set_mode(db, device_repo.get_device_for_update(db, device_id), MODE_AUTO)
        return device

    return _register

# src/Services/unit_of_work.py
"""
Unit of Work
============
Atomic commit/rollback boundary for every write path of the service.

The device write and the control_logs entry it produces (and, for ingest,
the sensor reading and liveness update) are flushed inside one block and
committed once at the end. Any failure rolls the whole block back:

- SQLAlchemyError      → rollback, re-raised as PersistenceFailure (chained)
- CoreError (NotFound, Conflict, ...) → rollback, re-raised unchanged
- anything else        → rollback, re-raised unchanged

There is no retry here; retry policy belongs to the database driver/pool.
"""

from contextlib import contextmanager
from typing import Iterator
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from src.Core.errors import PersistenceFailure
from src.Core import log_ws


@contextmanager
def transaction(db: Session, operation: str) -> Iterator[Session]:
    """
    Run a block of repository calls as a single transaction.

    Args:
        db: Active SQLAlchemy session
        operation: Short description used in logs and error messages

    Example:
        with transaction(db, "manual control of 'LAMP-001'"):
            device_repo.set_status_and_mode(db, device, "ON", "MANUAL")
            control_log_repo.append_log(db, device.id, "ON", "MANUAL", actor, ...)
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_ws.log_from_thread(f"[DB] ❌ {operation} rolled back: {e}", "error")
        raise PersistenceFailure(f"{operation} failed: database write was not applied") from e
    except Exception:
        db.rollback()
        raise

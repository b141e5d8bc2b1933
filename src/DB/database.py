# src/DB/database.py

"""
Database Dependency Injection Module

Session generator and maintenance helpers.

Key Features:
- get_db(): one session per request via FastAPI Depends()
- test_db_connection(): SELECT 1 probe for /health and startup
- create_all_tables() / drop_all_tables(): development and test bootstrap

Sessions are NOT committed automatically. Write paths go through
src/Services/unit_of_work.py, which commits the status update and its log
entry together or rolls both back.

Usage Examples:
    from fastapi import Depends
    from sqlalchemy.orm import Session
    from src.DB.database import get_db

    @router.get("/devices")
    def list_devices(db: Session = Depends(get_db)):
        return device_repo.get_all_devices(db)
"""

from typing import Generator
from sqlalchemy.orm import Session
from sqlalchemy import text
from src.DB.session import SessionLocal, engine


# ============================================================
# Primary Database Session Generator
# ============================================================

def get_db() -> Generator[Session, None, None]:
    """
    Database session generator for FastAPI dependency injection.

    Yields a fresh session and always closes it, returning the connection
    to the pool. Uncommitted work is rolled back on close.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============================================================
# Database Health Check Utilities
# ============================================================

def test_db_connection() -> bool:
    """
    Test database connectivity with a simple query.

    Returns:
        bool: True if the database answered SELECT 1, False otherwise.
              Never raises; the error is logged to the console.
    """
    db = None
    try:
        db = SessionLocal()
        result = db.execute(text("SELECT 1"))
        return result.scalar() == 1
    except Exception as e:
        print(f"[DB] ❌ Connection test failed: {e}")
        return False
    finally:
        if db:
            db.close()


# ============================================================
# Development and Testing Utilities
# ============================================================

def create_all_tables():
    """
    Create all database tables defined in models.

    WARNING: Only for development/testing. Production uses Alembic.
    """
    from src.DB.base import Base

    Base.metadata.create_all(bind=engine)
    print("[DB] ✅ All tables created")


def drop_all_tables():
    """
    Drop all database tables defined in models.

    WARNING: Destroys all data. Used by the test suite between tests.
    """
    from src.DB.base import Base

    Base.metadata.drop_all(bind=engine)
    print("[DB] 🗑️  All tables dropped")

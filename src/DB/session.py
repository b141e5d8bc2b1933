"""
src/DB/session.py
======================================
Database Session Configuration Module
======================================

Engine and session factory for the lighting control service.

Session Configuration:
---------------------
- autocommit=False: Services commit explicitly at the end of a unit of work
- autoflush=False: Changes are flushed only on commit or explicit flush()
- expire_on_commit=False: Service results stay readable after commit

SQLite (development and tests):
------------------------------
- check_same_thread=False: FastAPI runs sync endpoints in a thread pool
- PRAGMA foreign_keys=ON: Enforces ON DELETE CASCADE like PostgreSQL does
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from src.Core.config import settings


# ============================================================
# DATABASE ENGINE CONFIGURATION
# ============================================================
_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False, "timeout": 30} if _is_sqlite else {},
)


if _is_sqlite:
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# ============================================================
# SESSION FACTORY CONFIGURATION
# ============================================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine
)

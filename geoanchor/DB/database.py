# geoanchor/DB/database.py

"""
Database Utilities Module

Connectivity check and schema helpers for development and tests.
Production schemas are managed with Alembic (alembic upgrade head).

Usage Examples:
    # Health endpoint
    from geoanchor.DB.database import check_db_connection

    @app.get("/health")
    def health():
        return {"database": "connected" if check_db_connection() else "disconnected"}

    # Throwaway database for local experiments
    from geoanchor.DB.database import create_all_tables
    create_all_tables()
"""

from sqlalchemy import text
from sqlalchemy.engine import Engine
from typing import Optional
from geoanchor.DB.session import SessionLocal, engine


# ============================================================
# Database Health Check Utilities
# ============================================================

def check_db_connection() -> bool:
    """
    Test database connectivity with a simple SELECT 1.

    Returns:
        bool: True if database is reachable and responsive, False otherwise

    Notes:
        - Never raises; connection errors are logged and reported as False
    """
    try:
        with SessionLocal() as db:
            return db.execute(text("SELECT 1")).scalar() == 1
    except Exception as e:
        print(f"[DB] ❌ Connection test failed: {e}")
        return False


# ============================================================
# Schema Helpers (development / tests)
# ============================================================

def create_all_tables(bind: Optional[Engine] = None, tables: Optional[list] = None):
    """
    Create database tables defined in models.

    Args:
        bind: Engine to use (defaults to the application engine)
        tables: Optional subset of Table objects. The PostGIS-backed tables
                (geofences, execution_rules) need a PostgreSQL bind, so test
                suites running on SQLite pass the anchoring tables explicitly.

    Notes:
        - Idempotent: existing tables are skipped
        - Does NOT migrate existing schemas (use Alembic)
    """
    from geoanchor.DB.base import Base
    print("[DB] 🔨 Creating tables...")
    Base.metadata.create_all(bind=bind or engine, tables=tables)
    print("[DB] ✅ Tables created successfully")


def drop_all_tables(bind: Optional[Engine] = None, tables: Optional[list] = None):
    """
    Drop database tables defined in models.

    WARNING: DESTRUCTIVE OPERATION. Only use in development/testing environments.
    """
    from geoanchor.DB.base import Base
    print("[DB] 🗑️  Dropping tables...")
    Base.metadata.drop_all(bind=bind or engine, tables=tables)
    print("[DB] ✅ Tables dropped successfully")


__all__ = [
    "check_db_connection",
    "create_all_tables",
    "drop_all_tables"
]

"""
geoanchor/DB/session.py
======================================
Database Session Configuration Module
======================================

Engine and session factory shared by request handlers.

Usage Example:
-------------
    from geoanchor.DB.session import SessionLocal

    with SessionLocal() as db:
        row = get_last_location_by_wallet(db, "GABC...", "Stellar")

Session Configuration:
---------------------
- autocommit=False: repositories commit explicitly after each write
- autoflush=False: no implicit flush before queries
- pool_pre_ping=True: stale pooled connections are replaced transparently
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from geoanchor.Core.config import settings


# ============================================================
# DATABASE ENGINE CONFIGURATION
# ============================================================
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)


# ============================================================
# SESSION FACTORY CONFIGURATION
# ============================================================
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

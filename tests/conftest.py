"""
Shared pytest fixtures.

The application settings require DATABASE_URL at import time, so it is set
here before any geoanchor module is imported. Persistence tests run against
an in-memory SQLite database holding only the tables SQLite can express
(the Geography-backed geofences/execution_rules need PostGIS).
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from geoanchor.DB.database import create_all_tables, drop_all_tables
from geoanchor.Models.anchor_checkpoint import AnchorCheckpoint
from geoanchor.Models.returned_event import ReturnedEvent
from geoanchor.Models.wallet_location import WalletLocation


SQLITE_TABLES = [
    WalletLocation.__table__,
    AnchorCheckpoint.__table__,
    ReturnedEvent.__table__,
]


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(bind=test_engine, tables=SQLITE_TABLES)
    yield test_engine
    drop_all_tables(bind=test_engine, tables=SQLITE_TABLES)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

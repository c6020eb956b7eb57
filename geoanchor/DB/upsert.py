# geoanchor/DB/upsert.py
"""
Dialect-native INSERT constructs for atomic upserts.

Checkpoint and ledger writes rely on INSERT ... ON CONFLICT so that two
requests for the same wallet resolve inside the database, not in Python.
PostgreSQL is the production dialect; SQLite is accepted for tests.
"""

from sqlalchemy.orm import Session


def dialect_insert(DB: Session):
    """
    Return the `insert` construct (with on_conflict_* support) for the session's dialect.

    Raises:
        NotImplementedError: dialect without ON CONFLICT support
    """
    dialect = DB.get_bind().dialect.name

    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert

    raise NotImplementedError(f"Atomic upsert not supported for dialect '{dialect}'")

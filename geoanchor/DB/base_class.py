"""
geoanchor/DB/base_class.py
=================================
SQLAlchemy Base Model Definition
=================================

Declarative base shared by every ORM model (SQLAlchemy 2.0 style).

Table names default to the lowercase class name; models owning a
long-lived table override __tablename__ with a fixed name:
    - WalletLocation → wallet_locations
    - AnchorCheckpoint → anchor_checkpoints
    - ReturnedEvent → anchor_returned_events

Note:
    All models must inherit from this Base to be registered in
    Base.metadata and discovered by Alembic.
"""

from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models in the application.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

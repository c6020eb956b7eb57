# geoanchor/Models/anchor_checkpoint.py
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import declared_attr
from geoanchor.DB.base_class import Base


class AnchorCheckpoint(Base):
    """
    Heartbeat state of one wallet: exactly one row per (public_key, blockchain).

    Written only through atomic upserts (see Repositories.anchor_checkpoint):
    - claim: compare-and-set on last_checkpoint_at, so concurrent retries
      cannot both emit the same CHECKPOINT
    - reset: moves last_checkpoint_at forward, never backwards
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "anchor_checkpoints"

    public_key = Column(String(255), primary_key=True)
    blockchain = Column(String(50), primary_key=True)

    last_checkpoint_at = Column(
        DateTime(timezone=True),
        nullable=False,
        doc="UTC instant of the last checkpoint (or reset)"
    )
    last_checkpoint_cell_id = Column(
        String(64),
        nullable=False,
        doc="Cell of the wallet at last_checkpoint_at"
    )

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<AnchorCheckpoint(public_key={self.public_key!r}, blockchain={self.blockchain!r}, "
            f"last_checkpoint_at={self.last_checkpoint_at!r})>"
        )

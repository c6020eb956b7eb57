# geoanchor/Models/wallet_location.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import (
    Column, BigInteger, Integer, String, Float, DateTime,
    CheckConstraint, func, Index
)
from geoanchor.DB.base_class import Base


class WalletLocation(Base):
    """
    SQLAlchemy model for raw wallet location updates.

    Append-only: every accepted update is one row. The anchoring core only
    reads the most recent row of a wallet (its previous location) before the
    current update is written.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "wallet_locations"

    # SQLite only autoincrements INTEGER primary keys
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    # Subject key
    public_key = Column(
        String(255),
        nullable=False,
        doc="Wallet public key / account identifier"
    )
    blockchain = Column(
        String(50),
        nullable=False,
        doc="Chain namespace of the wallet (e.g. 'Stellar')"
    )

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    recorded_at = Column(
        DateTime(timezone=True),
        nullable=False,
        doc="UTC instant the location was observed (occurred_at of the update)"
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_wallet_locations_subject_id', public_key, blockchain, id.desc()),
        Index('unique_wallet_recorded_at', public_key, blockchain, recorded_at, unique=True),
        CheckConstraint('latitude >= -90 AND latitude <= 90', name='check_wallet_lat_range'),
        CheckConstraint('longitude >= -180 AND longitude <= 180', name='check_wallet_lon_range'),
    )

    def __repr__(self) -> str:
        return (
            f"<WalletLocation(id={self.id}, public_key={self.public_key!r}, "
            f"blockchain={self.blockchain!r}, lat={self.latitude:.4f}, lon={self.longitude:.4f})>"
        )

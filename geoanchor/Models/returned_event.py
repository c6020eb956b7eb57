# geoanchor/Models/returned_event.py
from sqlalchemy import Column, String, DateTime, Index, CheckConstraint
from sqlalchemy.orm import declared_attr
from geoanchor.DB.base_class import Base


class ReturnedEvent(Base):
    """
    Ledger entry proving an event_id was already surfaced to a caller.

    Keyed by (public_key, blockchain, event_id); re-surfacing refreshes
    returned_at. Entries older than the dedup window are ignored by reads
    and may be purged at any time.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "anchor_returned_events"

    public_key = Column(String(255), primary_key=True)
    blockchain = Column(String(50), primary_key=True)
    event_id = Column(String(64), primary_key=True, doc="Hex SHA-256 event identifier")

    event_type = Column(String(20), nullable=False)

    returned_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_returned_events_subject_time', 'public_key', 'blockchain', 'returned_at'),
        Index('idx_returned_events_returned_at', 'returned_at'),
        CheckConstraint(
            "event_type IN ('CELL_TRANSITION', 'RULE_TRIGGERED', 'CHECKPOINT')",
            name='check_returned_event_type'
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ReturnedEvent(public_key={self.public_key!r}, event_id={self.event_id[:12]!r}, "
            f"returned_at={self.returned_at!r})>"
        )

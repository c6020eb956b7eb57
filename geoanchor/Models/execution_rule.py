# geoanchor/Models/execution_rule.py
from sqlalchemy import (
    Column, BigInteger, String, Float, Boolean, DateTime,
    ForeignKey, CheckConstraint, Index
)
from sqlalchemy.sql import func
from sqlalchemy.orm import declared_attr
from geoanchor.DB.base_class import Base


class ExecutionRule(Base):
    """
    Location rule definition.

    The anchoring core never evaluates these geometries itself: the matched-rules
    query hands it an ordered list of rules whose area contains the update.

    Rule types:
    - location / proximity: circle of radius_meters around (center_latitude, center_longitude)
    - geofence: the polygon of the referenced geofence
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "execution_rules"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    rule_name = Column(String(200), nullable=False)
    rule_type = Column(
        String(20),
        nullable=False,
        doc="'location', 'proximity' or 'geofence'"
    )

    center_latitude = Column(Float, nullable=True)
    center_longitude = Column(Float, nullable=True)
    radius_meters = Column(Float, nullable=True)

    geofence_id = Column(
        String(100),
        ForeignKey('geofences.id', ondelete='CASCADE'),
        nullable=True
    )

    target_wallet_public_key = Column(
        String(255),
        nullable=True,
        doc="Restrict the rule to one wallet (NULL = any wallet)"
    )

    is_active = Column(Boolean, nullable=False, server_default='true')

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_execution_rules_active_created', 'is_active', 'created_at'),
        CheckConstraint(
            "rule_type IN ('location', 'proximity', 'geofence')",
            name='check_rule_type'
        ),
        CheckConstraint(
            "rule_type = 'geofence' OR (center_latitude IS NOT NULL "
            "AND center_longitude IS NOT NULL AND radius_meters IS NOT NULL)",
            name='check_rule_circle'
        ),
        CheckConstraint(
            "rule_type <> 'geofence' OR geofence_id IS NOT NULL",
            name='check_rule_geofence'
        ),
    )

    def __repr__(self) -> str:
        return f"<ExecutionRule(id={self.id}, name={self.rule_name!r}, type={self.rule_type!r})>"

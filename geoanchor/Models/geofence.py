# geoanchor/Models/geofence.py

from sqlalchemy import Column, String, Text, Boolean, DateTime, func
from sqlalchemy.orm import declared_attr
from geoalchemy2 import Geography
from geoanchor.DB.base_class import Base


class Geofence(Base):
    """
    Named polygon boundary referenced by geofence-type execution rules.

    Stored as GEOGRAPHY so ST_Intersects works on spherical coordinates
    (SRID 4326 = WGS84).
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "geofences"

    id = Column(String(100), primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    geometry = Column(
        Geography('POLYGON', srid=4326),
        nullable=False
    )

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Geofence(id={self.id!r}, name={self.name!r})>"

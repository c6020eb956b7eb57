# geoanchor/Schemas/location.py

from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timedelta, timezone
from typing import Optional

from geoanchor.Core.config import settings


COMMITMENT_PATTERN = r'^0x[0-9a-fA-F]{64}$'


"""
Schema for an incoming wallet location update.
Coordinates are range-checked here so malformed input is rejected (422)
before it reaches the anchoring core.
"""
class LocationUpdate_create(BaseModel):
    public_key: str = Field(..., min_length=1, max_length=255, description="Wallet public key / account identifier")
    blockchain: str = Field("Stellar", min_length=1, max_length=50, description="Chain namespace of the wallet")

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    timestamp: Optional[datetime] = Field(
        None,
        description="Observation instant (UTC). Server receive time is used when omitted"
    )
    commitment: Optional[str] = Field(
        None,
        pattern=COMMITMENT_PATTERN,
        description="Optional 32-byte hex hash of off-chain evidence attached to every emitted event"
    )

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp_not_ahead(cls, value: Optional[datetime]) -> Optional[datetime]:
        """
        Reject observation instants too far ahead of the server clock.

        The timestamp drives the checkpoint clock, which never moves back:
        a single update dated in the future would silence checkpoints for
        the wallet until that date.

        Raises:
            ValueError: more than ANCHOR_MAX_CLOCK_SKEW_S ahead of now (→ 422)
        """
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)

        limit = datetime.now(timezone.utc) + timedelta(seconds=settings.ANCHOR_MAX_CLOCK_SKEW_S)
        if value > limit:
            raise ValueError(
                f"timestamp {value.isoformat()} is more than "
                f"{settings.ANCHOR_MAX_CLOCK_SKEW_S}s ahead of server time"
            )
        return value

# geoanchor/Schemas/anchor_event.py
"""
Anchor event payloads.

AnchorEvent is a closed union discriminated by event_type: prev_cell_id only
exists on CellTransitionEvent and rule_id only on RuleTriggeredEvent, so no
consumer needs runtime presence checks. New event kinds are added as new
variants of the union.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from geoanchor.Schemas.location import COMMITMENT_PATTERN


ZERO_COMMITMENT = "0x" + "0" * 64
"""Placeholder commitment used when no off-chain evidence is supplied."""


class AnchorEventType(str, Enum):
    CELL_TRANSITION = "CELL_TRANSITION"
    RULE_TRIGGERED = "RULE_TRIGGERED"
    CHECKPOINT = "CHECKPOINT"


def format_utc_iso(value: datetime) -> str:
    """UTC ISO-8601 with 'Z' suffix; naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


class _AnchorEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: str = Field(..., pattern=r'^[0-9a-f]{64}$', description="Hex SHA-256 of the event occurrence")
    occurred_at: datetime = Field(..., description="Instant of the triggering update, full precision")
    cell_id: str = Field(..., description="Cell of the wallet at occurred_at")
    commitment: str = Field(ZERO_COMMITMENT, pattern=COMMITMENT_PATTERN)
    zk_proof: None = Field(None, description="Reserved; always null")

    @field_serializer('occurred_at')
    def _serialize_occurred_at(self, value: datetime) -> str:
        return format_utc_iso(value)


class CellTransitionEvent(_AnchorEventBase):
    event_type: Literal[AnchorEventType.CELL_TRANSITION] = AnchorEventType.CELL_TRANSITION
    prev_cell_id: str


class RuleTriggeredEvent(_AnchorEventBase):
    event_type: Literal[AnchorEventType.RULE_TRIGGERED] = AnchorEventType.RULE_TRIGGERED
    rule_id: str


class CheckpointEvent(_AnchorEventBase):
    event_type: Literal[AnchorEventType.CHECKPOINT] = AnchorEventType.CHECKPOINT


AnchorEvent = Annotated[
    Union[CellTransitionEvent, RuleTriggeredEvent, CheckpointEvent],
    Field(discriminator='event_type')
]


class MatchedRule(BaseModel):
    """Rule whose area contains the update, as reported by the spatial query."""
    model_config = ConfigDict(frozen=True)

    rule_id: str
    rule_name: str = ""
    rule_type: str = ""


class AnchorResponse(BaseModel):
    """Response of POST /locations/update."""
    cell_id: str
    matched_rules: List[MatchedRule] = Field(default_factory=list)
    anchor_events: List[AnchorEvent] = Field(default_factory=list)
    next_suggested_anchor_after_secs: Optional[int] = None


class CheckpointState_get(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    public_key: str
    blockchain: str
    last_checkpoint_at: datetime
    last_checkpoint_cell_id: str

    @field_serializer('last_checkpoint_at')
    def _serialize_last_checkpoint_at(self, value: datetime) -> str:
        return format_utc_iso(value)


class ReturnedEvent_get(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: str
    event_type: AnchorEventType
    returned_at: datetime

    @field_serializer('returned_at')
    def _serialize_returned_at(self, value: datetime) -> str:
        return format_utc_iso(value)

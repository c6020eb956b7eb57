# geoanchor/Services/anchoring/anchor_types.py
"""
Value types shared by the anchoring components.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from geoanchor.Core.config import settings


class Subject(NamedTuple):
    """Identity of a tracked wallet: every stateful record is keyed by it."""
    public_key: str
    blockchain: str

    def __str__(self) -> str:
        return f"{self.blockchain}:{self.public_key}"


@dataclass(frozen=True)
class LocationUpdate:
    """One wallet location update, already validated by the caller."""
    subject: Subject
    latitude: float
    longitude: float
    occurred_at: datetime
    commitment: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'occurred_at', ensure_utc(self.occurred_at))


@dataclass(frozen=True)
class CheckpointSnapshot:
    """Heartbeat state of a subject (HasCheckpoint)."""
    last_checkpoint_at: datetime
    last_checkpoint_cell_id: str

    def __post_init__(self):
        object.__setattr__(self, 'last_checkpoint_at', ensure_utc(self.last_checkpoint_at))

    def elapsed_seconds(self, now: datetime) -> float:
        return (ensure_utc(now) - self.last_checkpoint_at).total_seconds()


@dataclass(frozen=True)
class AnchorPolicy:
    """Process-wide anchoring parameters."""
    grid_precision: float = 0.001
    dedup_window_s: int = 3600
    checkpoint_interval_s: int = 300

    @classmethod
    def from_settings(cls) -> "AnchorPolicy":
        return cls(
            grid_precision=settings.ANCHOR_GRID_PRECISION_DEG,
            dedup_window_s=settings.ANCHOR_DEDUP_WINDOW_S,
            checkpoint_interval_s=settings.ANCHOR_CHECKPOINT_INTERVAL_S,
        )


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive values are interpreted as UTC (SQLite returns naive datetimes
    for timezone-aware columns).
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

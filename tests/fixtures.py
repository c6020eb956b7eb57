"""
Test doubles and builders for the anchoring core.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

from geoanchor.Schemas.anchor_event import MatchedRule
from geoanchor.Services.anchoring import (
    AnchorCollaborators,
    AnchorPolicy,
    CheckpointSnapshot,
    LocationUpdate,
    Subject,
)


ACCOUNT = "A1"
CHAIN = "Stellar"
SUBJECT = Subject(public_key=ACCOUNT, blockchain=CHAIN)

T0 = datetime(2025, 1, 1, 10, 0, 30, tzinfo=timezone.utc)

DEFAULT_POLICY = AnchorPolicy(grid_precision=0.001, dedup_window_s=3600, checkpoint_interval_s=300)


def make_update(
    latitude: float = 34.0512,
    longitude: float = -118.2437,
    occurred_at: datetime = T0,
    subject: Subject = SUBJECT,
    commitment: Optional[str] = None
) -> LocationUpdate:
    return LocationUpdate(
        subject=subject,
        latitude=latitude,
        longitude=longitude,
        occurred_at=occurred_at,
        commitment=commitment,
    )


class CollaboratorDown(ConnectionError):
    pass


class FakeCollaborators(AnchorCollaborators):
    """
    In-memory collaborators with the same conditional-write semantics as
    the SQL repositories.

    Failure switches: add an operation name to `failing` and every call to
    it raises CollaboratorDown.
    """

    def __init__(self, rules: Optional[List[MatchedRule]] = None):
        self.locations: Dict[Subject, Tuple[float, float]] = {}
        self.rules: List[MatchedRule] = list(rules or [])
        self.ledger: Dict[Tuple[Subject, str], datetime] = {}
        self.checkpoints: Dict[Subject, CheckpointSnapshot] = {}
        self.failing: Set[str] = set()
        self.calls: List[str] = []

    def _enter(self, name: str):
        self.calls.append(name)
        if name in self.failing:
            raise CollaboratorDown(f"{name} unavailable")

    # Helpers

    def store_location(self, update: LocationUpdate):
        """Primary write of the request handler."""
        self.locations[update.subject] = (update.latitude, update.longitude)

    # Collaborator operations

    def previous_location(self, subject):
        self._enter("previous_location")
        return self.locations.get(subject)

    def matched_rules(self, subject, latitude, longitude):
        self._enter("matched_rules")
        return list(self.rules)

    def returned_event_ids(self, subject, event_ids, since):
        self._enter("returned_event_ids")
        return {
            event_id for event_id in event_ids
            if (subject, event_id) in self.ledger and self.ledger[(subject, event_id)] >= since
        }

    def record_returned(self, subject, events, returned_at):
        self._enter("record_returned")
        for event_id, _event_type in events:
            self.ledger[(subject, event_id)] = returned_at

    def read_checkpoint(self, subject):
        self._enter("read_checkpoint")
        return self.checkpoints.get(subject)

    def claim_checkpoint(self, subject, expected_last_at, new_at, cell_id):
        self._enter("claim_checkpoint")
        current = self.checkpoints.get(subject)
        if expected_last_at is None:
            if current is not None:
                return False
        elif current is None or current.last_checkpoint_at != expected_last_at:
            return False
        self.checkpoints[subject] = CheckpointSnapshot(new_at, cell_id)
        return True

    def reset_checkpoint(self, subject, new_at, cell_id):
        self._enter("reset_checkpoint")
        current = self.checkpoints.get(subject)
        if current is None or current.last_checkpoint_at > new_at:
            return False
        self.checkpoints[subject] = CheckpointSnapshot(new_at, cell_id)
        return True

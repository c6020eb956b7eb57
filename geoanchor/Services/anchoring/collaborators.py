# geoanchor/Services/anchoring/collaborators.py
"""
Anchoring Collaborators
=======================
The external reads and writes the decision core depends on.

AnchorCollaborators names the operations; SqlAnchorCollaborators implements
them over the repositories for one request-scoped Session. Every method may
raise: the core calls them through outcomes.attempt() and degrades.

Operations:
- previous_location(subject) → (lat, lon) or None for a first-time wallet
- matched_rules(subject, lat, lon) → ordered MatchedRule list
- returned_event_ids(subject, event_ids, since) → ids already surfaced
- record_returned(subject, events, returned_at)
- read_checkpoint(subject) → CheckpointSnapshot or None (NoCheckpointYet)
- claim_checkpoint(subject, expected_last_at, new_at, cell_id) → won?
- reset_checkpoint(subject, new_at, cell_id) → applied?
"""

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set, Tuple
from sqlalchemy.orm import Session

from geoanchor.Repositories import anchor_checkpoint as checkpoint_repo
from geoanchor.Repositories import execution_rule as rule_repo
from geoanchor.Repositories import returned_event as returned_repo
from geoanchor.Repositories import wallet_location as location_repo
from geoanchor.Schemas.anchor_event import MatchedRule
from geoanchor.Services.anchoring.anchor_types import CheckpointSnapshot, Subject


class AnchorCollaborators:
    """
    Interface of the external collaborators. Subclasses implement every method.
    """

    def previous_location(self, subject: Subject) -> Optional[Tuple[float, float]]:
        raise NotImplementedError

    def matched_rules(self, subject: Subject, latitude: float, longitude: float) -> List[MatchedRule]:
        raise NotImplementedError

    def returned_event_ids(self, subject: Subject, event_ids: Sequence[str], since: datetime) -> Set[str]:
        raise NotImplementedError

    def record_returned(self, subject: Subject, events: Sequence[Tuple[str, str]], returned_at: datetime) -> None:
        raise NotImplementedError

    def read_checkpoint(self, subject: Subject) -> Optional[CheckpointSnapshot]:
        raise NotImplementedError

    def claim_checkpoint(
        self,
        subject: Subject,
        expected_last_at: Optional[datetime],
        new_at: datetime,
        cell_id: str
    ) -> bool:
        raise NotImplementedError

    def reset_checkpoint(self, subject: Subject, new_at: datetime, cell_id: str) -> bool:
        raise NotImplementedError


class SqlAnchorCollaborators(AnchorCollaborators):
    """
    Collaborators backed by the relational store.

    A failed statement leaves the session in a failed transaction, so every
    call rolls back before re-raising; the next collaborator call (and the
    primary location write) can still use the same session.
    """

    def __init__(self, db: Session):
        self.db = db

    def _run(self, fn, *args):
        try:
            return fn(self.db, *args)
        except Exception:
            self.db.rollback()
            raise

    def previous_location(self, subject: Subject) -> Optional[Tuple[float, float]]:
        row = self._run(location_repo.get_last_location_by_wallet, subject.public_key, subject.blockchain)
        if row is None:
            return None
        return (row.latitude, row.longitude)

    def matched_rules(self, subject: Subject, latitude: float, longitude: float) -> List[MatchedRule]:
        rows = self._run(rule_repo.get_matched_rules, subject.public_key, latitude, longitude)
        return [MatchedRule(**row) for row in rows]

    def returned_event_ids(self, subject: Subject, event_ids: Iterable[str], since: datetime) -> Set[str]:
        return self._run(
            returned_repo.get_returned_event_ids,
            subject.public_key, subject.blockchain, list(event_ids), since
        )

    def record_returned(self, subject: Subject, events: Sequence[Tuple[str, str]], returned_at: datetime) -> None:
        self._run(
            returned_repo.record_returned_events,
            subject.public_key, subject.blockchain, list(events), returned_at
        )

    def read_checkpoint(self, subject: Subject) -> Optional[CheckpointSnapshot]:
        row = self._run(checkpoint_repo.get_checkpoint, subject.public_key, subject.blockchain)
        if row is None:
            return None
        return CheckpointSnapshot(
            last_checkpoint_at=row.last_checkpoint_at,
            last_checkpoint_cell_id=row.last_checkpoint_cell_id
        )

    def claim_checkpoint(
        self,
        subject: Subject,
        expected_last_at: Optional[datetime],
        new_at: datetime,
        cell_id: str
    ) -> bool:
        return self._run(
            checkpoint_repo.claim_checkpoint,
            subject.public_key, subject.blockchain, expected_last_at, new_at, cell_id
        )

    def reset_checkpoint(self, subject: Subject, new_at: datetime, cell_id: str) -> bool:
        return self._run(
            checkpoint_repo.reset_checkpoint,
            subject.public_key, subject.blockchain, new_at, cell_id
        )

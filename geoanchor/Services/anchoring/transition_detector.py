# geoanchor/Services/anchoring/transition_detector.py
"""
Transition Detector
===================
Emits CELL_TRANSITION when a wallet's cell differs from the cell of its
previous location.

Decision matrix:
    previous location | previous cell vs current | result
    ------------------+--------------------------+----------------------
    none / unknown    |            -             | no event
    present           | same cell                | no event
    present           | different cell           | 1 event, prev_cell_id

A failed previous-location lookup counts as "unknown": the update never
fails and no transition is emitted.
"""

from dataclasses import dataclass
from typing import List, Optional

from geoanchor.Schemas.anchor_event import AnchorEventType, CellTransitionEvent, ZERO_COMMITMENT
from geoanchor.Services.anchoring.anchor_types import LocationUpdate
from geoanchor.Services.anchoring.cell_quantizer import calculate_cell_id
from geoanchor.Services.anchoring.collaborators import AnchorCollaborators
from geoanchor.Services.anchoring.event_identifier import generate_event_id
from geoanchor.Services.anchoring.outcomes import Available, attempt


@dataclass(frozen=True)
class TransitionResult:
    prev_cell_id: Optional[str]
    events: List[CellTransitionEvent]


def build_cell_transition_event(update: LocationUpdate, cell_id: str, prev_cell_id: str) -> CellTransitionEvent:
    return CellTransitionEvent(
        event_id=generate_event_id(
            update.subject.public_key,
            AnchorEventType.CELL_TRANSITION,
            update.occurred_at,
            cell_id
        ),
        occurred_at=update.occurred_at,
        cell_id=cell_id,
        prev_cell_id=prev_cell_id,
        commitment=update.commitment or ZERO_COMMITMENT,
    )


def detect_cell_transition(
    collaborators: AnchorCollaborators,
    update: LocationUpdate,
    cell_id: str,
    precision: float
) -> TransitionResult:
    """
    Compare the current cell against the cell of the previous location.

    The previous coordinates are quantized with the same precision as the
    current ones, so a precision change never fabricates a transition
    between two identical points.
    """
    outcome = attempt("previous_location", collaborators.previous_location, update.subject)

    if not isinstance(outcome, Available) or outcome.value is None:
        return TransitionResult(prev_cell_id=None, events=[])

    prev_lat, prev_lon = outcome.value
    prev_cell_id = calculate_cell_id(prev_lat, prev_lon, precision)

    if prev_cell_id == cell_id:
        return TransitionResult(prev_cell_id=prev_cell_id, events=[])

    print(f"[TRANSITION] {update.subject}: {prev_cell_id} → {cell_id}")
    return TransitionResult(
        prev_cell_id=prev_cell_id,
        events=[build_cell_transition_event(update, cell_id, prev_cell_id)]
    )

# geoanchor/Services/anchoring/assembler.py
"""
Anchor Event Assembler
======================
Runs the whole decision for one location update.

Flow:
1. Quantize the update into its cell (no external dependency)
2. Transition candidates (previous location vs current cell)
3. Rule candidates (externally matched rules, input order)
4. Checkpoint: emitted only when steps 2-3 produced nothing
5. Ledger filter over [transitions..., rules..., checkpoint?]
6. next_suggested_anchor_after_secs when nothing survived and state exists

Collaborator failures never propagate out of process_location_update(): in
the worst case the decision is the cell_id with no events.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from geoanchor.Core import log_ws
from geoanchor.Schemas.anchor_event import AnchorEvent, AnchorResponse, MatchedRule
from geoanchor.Services.anchoring.anchor_types import AnchorPolicy, CheckpointSnapshot, LocationUpdate
from geoanchor.Services.anchoring.cell_quantizer import calculate_cell_id
from geoanchor.Services.anchoring.checkpoint_scheduler import schedule_checkpoint
from geoanchor.Services.anchoring.collaborators import AnchorCollaborators
from geoanchor.Services.anchoring.dedup_ledger import filter_already_returned
from geoanchor.Services.anchoring.rule_event_generator import fetch_matched_rules, generate_rule_events
from geoanchor.Services.anchoring.transition_detector import detect_cell_transition


@dataclass(frozen=True)
class AnchorDecision:
    cell_id: str
    matched_rules: List[MatchedRule] = field(default_factory=list)
    anchor_events: List[AnchorEvent] = field(default_factory=list)
    next_suggested_anchor_after_secs: Optional[int] = None
    prev_cell_id: Optional[str] = None

    def to_response(self) -> AnchorResponse:
        return AnchorResponse(
            cell_id=self.cell_id,
            matched_rules=list(self.matched_rules),
            anchor_events=list(self.anchor_events),
            next_suggested_anchor_after_secs=self.next_suggested_anchor_after_secs,
        )


def suggest_next_anchor_after(
    state: Optional[CheckpointSnapshot],
    update: LocationUpdate,
    interval_s: float
) -> Optional[int]:
    """
    Seconds until the next checkpoint is due: max(0, ceil(interval - elapsed)).
    """
    if state is None:
        return None
    elapsed = state.elapsed_seconds(update.occurred_at)
    return max(0, math.ceil(interval_s - elapsed))


def process_location_update(
    collaborators: AnchorCollaborators,
    update: LocationUpdate,
    policy: Optional[AnchorPolicy] = None
) -> AnchorDecision:
    """
    Decide which anchor events a location update surfaces.

    Args:
        collaborators: External reads/writes (request-scoped)
        update: Validated update; update.occurred_at is "now" for the
                checkpoint clock and the ledger
        policy: Anchoring parameters (defaults to process settings)

    Raises:
        InvalidLocationError: coordinates out of range (caller bug only)
    """
    policy = policy or AnchorPolicy.from_settings()

    # ========================================
    # STEP 1: CURRENT CELL
    # ========================================
    cell_id = calculate_cell_id(update.latitude, update.longitude, policy.grid_precision)

    # ========================================
    # STEP 2: CELL TRANSITION
    # ========================================
    transition = detect_cell_transition(collaborators, update, cell_id, policy.grid_precision)

    # ========================================
    # STEP 3: RULE TRIGGERS
    # ========================================
    matched_rules = fetch_matched_rules(collaborators, update)
    rule_events = generate_rule_events(update, cell_id, matched_rules)

    candidates: List[AnchorEvent] = [*transition.events, *rule_events]

    # ========================================
    # STEP 4: CHECKPOINT CADENCE
    # ========================================
    checkpoint = schedule_checkpoint(
        collaborators,
        update,
        cell_id,
        has_priority_events=bool(candidates),
        interval_s=policy.checkpoint_interval_s
    )
    if checkpoint.event is not None:
        candidates.append(checkpoint.event)

    # ========================================
    # STEP 5: LEDGER FILTER
    # ========================================
    anchor_events = filter_already_returned(collaborators, update, candidates, policy.dedup_window_s)

    # ========================================
    # STEP 6: NEXT ANCHOR HINT
    # ========================================
    next_hint = None
    if not anchor_events:
        next_hint = suggest_next_anchor_after(checkpoint.state, update, policy.checkpoint_interval_s)

    if anchor_events:
        summary = ", ".join(event.event_type.value for event in anchor_events)
        log_ws.log_from_thread(
            f"[ANCHOR] {update.subject} @ {cell_id}: {len(anchor_events)} event(s) surfaced ({summary})",
            msg_type="log"
        )
    else:
        print(f"[ANCHOR] {update.subject} @ {cell_id}: no new events (next hint: {next_hint})")

    return AnchorDecision(
        cell_id=cell_id,
        matched_rules=matched_rules,
        anchor_events=anchor_events,
        next_suggested_anchor_after_secs=next_hint,
        prev_cell_id=transition.prev_cell_id,
    )

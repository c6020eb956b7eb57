# geoanchor/Services/anchoring/checkpoint_scheduler.py
"""
Checkpoint Scheduler
====================
Heartbeat cadence per wallet: proves liveness when nothing else happened.

States per wallet:
- NoCheckpointYet: no checkpoint row
- HasCheckpoint(last_checkpoint_at, last_cell)

Decision (evaluated once per update, after transition/rule candidates):
1. Transition or rule candidates exist?
   → no checkpoint; a HasCheckpoint clock is reset to (now, cell). The other
     event already anchors the wallet, so a checkpoint right after it would
     be spam. A wallet in NoCheckpointYet stays there.
2. NoCheckpointYet?
   → emit CHECKPOINT (initial anchor of a new wallet)
3. HasCheckpoint and elapsed >= interval?
   → emit CHECKPOINT
4. Otherwise nothing.

Emission is claimed with a compare-and-set on last_checkpoint_at: when two
retries of the same update race, only the winner emits.

If the state cannot be read or written, checkpoint logic is skipped for the
update: no event, no error.
"""

from dataclasses import dataclass
from typing import Optional

from geoanchor.Schemas.anchor_event import AnchorEventType, CheckpointEvent, ZERO_COMMITMENT
from geoanchor.Services.anchoring.anchor_types import CheckpointSnapshot, LocationUpdate
from geoanchor.Services.anchoring.collaborators import AnchorCollaborators
from geoanchor.Services.anchoring.event_identifier import generate_event_id
from geoanchor.Services.anchoring.outcomes import Available, attempt


@dataclass(frozen=True)
class CheckpointDecision:
    """
    Attributes:
        event: CHECKPOINT to emit, if any
        state: checkpoint state after this update (None = NoCheckpointYet or unknown)
        skipped: True when storage was unavailable and the logic did not run
    """
    event: Optional[CheckpointEvent]
    state: Optional[CheckpointSnapshot]
    skipped: bool = False


def build_checkpoint_event(update: LocationUpdate, cell_id: str) -> CheckpointEvent:
    return CheckpointEvent(
        event_id=generate_event_id(
            update.subject.public_key,
            AnchorEventType.CHECKPOINT,
            update.occurred_at,
            cell_id
        ),
        occurred_at=update.occurred_at,
        cell_id=cell_id,
        commitment=update.commitment or ZERO_COMMITMENT,
    )


def schedule_checkpoint(
    collaborators: AnchorCollaborators,
    update: LocationUpdate,
    cell_id: str,
    has_priority_events: bool,
    interval_s: float
) -> CheckpointDecision:
    subject = update.subject
    now = update.occurred_at

    read = attempt("checkpoint_state_read", collaborators.read_checkpoint, subject)
    if not isinstance(read, Available):
        return CheckpointDecision(event=None, state=None, skipped=True)

    state: Optional[CheckpointSnapshot] = read.value

    # ========================================
    # CASE 1: HIGHER-PRIORITY EVENTS → RESET CLOCK
    # ========================================
    if has_priority_events:
        if state is None:
            # The row is created by the first CHECKPOINT; the next quiet update emits it
            return CheckpointDecision(event=None, state=None)
        reset = attempt("checkpoint_state_write", collaborators.reset_checkpoint, subject, now, cell_id)
        if isinstance(reset, Available) and reset.value:
            state = CheckpointSnapshot(last_checkpoint_at=now, last_checkpoint_cell_id=cell_id)
        return CheckpointDecision(event=None, state=state)

    # ========================================
    # CASE 2/3: CHECKPOINT DUE?
    # ========================================
    if state is not None:
        elapsed = state.elapsed_seconds(now)
        if elapsed < interval_s:
            return CheckpointDecision(event=None, state=state)
        print(f"[CHECKPOINT] {subject}: {elapsed:.0f}s since last checkpoint (interval {interval_s}s)")
        expected_last_at = state.last_checkpoint_at
    else:
        print(f"[CHECKPOINT] {subject}: first checkpoint")
        expected_last_at = None

    claim = attempt(
        "checkpoint_state_write",
        collaborators.claim_checkpoint,
        subject, expected_last_at, now, cell_id
    )
    if not isinstance(claim, Available):
        return CheckpointDecision(event=None, state=state, skipped=True)

    if not claim.value:
        # A concurrent request moved the state first; it owns this checkpoint.
        print(f"[CHECKPOINT] {subject}: checkpoint already claimed by a concurrent update")
        reread = attempt("checkpoint_state_read", collaborators.read_checkpoint, subject)
        current = reread.value if isinstance(reread, Available) else state
        return CheckpointDecision(event=None, state=current)

    return CheckpointDecision(
        event=build_checkpoint_event(update, cell_id),
        state=CheckpointSnapshot(last_checkpoint_at=now, last_checkpoint_cell_id=cell_id)
    )

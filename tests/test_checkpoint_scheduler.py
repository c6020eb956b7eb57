"""
Checkpoint cadence: first checkpoint, interval, suppression, concurrency.
"""

from datetime import timedelta

from geoanchor.Schemas.anchor_event import AnchorEventType
from geoanchor.Services.anchoring.anchor_types import CheckpointSnapshot
from geoanchor.Services.anchoring.checkpoint_scheduler import schedule_checkpoint

from .fixtures import SUBJECT, T0, FakeCollaborators, make_update


CELL = "34.051000_-118.244000"
INTERVAL = 300


def _schedule(collaborators, update, has_priority_events=False):
    return schedule_checkpoint(collaborators, update, CELL, has_priority_events, INTERVAL)


class TestCheckpointCadence:

    def test_first_update_emits_initial_checkpoint(self):
        collaborators = FakeCollaborators()

        decision = _schedule(collaborators, make_update())

        assert decision.event is not None
        assert decision.event.event_type == AnchorEventType.CHECKPOINT
        assert decision.event.cell_id == CELL
        assert decision.state == CheckpointSnapshot(T0, CELL)
        assert collaborators.checkpoints[SUBJECT] == CheckpointSnapshot(T0, CELL)

    def test_just_before_interval_no_checkpoint(self):
        collaborators = FakeCollaborators()
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(T0, CELL)

        decision = _schedule(collaborators, make_update(occurred_at=T0 + timedelta(seconds=299)))

        assert decision.event is None
        assert decision.state == CheckpointSnapshot(T0, CELL)
        assert collaborators.checkpoints[SUBJECT].last_checkpoint_at == T0

    def test_at_interval_emits_checkpoint(self):
        collaborators = FakeCollaborators()
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(T0, CELL)
        now = T0 + timedelta(seconds=300)

        decision = _schedule(collaborators, make_update(occurred_at=now))

        assert decision.event is not None
        assert decision.event.occurred_at == now
        assert collaborators.checkpoints[SUBJECT].last_checkpoint_at == now


class TestPriorityEvents:

    def test_priority_events_suppress_and_reset_clock(self):
        collaborators = FakeCollaborators()
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(T0, "1.000000_1.000000")
        now = T0 + timedelta(seconds=600)

        decision = _schedule(collaborators, make_update(occurred_at=now), has_priority_events=True)

        assert decision.event is None
        assert decision.state == CheckpointSnapshot(now, CELL)
        assert collaborators.checkpoints[SUBJECT] == CheckpointSnapshot(now, CELL)

    def test_priority_events_on_new_wallet_keep_no_checkpoint_yet(self):
        collaborators = FakeCollaborators()

        decision = _schedule(collaborators, make_update(), has_priority_events=True)

        assert decision.event is None
        assert decision.state is None
        assert SUBJECT not in collaborators.checkpoints
        assert "reset_checkpoint" not in collaborators.calls

    def test_quiet_update_after_priority_events_emits_initial_checkpoint(self):
        collaborators = FakeCollaborators()
        _schedule(collaborators, make_update(), has_priority_events=True)
        later = T0 + timedelta(seconds=60)

        decision = _schedule(collaborators, make_update(occurred_at=later))

        assert decision.event is not None
        assert decision.event.occurred_at == later
        assert collaborators.checkpoints[SUBJECT] == CheckpointSnapshot(later, CELL)

    def test_out_of_order_reset_keeps_newer_state(self):
        collaborators = FakeCollaborators()
        newer = T0 + timedelta(seconds=120)
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(newer, CELL)

        decision = _schedule(collaborators, make_update(occurred_at=T0), has_priority_events=True)

        assert decision.event is None
        assert decision.state == CheckpointSnapshot(newer, CELL)
        assert collaborators.checkpoints[SUBJECT].last_checkpoint_at == newer


class RacingCollaborators(FakeCollaborators):
    """A concurrent request claims the checkpoint between read and claim."""

    def __init__(self, winner_at):
        super().__init__()
        self.winner_at = winner_at

    def claim_checkpoint(self, subject, expected_last_at, new_at, cell_id):
        self.checkpoints[subject] = CheckpointSnapshot(self.winner_at, cell_id)
        return super().claim_checkpoint(subject, expected_last_at, new_at, cell_id)


class TestConcurrency:

    def test_lost_race_emits_nothing(self):
        collaborators = RacingCollaborators(winner_at=T0)

        decision = _schedule(collaborators, make_update())

        assert decision.event is None
        assert decision.state == CheckpointSnapshot(T0, CELL)

    def test_only_one_of_two_retries_emits(self):
        collaborators = FakeCollaborators()
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(T0, CELL)
        now = T0 + timedelta(seconds=400)
        update = make_update(occurred_at=now)

        first = _schedule(collaborators, update)
        second = _schedule(collaborators, update)

        assert first.event is not None
        assert second.event is None


class TestStorageFailures:

    def test_unreadable_state_skips_checkpoint(self):
        collaborators = FakeCollaborators()
        collaborators.failing.add("read_checkpoint")

        decision = _schedule(collaborators, make_update())

        assert decision.event is None
        assert decision.state is None
        assert decision.skipped

    def test_failed_claim_skips_checkpoint(self):
        collaborators = FakeCollaborators()
        collaborators.failing.add("claim_checkpoint")

        decision = _schedule(collaborators, make_update())

        assert decision.event is None
        assert decision.skipped

    def test_failed_reset_is_not_fatal(self):
        collaborators = FakeCollaborators()
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(T0, CELL)
        collaborators.failing.add("reset_checkpoint")

        decision = _schedule(collaborators, make_update(occurred_at=T0 + timedelta(seconds=30)),
                             has_priority_events=True)

        assert decision.event is None
        assert decision.state == CheckpointSnapshot(T0, CELL)

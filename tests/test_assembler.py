"""
End-to-end decisions of process_location_update over in-memory collaborators.
"""

from datetime import timedelta

from geoanchor.Schemas.anchor_event import AnchorEventType, MatchedRule
from geoanchor.Services.anchoring import CheckpointSnapshot, process_location_update

from .fixtures import DEFAULT_POLICY, SUBJECT, T0, FakeCollaborators, make_update


def _process(collaborators, update):
    decision = process_location_update(collaborators, update, DEFAULT_POLICY)
    collaborators.store_location(update)
    return decision


def _types(decision):
    return [event.event_type for event in decision.anchor_events]


class TestNewWallet:

    def test_first_update_then_quiet_update(self):
        collaborators = FakeCollaborators()

        first = _process(collaborators, make_update(occurred_at=T0))

        assert first.cell_id == "34.051000_-118.244000"
        assert _types(first) == [AnchorEventType.CHECKPOINT]
        assert first.next_suggested_anchor_after_secs is None

        second = _process(collaborators, make_update(occurred_at=T0 + timedelta(seconds=60)))

        assert second.cell_id == "34.051000_-118.244000"
        assert second.anchor_events == []
        assert second.next_suggested_anchor_after_secs == 240

    def test_checkpoint_after_interval(self):
        collaborators = FakeCollaborators()
        _process(collaborators, make_update(occurred_at=T0))

        later = _process(collaborators, make_update(occurred_at=T0 + timedelta(seconds=301)))

        assert _types(later) == [AnchorEventType.CHECKPOINT]
        assert later.next_suggested_anchor_after_secs is None

    def test_rule_on_first_update_defers_initial_checkpoint(self):
        collaborators = FakeCollaborators(rules=[MatchedRule(rule_id="1")])

        first = _process(collaborators, make_update(occurred_at=T0))

        assert _types(first) == [AnchorEventType.RULE_TRIGGERED]
        assert SUBJECT not in collaborators.checkpoints

        collaborators.rules = []
        quiet = _process(collaborators, make_update(occurred_at=T0 + timedelta(seconds=60)))

        assert _types(quiet) == [AnchorEventType.CHECKPOINT]
        assert collaborators.checkpoints[SUBJECT] == CheckpointSnapshot(T0 + timedelta(seconds=60),
                                                                        "34.051000_-118.244000")


class TestEventOrdering:

    def test_transition_then_rules_and_no_checkpoint(self):
        rules = [MatchedRule(rule_id="9", rule_name="Harbor"), MatchedRule(rule_id="4")]
        collaborators = FakeCollaborators(rules=rules)
        collaborators.locations[SUBJECT] = (34.0405, -118.2437)
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(T0 - timedelta(hours=1), "34.040000_-118.244000")

        decision = _process(collaborators, make_update(occurred_at=T0))

        assert _types(decision) == [
            AnchorEventType.CELL_TRANSITION,
            AnchorEventType.RULE_TRIGGERED,
            AnchorEventType.RULE_TRIGGERED,
        ]
        assert [event.rule_id for event in decision.anchor_events[1:]] == ["9", "4"]
        assert decision.matched_rules == rules
        assert decision.prev_cell_id == "34.040000_-118.244000"
        assert collaborators.checkpoints[SUBJECT] == CheckpointSnapshot(T0, "34.051000_-118.244000")

    def test_checkpoint_not_due_right_after_transition(self):
        collaborators = FakeCollaborators()
        collaborators.locations[SUBJECT] = (34.0405, -118.2437)
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(T0 - timedelta(seconds=30), "34.040000_-118.244000")

        moved = _process(collaborators, make_update(occurred_at=T0))
        assert _types(moved) == [AnchorEventType.CELL_TRANSITION]

        quiet = _process(collaborators, make_update(occurred_at=T0 + timedelta(seconds=100)))
        assert quiet.anchor_events == []
        assert quiet.next_suggested_anchor_after_secs == 200


class TestIdempotency:

    def test_redelivery_within_minute_is_filtered(self):
        collaborators = FakeCollaborators(rules=[MatchedRule(rule_id="1")])
        collaborators.checkpoints[SUBJECT] = CheckpointSnapshot(T0 - timedelta(minutes=1), "34.051000_-118.244000")
        update = make_update(occurred_at=T0)

        first = process_location_update(collaborators, update, DEFAULT_POLICY)
        second = process_location_update(collaborators, make_update(occurred_at=T0 + timedelta(seconds=5)),
                                          DEFAULT_POLICY)

        assert _types(first) == [AnchorEventType.RULE_TRIGGERED]
        assert second.anchor_events == []
        assert second.next_suggested_anchor_after_secs == 300

    def test_same_rule_next_minute_is_surfaced_again(self):
        collaborators = FakeCollaborators(rules=[MatchedRule(rule_id="1")])

        first = _process(collaborators, make_update(occurred_at=T0))
        later = _process(collaborators, make_update(occurred_at=T0 + timedelta(minutes=1)))

        assert len(later.anchor_events) == 1
        assert later.anchor_events[0].event_id != first.anchor_events[0].event_id


class TestDegradation:

    def test_all_collaborators_down_still_reports_cell(self):
        collaborators = FakeCollaborators(rules=[MatchedRule(rule_id="1")])
        collaborators.failing.update({
            "previous_location", "matched_rules", "returned_event_ids",
            "record_returned", "read_checkpoint", "claim_checkpoint", "reset_checkpoint",
        })

        decision = process_location_update(collaborators, make_update(), DEFAULT_POLICY)

        assert decision.cell_id == "34.051000_-118.244000"
        assert decision.anchor_events == []
        assert decision.matched_rules == []
        assert decision.next_suggested_anchor_after_secs is None

    def test_ledger_down_does_not_block_checkpoint(self):
        collaborators = FakeCollaborators()
        collaborators.failing.update({"returned_event_ids", "record_returned"})

        decision = process_location_update(collaborators, make_update(), DEFAULT_POLICY)

        assert _types(decision) == [AnchorEventType.CHECKPOINT]


class TestResponse:

    def test_to_response_serializes_events(self):
        collaborators = FakeCollaborators(rules=[MatchedRule(rule_id="1", rule_name="Gate", rule_type="location")])

        body = process_location_update(collaborators, make_update(), DEFAULT_POLICY).to_response().model_dump(mode="json")

        assert body["cell_id"] == "34.051000_-118.244000"
        assert body["matched_rules"] == [{"rule_id": "1", "rule_name": "Gate", "rule_type": "location"}]
        event = body["anchor_events"][0]
        assert event["event_type"] == "RULE_TRIGGERED"
        assert event["rule_id"] == "1"
        assert event["occurred_at"] == "2025-01-01T10:00:30Z"
        assert event["zk_proof"] is None
        assert "prev_cell_id" not in event
        assert body["next_suggested_anchor_after_secs"] is None

"""
RULE_TRIGGERED candidates from externally matched rules.
"""

from datetime import timedelta

from geoanchor.Schemas.anchor_event import AnchorEventType, MatchedRule
from geoanchor.Services.anchoring.event_identifier import generate_event_id
from geoanchor.Services.anchoring.rule_event_generator import fetch_matched_rules, generate_rule_events

from .fixtures import ACCOUNT, T0, FakeCollaborators, make_update


CELL = "34.051000_-118.244000"


class TestGenerateRuleEvents:

    def test_one_event_per_rule_in_input_order(self):
        rules = [MatchedRule(rule_id="7"), MatchedRule(rule_id="3"), MatchedRule(rule_id="11")]

        events = generate_rule_events(make_update(), CELL, rules)

        assert [event.rule_id for event in events] == ["7", "3", "11"]
        assert all(event.event_type == AnchorEventType.RULE_TRIGGERED for event in events)
        assert events[0].event_id == generate_event_id(ACCOUNT, "RULE_TRIGGERED", T0, CELL, "7")

    def test_no_rules_no_events(self):
        assert generate_rule_events(make_update(), CELL, []) == []

    def test_duplicates_are_not_removed(self):
        rules = [MatchedRule(rule_id="7"), MatchedRule(rule_id="7")]

        events = generate_rule_events(make_update(), CELL, rules)

        assert len(events) == 2
        assert events[0].event_id == events[1].event_id

    def test_same_rule_next_minute_is_distinct(self):
        rules = [MatchedRule(rule_id="7")]

        first = generate_rule_events(make_update(occurred_at=T0), CELL, rules)
        later = generate_rule_events(make_update(occurred_at=T0 + timedelta(minutes=1)), CELL, rules)

        assert first[0].event_id != later[0].event_id


class TestFetchMatchedRules:

    def test_returns_collaborator_rules(self):
        rules = [MatchedRule(rule_id="1", rule_name="Downtown", rule_type="geofence")]

        assert fetch_matched_rules(FakeCollaborators(rules=rules), make_update()) == rules

    def test_unavailable_rule_service_means_no_rules(self):
        collaborators = FakeCollaborators(rules=[MatchedRule(rule_id="1")])
        collaborators.failing.add("matched_rules")

        assert fetch_matched_rules(collaborators, make_update()) == []

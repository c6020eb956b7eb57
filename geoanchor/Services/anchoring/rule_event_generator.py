# geoanchor/Services/anchoring/rule_event_generator.py
"""
Rule Event Generator
====================
One RULE_TRIGGERED candidate per externally matched rule, in input order.

Duplicates are not removed here. The same rule matched again inside the
same minute hashes to the same event_id (naturally idempotent); matched
again a minute later it is a new occurrence, and suppressing re-delivery is
the ledger's job.
"""

from typing import List, Sequence

from geoanchor.Schemas.anchor_event import AnchorEventType, MatchedRule, RuleTriggeredEvent, ZERO_COMMITMENT
from geoanchor.Services.anchoring.anchor_types import LocationUpdate
from geoanchor.Services.anchoring.collaborators import AnchorCollaborators
from geoanchor.Services.anchoring.event_identifier import generate_event_id
from geoanchor.Services.anchoring.outcomes import Available, attempt


def fetch_matched_rules(collaborators: AnchorCollaborators, update: LocationUpdate) -> List[MatchedRule]:
    """
    Ask the spatial query service for rules containing the update.

    Degrades to an empty list when the service is unavailable.
    """
    outcome = attempt(
        "matched_rules",
        collaborators.matched_rules,
        update.subject,
        update.latitude,
        update.longitude
    )
    if isinstance(outcome, Available):
        return list(outcome.value or [])
    return []


def generate_rule_events(
    update: LocationUpdate,
    cell_id: str,
    matched_rules: Sequence[MatchedRule]
) -> List[RuleTriggeredEvent]:
    events = []
    for rule in matched_rules:
        rule_id = str(rule.rule_id)
        events.append(RuleTriggeredEvent(
            event_id=generate_event_id(
                update.subject.public_key,
                AnchorEventType.RULE_TRIGGERED,
                update.occurred_at,
                cell_id,
                rule_id
            ),
            occurred_at=update.occurred_at,
            cell_id=cell_id,
            rule_id=rule_id,
            commitment=update.commitment or ZERO_COMMITMENT,
        ))
    return events

# geoanchor/Services/anchoring/dedup_ledger.py
"""
Dedup Ledger
============
Drops candidates whose event_id was already surfaced for the wallet within
the trailing window, and records the ones that survive.

Uniqueness per minute bucket comes from the event_id hash itself; the
ledger only suppresses cross-request re-delivery to downstream anchoring.
Lookup and record are separate statements: a race between them at worst
re-delivers one event, which consumers tolerate.

Ledger unavailable → no filtering (fail open).
"""

from datetime import timedelta
from typing import List, Sequence

from geoanchor.Schemas.anchor_event import AnchorEvent
from geoanchor.Services.anchoring.anchor_types import LocationUpdate
from geoanchor.Services.anchoring.collaborators import AnchorCollaborators
from geoanchor.Services.anchoring.outcomes import Available, attempt


def filter_already_returned(
    collaborators: AnchorCollaborators,
    update: LocationUpdate,
    candidates: Sequence[AnchorEvent],
    window_s: float
) -> List[AnchorEvent]:
    """
    Keep candidates not surfaced inside the window, in their original order.

    A candidate repeated within the same batch (e.g. a rule listed twice)
    is kept once.
    """
    if not candidates:
        return []

    subject = update.subject
    now = update.occurred_at
    since = now - timedelta(seconds=window_s)

    lookup = attempt(
        "ledger_lookup",
        collaborators.returned_event_ids,
        subject,
        [event.event_id for event in candidates],
        since
    )

    if isinstance(lookup, Available):
        seen = set(lookup.value or ())
        kept = []
        for event in candidates:
            if event.event_id in seen:
                continue
            seen.add(event.event_id)
            kept.append(event)

        dropped = len(candidates) - len(kept)
        if dropped:
            print(f"[LEDGER] {subject}: {dropped} already-returned event(s) suppressed")
    else:
        kept = list(candidates)

    if kept:
        attempt(
            "ledger_record",
            collaborators.record_returned,
            subject,
            list(dict.fromkeys((event.event_id, event.event_type.value) for event in kept)),
            now
        )

    return kept

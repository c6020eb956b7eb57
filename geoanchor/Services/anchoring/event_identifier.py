# geoanchor/Services/anchoring/event_identifier.py
"""
Event Identifier
================
Deterministic identifiers for anchor event occurrences.

    event_id = sha256(account + event_type + time_bucket + cell_id + rule_id)

- No separators between the parts; rule_id is "" except for RULE_TRIGGERED.
- time_bucket is occurred_at truncated to the start of its minute, rendered
  as UTC "YYYY-MM-DDTHH:MM:00.000Z". It only feeds the hash; events report
  occurred_at at full precision.

Two updates for the same account, event type, cell and rule within the same
minute therefore collapse to one event_id, which absorbs client retries and
clock jitter without an explicit idempotency key.
"""

import hashlib
from datetime import datetime
from typing import Optional, Union

from geoanchor.Schemas.anchor_event import AnchorEventType
from geoanchor.Services.anchoring.anchor_types import ensure_utc


def minute_bucket(occurred_at: datetime) -> datetime:
    """Start of the UTC minute containing occurred_at."""
    return ensure_utc(occurred_at).replace(second=0, microsecond=0)


def format_bucket(bucket: datetime) -> str:
    return bucket.strftime('%Y-%m-%dT%H:%M:%S.000Z')


def generate_event_id(
    account: str,
    event_type: Union[AnchorEventType, str],
    occurred_at: datetime,
    cell_id: str,
    rule_id: Optional[str] = None
) -> str:
    """
    Derive the lowercase hex SHA-256 identifier of an event occurrence.

    Args:
        account: Wallet public key (chain is not part of the hash)
        event_type: CELL_TRANSITION, RULE_TRIGGERED or CHECKPOINT
        occurred_at: Instant of the triggering update (any precision)
        cell_id: Current cell of the wallet
        rule_id: Matched rule, RULE_TRIGGERED only

    Examples:
        >>> a = generate_event_id("GABC", "CHECKPOINT", datetime(2025, 1, 1, 12, 0, 5), "1.000000_2.000000")
        >>> b = generate_event_id("GABC", "CHECKPOINT", datetime(2025, 1, 1, 12, 0, 59), "1.000000_2.000000")
        >>> a == b
        True
    """
    event_type_str = event_type.value if isinstance(event_type, AnchorEventType) else str(event_type)
    payload = "".join((
        account,
        event_type_str,
        format_bucket(minute_bucket(occurred_at)),
        cell_id,
        rule_id or "",
    ))
    return hashlib.sha256(payload.encode('utf-8')).hexdigest()

# geoanchor/Repositories/returned_event.py
"""
Returned-Events Repository - ledger of event ids already surfaced.

The dedup window is applied at read time (returned_at >= since); rows older
than the window are dead weight that purge_returned_events_before() removes.
"""

from sqlalchemy.orm import Session
from sqlalchemy import delete, func
from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple

from geoanchor.DB.upsert import dialect_insert
from geoanchor.Models.returned_event import ReturnedEvent


def get_returned_event_ids(
    DB: Session,
    public_key: str,
    blockchain: str,
    event_ids: Iterable[str],
    since: datetime
) -> Set[str]:
    """
    Subset of event_ids surfaced for this wallet at or after `since`.
    """
    ids = list(event_ids)
    if not ids:
        return set()

    rows = (
        DB.query(ReturnedEvent.event_id)
        .filter(
            ReturnedEvent.public_key == public_key,
            ReturnedEvent.blockchain == blockchain,
            ReturnedEvent.event_id.in_(ids),
            ReturnedEvent.returned_at >= since
        )
        .all()
    )
    return {row[0] for row in rows}


def record_returned_events(
    DB: Session,
    public_key: str,
    blockchain: str,
    events: List[Tuple[str, str]],
    returned_at: datetime
) -> int:
    """
    Upsert (event_id, event_type) pairs for a wallet, refreshing returned_at.

    Returns:
        int: number of pairs written
    """
    if not events:
        return 0

    insert = dialect_insert(DB)
    stmt = insert(ReturnedEvent).values([
        {
            'public_key': public_key,
            'blockchain': blockchain,
            'event_id': event_id,
            'event_type': event_type,
            'returned_at': returned_at,
        }
        for event_id, event_type in events
    ])
    stmt = stmt.on_conflict_do_update(
        index_elements=['public_key', 'blockchain', 'event_id'],
        set_={'returned_at': stmt.excluded.returned_at}
    )

    DB.execute(stmt)
    DB.commit()
    return len(events)


def get_latest_returned_at(DB: Session, public_key: str, blockchain: str) -> Optional[datetime]:
    """Most recent returned_at recorded for a wallet, None when the ledger is empty."""
    return (
        DB.query(func.max(ReturnedEvent.returned_at))
        .filter(
            ReturnedEvent.public_key == public_key,
            ReturnedEvent.blockchain == blockchain
        )
        .scalar()
    )


def get_recent_returned_events(
    DB: Session,
    public_key: str,
    blockchain: str,
    since: datetime,
    limit: int = 100
) -> List[ReturnedEvent]:
    """
    Ledger entries of a wallet inside the window, most recent first.
    """
    return (
        DB.query(ReturnedEvent)
        .filter(
            ReturnedEvent.public_key == public_key,
            ReturnedEvent.blockchain == blockchain,
            ReturnedEvent.returned_at >= since
        )
        .order_by(ReturnedEvent.returned_at.desc(), ReturnedEvent.event_id.asc())
        .limit(limit)
        .all()
    )


def purge_returned_events_before(DB: Session, cutoff: datetime) -> int:
    """Delete ledger rows older than cutoff; decisions are unaffected."""
    result = DB.execute(
        delete(ReturnedEvent)
        .where(ReturnedEvent.returned_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    DB.commit()
    print(f"[REPO] Purged {result.rowcount} expired ledger row(s)")
    return result.rowcount

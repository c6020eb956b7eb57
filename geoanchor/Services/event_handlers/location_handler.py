# geoanchor/Services/event_handlers/location_handler.py
"""
Location Handler
================
Processes one wallet location update end to end.

Order of operations:
1. Build the core LocationUpdate (client timestamp, else server time)
2. Anchor decision against the stored state (previous location, checkpoint,
   ledger), which must run BEFORE the new row exists
3. Primary write: append the raw location row
4. Return the decision as an AnchorResponse

Error philosophy:
- Anchoring collaborators degrade inside the core (never raise here)
- Duplicate location (same wallet + recorded_at) is a client retry → silent
- Any other primary write failure → rollback + LocationWriteError
"""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from geoanchor.Repositories.wallet_location import create_wallet_location
from geoanchor.Schemas.anchor_event import AnchorResponse
from geoanchor.Schemas.location import LocationUpdate_create
from geoanchor.Services.anchoring import (
    AnchorPolicy,
    LocationUpdate,
    SqlAnchorCollaborators,
    Subject,
    process_location_update,
)
from geoanchor.Core import log_ws


class LocationWriteError(RuntimeError):
    """The raw location row could not be stored."""


def to_location_update(payload: LocationUpdate_create, received_at: Optional[datetime] = None) -> LocationUpdate:
    occurred_at = payload.timestamp or received_at or datetime.now(timezone.utc)
    return LocationUpdate(
        subject=Subject(public_key=payload.public_key, blockchain=payload.blockchain),
        latitude=payload.latitude,
        longitude=payload.longitude,
        occurred_at=occurred_at,
        commitment=payload.commitment,
    )


def _is_duplicate_location(error: IntegrityError) -> bool:
    error_str = str(error).lower()
    return (
        "unique_wallet_recorded_at" in error_str
        or "duplicate key" in error_str
        or "unique constraint failed" in error_str
    )


def handle_location_update(
    db: Session,
    payload: LocationUpdate_create,
    policy: Optional[AnchorPolicy] = None
) -> AnchorResponse:
    """
    Decide the anchor events for a location update and persist the location.

    Args:
        db: Active SQLAlchemy session (request scoped)
        payload: Validated request body
        policy: Anchoring parameters (defaults to process settings)

    Returns:
        AnchorResponse: cell_id, matched_rules, anchor_events, next hint

    Raises:
        LocationWriteError: the location row could not be stored
    """
    update = to_location_update(payload)
    subject = update.subject

    # ========================================
    # STEP 1: ANCHOR DECISION
    # ========================================
    decision = process_location_update(SqlAnchorCollaborators(db), update, policy)

    # ========================================
    # STEP 2: PRIMARY WRITE
    # ========================================
    try:
        new_row = create_wallet_location(
            db,
            public_key=subject.public_key,
            blockchain=subject.blockchain,
            latitude=update.latitude,
            longitude=update.longitude,
            recorded_at=update.occurred_at
        )
        print(f"[LOCATION] {subject}: location stored (ID: {new_row.id}, cell {decision.cell_id})")

    except IntegrityError as ie:
        db.rollback()
        if _is_duplicate_location(ie):
            print(f"[LOCATION] {subject}: duplicate location (wallet + recorded_at) - skipped")
        else:
            log_ws.log_from_thread(f"[LOCATION] DB error for {subject}: {ie}", msg_type="error")
            raise LocationWriteError(str(ie)) from ie

    except Exception as e:
        db.rollback()
        log_ws.log_from_thread(f"[LOCATION] Unexpected error storing location for {subject}: {e}", msg_type="error")
        raise LocationWriteError(str(e)) from e

    return decision.to_response()

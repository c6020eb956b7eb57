# geoanchor/Controller/Routes/anchors.py
from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List
from geoanchor.Controller.deps import get_DB
from geoanchor.Core.config import settings
from geoanchor.Repositories import anchor_checkpoint as checkpoint_repo
from geoanchor.Repositories import returned_event as returned_repo
from geoanchor.Schemas import anchor_event as anchor_schema

router = APIRouter()


@router.get("/checkpoint", response_model=anchor_schema.CheckpointState_get)
def get_checkpoint_state(
    public_key: str = Query(..., description="Wallet public key (required)"),
    blockchain: str = Query("Stellar", description="Chain namespace"),
    DB: Session = Depends(get_DB)
):
    """
    Current checkpoint state of a wallet.

    Example:
        GET /anchors/checkpoint?public_key=GABC...&blockchain=Stellar

    Raises:
        404: The wallet has no checkpoint yet
    """
    row = checkpoint_repo.get_checkpoint(DB, public_key, blockchain)

    if row is None:
        raise HTTPException(
            status_code=404,
            detail=f"No checkpoint found for wallet '{blockchain}:{public_key}'"
        )

    return row


@router.get("/returned", response_model=List[anchor_schema.ReturnedEvent_get])
def get_returned_events(
    public_key: str = Query(..., description="Wallet public key (required)"),
    blockchain: str = Query("Stellar", description="Chain namespace"),
    limit: int = Query(100, ge=1, le=1000, description="Max entries"),
    DB: Session = Depends(get_DB)
):
    """
    Event ids already surfaced for a wallet inside the dedup window,
    most recent first. These ids are suppressed if generated again.

    The window ends at the wallet's latest ledger entry, not at server
    time: the ledger runs on observation time (client timestamps).

    Example:
        GET /anchors/returned?public_key=GABC...&limit=20
    """
    latest = returned_repo.get_latest_returned_at(DB, public_key, blockchain)
    if latest is None:
        return []

    since = latest - timedelta(seconds=settings.ANCHOR_DEDUP_WINDOW_S)
    return returned_repo.get_recent_returned_events(DB, public_key, blockchain, since, limit=limit)

# geoanchor/Controller/Routes/locations.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from geoanchor.Controller.deps import get_DB
from geoanchor.Schemas import location as location_schema
from geoanchor.Schemas.anchor_event import AnchorResponse
from geoanchor.Services.event_handlers import LocationWriteError, handle_location_update

router = APIRouter()


@router.post("/update", response_model=AnchorResponse)
def post_location_update(
    payload: location_schema.LocationUpdate_create,
    DB: Session = Depends(get_DB)
):
    """
    Report a wallet location and get the anchor events it produced.

    Body:
        {
            "public_key": "GABC...",
            "blockchain": "Stellar",
            "latitude": 34.0512,
            "longitude": -118.2437,
            "timestamp": "2025-01-01T10:00:30Z",   (optional)
            "commitment": "0x..."                  (optional)
        }

    Returns:
        {
            "cell_id": "34.051000_-118.244000",
            "matched_rules": [...],
            "anchor_events": [...],
            "next_suggested_anchor_after_secs": null
        }

    Raises:
        422: Invalid coordinates / commitment
        500: The location could not be stored
    """
    try:
        return handle_location_update(DB, payload)
    except LocationWriteError as e:
        raise HTTPException(status_code=500, detail=f"Could not store location: {e}")

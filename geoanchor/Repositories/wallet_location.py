# geoanchor/Repositories/wallet_location.py

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional

from geoanchor.Models.wallet_location import WalletLocation


# ==========================================================
# ✅ Last known location of a wallet
# ==========================================================
def get_last_location_by_wallet(DB: Session, public_key: str, blockchain: str) -> Optional[WalletLocation]:
    """
    Retrieve the most recent location row of a wallet.

    Returns None for a wallet that never reported (not an error).
    """
    return (
        DB.query(WalletLocation)
        .filter(
            WalletLocation.public_key == public_key,
            WalletLocation.blockchain == blockchain
        )
        .order_by(WalletLocation.id.desc())
        .first()
    )


"""
create_wallet_location to append a new location row
"""
def create_wallet_location(
    DB: Session,
    public_key: str,
    blockchain: str,
    latitude: float,
    longitude: float,
    recorded_at: datetime
) -> WalletLocation:
    new_location = WalletLocation(
        public_key=public_key,
        blockchain=blockchain,
        latitude=latitude,
        longitude=longitude,
        recorded_at=recorded_at
    )
    DB.add(new_location)
    DB.commit()
    DB.refresh(new_location)
    return new_location


def count_locations_by_wallet(DB: Session, public_key: str, blockchain: str) -> int:
    return (
        DB.query(WalletLocation)
        .filter(
            WalletLocation.public_key == public_key,
            WalletLocation.blockchain == blockchain
        )
        .count()
    )

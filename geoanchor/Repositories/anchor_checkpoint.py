# geoanchor/Repositories/anchor_checkpoint.py
"""
Checkpoint Repository - heartbeat state per wallet.

All writes are single atomic statements so that concurrent requests for the
same wallet are serialized by the database:
- claim_checkpoint(): compare-and-set, only one caller wins a given checkpoint
- reset_checkpoint(): conditional update that only ever moves last_checkpoint_at forward

Usage:
    from geoanchor.Repositories.anchor_checkpoint import get_checkpoint, claim_checkpoint

    row = get_checkpoint(db, "GABC...", "Stellar")
    won = claim_checkpoint(db, "GABC...", "Stellar", row.last_checkpoint_at, now, cell_id)
"""

from sqlalchemy.orm import Session
from sqlalchemy import delete, func, update
from datetime import datetime
from typing import Optional

from geoanchor.DB.upsert import dialect_insert
from geoanchor.Models.anchor_checkpoint import AnchorCheckpoint


# ==========================================================
# READ OPERATIONS
# ==========================================================

def get_checkpoint(DB: Session, public_key: str, blockchain: str) -> Optional[AnchorCheckpoint]:
    """
    Current checkpoint state of a wallet, None when it never had one.
    """
    return (
        DB.query(AnchorCheckpoint)
        .filter(
            AnchorCheckpoint.public_key == public_key,
            AnchorCheckpoint.blockchain == blockchain
        )
        .first()
    )


# ==========================================================
# WRITE OPERATIONS (atomic)
# ==========================================================

def claim_checkpoint(
    DB: Session,
    public_key: str,
    blockchain: str,
    expected_last_at: Optional[datetime],
    new_at: datetime,
    cell_id: str
) -> bool:
    """
    Compare-and-set the checkpoint of a wallet.

    Args:
        expected_last_at: last_checkpoint_at the caller based its decision on,
                          None when the caller saw no row
        new_at: instant of the checkpoint being claimed
        cell_id: cell of the wallet at new_at

    Returns:
        bool: True if this caller moved the state, False if another request
              changed it first (the caller must not emit its CHECKPOINT)
    """
    if expected_last_at is None:
        insert = dialect_insert(DB)
        stmt = (
            insert(AnchorCheckpoint)
            .values(
                public_key=public_key,
                blockchain=blockchain,
                last_checkpoint_at=new_at,
                last_checkpoint_cell_id=cell_id
            )
            .on_conflict_do_nothing(index_elements=['public_key', 'blockchain'])
        )
    else:
        stmt = (
            update(AnchorCheckpoint)
            .where(
                AnchorCheckpoint.public_key == public_key,
                AnchorCheckpoint.blockchain == blockchain,
                AnchorCheckpoint.last_checkpoint_at == expected_last_at
            )
            .values(
                last_checkpoint_at=new_at,
                last_checkpoint_cell_id=cell_id,
                updated_at=func.now()
            )
            .execution_options(synchronize_session=False)
        )

    result = DB.execute(stmt)
    DB.commit()

    claimed = result.rowcount == 1
    print(f"[REPO] claim_checkpoint({blockchain}:{public_key}) → {'claimed' if claimed else 'lost race'}")
    return claimed


def reset_checkpoint(
    DB: Session,
    public_key: str,
    blockchain: str,
    new_at: datetime,
    cell_id: str
) -> bool:
    """
    Move the checkpoint clock to new_at without emitting a checkpoint.

    Only an existing row is touched: a wallet without one stays in
    NoCheckpointYet. An older new_at than the stored value (out-of-order
    update) leaves the row untouched.

    Returns:
        bool: True if the row now holds (new_at, cell_id)
    """
    stmt = (
        update(AnchorCheckpoint)
        .where(
            AnchorCheckpoint.public_key == public_key,
            AnchorCheckpoint.blockchain == blockchain,
            AnchorCheckpoint.last_checkpoint_at <= new_at
        )
        .values(
            last_checkpoint_at=new_at,
            last_checkpoint_cell_id=cell_id,
            updated_at=func.now()
        )
        .execution_options(synchronize_session=False)
    )

    result = DB.execute(stmt)
    DB.commit()
    return result.rowcount == 1


# ==========================================================
# HOUSEKEEPING
# ==========================================================

def purge_checkpoints_before(DB: Session, cutoff: datetime) -> int:
    """
    Delete checkpoint rows not touched since cutoff (dormant wallets).

    A purged wallet simply starts over in NoCheckpointYet.
    """
    result = DB.execute(
        delete(AnchorCheckpoint)
        .where(AnchorCheckpoint.last_checkpoint_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    DB.commit()
    print(f"[REPO] Purged {result.rowcount} dormant checkpoint row(s)")
    return result.rowcount

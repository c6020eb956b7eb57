"""
geoanchor/DB/base.py
==========================
SQLAlchemy Model Registry
==========================

Imports every model so Base.metadata is complete before Alembic
autogeneration or create_all() runs.

Models Registered:
-----------------
- WalletLocation: raw wallet location updates (primary write path)
- Geofence: PostGIS boundaries referenced by geofence rules
- ExecutionRule: rule definitions evaluated by the spatial query
- AnchorCheckpoint: per-wallet heartbeat state (owned by the anchoring core)
- ReturnedEvent: ledger of surfaced event ids (owned by the anchoring core)

Important:
----------
Any new model class MUST be imported here.
"""

from geoanchor.DB.base_class import Base

# ============================================================
# MODEL IMPORTS - DO NOT REMOVE
# ============================================================
from geoanchor.Models.wallet_location import WalletLocation
from geoanchor.Models.geofence import Geofence
from geoanchor.Models.execution_rule import ExecutionRule
from geoanchor.Models.anchor_checkpoint import AnchorCheckpoint
from geoanchor.Models.returned_event import ReturnedEvent

# geoanchor/Services/event_handlers/__init__.py
"""
Event Handlers Module
=====================
Request-level handlers that wire the anchoring core to the database.

Components:
- location_handler: anchor decision + primary location write
"""

from .location_handler import (
    LocationWriteError,
    handle_location_update,
    to_location_update
)

__all__ = [
    'LocationWriteError',
    'handle_location_update',
    'to_location_update',
]

# geoanchor/Services/anchoring/__init__.py
"""
Anchoring Core
==============
Event-boundary anchoring: turns frequent, possibly duplicated wallet location
updates into a small, deduplicated stream of deterministically identified
events for on-chain anchoring.

Components:
- cell_quantizer: coordinate → grid cell id
- event_identifier: minute-bucketed SHA-256 event ids
- transition_detector: CELL_TRANSITION on cell change
- rule_event_generator: RULE_TRIGGERED per externally matched rule
- checkpoint_scheduler: CHECKPOINT heartbeat with compare-and-set claims
- dedup_ledger: suppresses ids already surfaced within the window
- assembler: composes the above for one update

Architecture:
- Pure decision logic over data supplied by collaborators
- Collaborator failures degrade (outcomes.attempt), never propagate
- State lives in the database, never in process memory
"""

from .anchor_types import AnchorPolicy, CheckpointSnapshot, LocationUpdate, Subject, ensure_utc
from .outcomes import Available, Unavailable, attempt
from .cell_quantizer import InvalidLocationError, calculate_cell_id
from .event_identifier import generate_event_id, minute_bucket, format_bucket
from .collaborators import AnchorCollaborators, SqlAnchorCollaborators
from .transition_detector import TransitionResult, detect_cell_transition
from .rule_event_generator import fetch_matched_rules, generate_rule_events
from .checkpoint_scheduler import CheckpointDecision, schedule_checkpoint
from .dedup_ledger import filter_already_returned
from .assembler import AnchorDecision, process_location_update, suggest_next_anchor_after

__all__ = [
    # Value types
    'AnchorPolicy',
    'CheckpointSnapshot',
    'LocationUpdate',
    'Subject',
    'ensure_utc',

    # Outcomes
    'Available',
    'Unavailable',
    'attempt',

    # Cell quantizer
    'InvalidLocationError',
    'calculate_cell_id',

    # Event identifier
    'generate_event_id',
    'minute_bucket',
    'format_bucket',

    # Collaborators
    'AnchorCollaborators',
    'SqlAnchorCollaborators',

    # Components
    'TransitionResult',
    'detect_cell_transition',
    'fetch_matched_rules',
    'generate_rule_events',
    'CheckpointDecision',
    'schedule_checkpoint',
    'filter_already_returned',

    # Assembler
    'AnchorDecision',
    'process_location_update',
    'suggest_next_anchor_after',
]

"""create_anchoring_tables

Revision ID: 3f9c2d1a7b64
Revises:
Create Date: 2025-06-02 09:14:51

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
import geoalchemy2

# revision identifiers, used by Alembic.
revision: str = '3f9c2d1a7b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the anchoring schema.

    - wallet_locations: raw location rows (previous location lookups)
    - geofences / execution_rules: rule areas for the matched-rules query
    - anchor_checkpoints: per-wallet heartbeat state
    - anchor_returned_events: dedup ledger
    """
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis;")

    op.create_table(
        'wallet_locations',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('public_key', sa.String(length=255), nullable=False),
        sa.Column('blockchain', sa.String(length=50), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.CheckConstraint('latitude >= -90 AND latitude <= 90', name='check_wallet_lat_range'),
        sa.CheckConstraint('longitude >= -180 AND longitude <= 180', name='check_wallet_lon_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_wallet_locations_subject_id', 'wallet_locations',
                    ['public_key', 'blockchain', sa.text('id DESC')], unique=False)
    op.create_index('unique_wallet_recorded_at', 'wallet_locations',
                    ['public_key', 'blockchain', 'recorded_at'], unique=True)

    op.create_table(
        'geofences',
        sa.Column('id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('geometry', geoalchemy2.types.Geography(geometry_type='POLYGON', srid=4326,
                                                          spatial_index=False), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_geofences_geometry
        ON geofences
        USING GIST (geometry);
    """)

    op.create_table(
        'execution_rules',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('rule_name', sa.String(length=200), nullable=False),
        sa.Column('rule_type', sa.String(length=20), nullable=False),
        sa.Column('center_latitude', sa.Float(), nullable=True),
        sa.Column('center_longitude', sa.Float(), nullable=True),
        sa.Column('radius_meters', sa.Float(), nullable=True),
        sa.Column('geofence_id', sa.String(length=100), nullable=True),
        sa.Column('target_wallet_public_key', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("rule_type IN ('location', 'proximity', 'geofence')", name='check_rule_type'),
        sa.CheckConstraint(
            "rule_type = 'geofence' OR (center_latitude IS NOT NULL "
            "AND center_longitude IS NOT NULL AND radius_meters IS NOT NULL)",
            name='check_rule_circle'
        ),
        sa.CheckConstraint("rule_type <> 'geofence' OR geofence_id IS NOT NULL", name='check_rule_geofence'),
        sa.ForeignKeyConstraint(['geofence_id'], ['geofences.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_execution_rules_active_created', 'execution_rules',
                    ['is_active', 'created_at'], unique=False)

    op.create_table(
        'anchor_checkpoints',
        sa.Column('public_key', sa.String(length=255), nullable=False),
        sa.Column('blockchain', sa.String(length=50), nullable=False),
        sa.Column('last_checkpoint_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_checkpoint_cell_id', sa.String(length=64), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('public_key', 'blockchain')
    )

    op.create_table(
        'anchor_returned_events',
        sa.Column('public_key', sa.String(length=255), nullable=False),
        sa.Column('blockchain', sa.String(length=50), nullable=False),
        sa.Column('event_id', sa.String(length=64), nullable=False),
        sa.Column('event_type', sa.String(length=20), nullable=False),
        sa.Column('returned_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "event_type IN ('CELL_TRANSITION', 'RULE_TRIGGERED', 'CHECKPOINT')",
            name='check_returned_event_type'
        ),
        sa.PrimaryKeyConstraint('public_key', 'blockchain', 'event_id')
    )
    op.create_index('idx_returned_events_subject_time', 'anchor_returned_events',
                    ['public_key', 'blockchain', 'returned_at'], unique=False)
    op.create_index('idx_returned_events_returned_at', 'anchor_returned_events',
                    ['returned_at'], unique=False)

    print("[MIGRATION] ✅ Anchoring tables created")


def downgrade() -> None:
    op.drop_index('idx_returned_events_returned_at', table_name='anchor_returned_events')
    op.drop_index('idx_returned_events_subject_time', table_name='anchor_returned_events')
    op.drop_table('anchor_returned_events')
    op.drop_table('anchor_checkpoints')
    op.drop_index('idx_execution_rules_active_created', table_name='execution_rules')
    op.drop_table('execution_rules')
    op.execute("DROP INDEX IF EXISTS idx_geofences_geometry;")
    op.drop_table('geofences')
    op.drop_index('unique_wallet_recorded_at', table_name='wallet_locations')
    op.drop_index('idx_wallet_locations_subject_id', table_name='wallet_locations')
    op.drop_table('wallet_locations')

    print("[MIGRATION] ❌ Anchoring tables dropped")

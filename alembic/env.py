# alembic/env.py
from logging.config import fileConfig
from sqlalchemy import engine_from_config
from sqlalchemy import pool
from alembic import context
import os
from dotenv import load_dotenv
from geoanchor.DB.base_class import Base
from geoanchor.Models.wallet_location import WalletLocation
from geoanchor.Models.geofence import Geofence
from geoanchor.Models.execution_rule import ExecutionRule
from geoanchor.Models.anchor_checkpoint import AnchorCheckpoint
from geoanchor.Models.returned_event import ReturnedEvent
import geoalchemy2  # registers the Geography type for autogenerate

_ = WalletLocation.__table__
_ = Geofence.__table__
_ = ExecutionRule.__table__
_ = AnchorCheckpoint.__table__
_ = ReturnedEvent.__table__

load_dotenv()

config = context.config

database_url = os.getenv("DATABASE_URL")
if not database_url:
    raise ValueError("DATABASE_URL is not set in the environment variables")

config.set_main_option("sqlalchemy.url", database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


# PostGIS / Tiger geocoder system tables must never be dropped by autogenerate
POSTGIS_TABLES = {
    'spatial_ref_sys', 'geometry_columns', 'geography_columns',
    'raster_columns', 'raster_overviews', 'topology', 'layer',
    'loader_lookuptables', 'loader_platform', 'loader_variables',
    'addr', 'addrfeat', 'bg', 'county', 'county_lookup', 'countysub_lookup',
    'cousub', 'direction_lookup', 'edges', 'faces', 'featnames',
    'geocode_settings', 'geocode_settings_default', 'pagc_gaz', 'pagc_lex',
    'pagc_rules', 'place', 'place_lookup', 'secondary_unit_lookup',
    'state', 'state_lookup', 'street_type_lookup', 'tabblock', 'tabblock20',
    'tract', 'zcta5', 'zip_lookup', 'zip_lookup_all', 'zip_lookup_base',
    'zip_state', 'zip_state_loc'
}


def include_object(object, name, type_, reflected, compare_to):
    if type_ == "table" and name.lower() in POSTGIS_TABLES:
        return False
    return True


target_metadata = Base.metadata


def process_revision_directives(context, revision, directives):
    """
    Adds the GeoAlchemy2 imports to autogenerated revisions that create
    spatial columns, and drops the GIST indexes GeoAlchemy2 already creates
    together with the column.
    """
    from alembic.operations import ops

    if not directives:
        return

    script = directives[0]
    if script.upgrade_ops is None:
        return

    uses_geoalchemy = False

    for op in script.upgrade_ops.ops:
        if isinstance(op, ops.CreateTableOp):
            for column in op.columns:
                type_str = str(type(getattr(column, 'type', None)))
                if 'Geography' in type_str or 'Geometry' in type_str:
                    uses_geoalchemy = True
                    print(f"🔧 [PROCESS] Spatial column '{getattr(column, 'name', '?')}' in '{op.table_name}'")

        if isinstance(op, ops.ModifyTableOps):
            sub_ops = getattr(op, 'ops', [])
            spatial = [
                j for j, sub_op in enumerate(sub_ops)
                if isinstance(sub_op, ops.CreateIndexOp)
                and getattr(sub_op, 'kw', {}).get('postgresql_using') == 'gist'
                and any('geometry' in str(col).lower() for col in (getattr(sub_op, 'columns', None) or []))
            ]
            for j in reversed(spatial):
                removed = sub_ops.pop(j)
                print(f"✅ [PROCESS] Removed duplicated spatial index: {getattr(removed, 'index_name', '?')}")

    if uses_geoalchemy:
        if script.imports is None:
            script.imports = set()
        script.imports.add("import geoalchemy2")
        script.imports.add("from geoalchemy2 import Geography, Geometry")


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_object=include_object,
        compare_type=True,
        render_as_batch=False,
        process_revision_directives=process_revision_directives,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
            compare_type=True,
            render_as_batch=False,
            process_revision_directives=process_revision_directives,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

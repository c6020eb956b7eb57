# geoanchor/Repositories/execution_rule.py

from sqlalchemy.orm import Session
from sqlalchemy import text
from typing import List, Dict


# ==========================================================
# Spatial rule matching (PostGIS)
# ==========================================================
# Geography has no ST_Contains, so geofence rules use ST_Intersects.
# Circle rules (location / proximity) use ST_DWithin in meters.
# Ordering by creation keeps the matched list stable across requests,
# which keeps RULE_TRIGGERED events in a deterministic order.
_MATCHED_RULES_QUERY = text("""
    SELECT r.id, r.rule_name, r.rule_type
    FROM execution_rules r
    LEFT JOIN geofences g
        ON g.id = r.geofence_id AND g.is_active = TRUE
    WHERE r.is_active = TRUE
      AND (r.target_wallet_public_key IS NULL OR r.target_wallet_public_key = :public_key)
      AND (
        (r.rule_type IN ('location', 'proximity') AND ST_DWithin(
            CAST(ST_SetSRID(ST_MakePoint(:lon, :lat), 4326) AS geography),
            CAST(ST_SetSRID(ST_MakePoint(r.center_longitude, r.center_latitude), 4326) AS geography),
            r.radius_meters
        ))
        OR
        (r.rule_type = 'geofence' AND g.id IS NOT NULL AND ST_Intersects(
            g.geometry,
            CAST(ST_SetSRID(ST_MakePoint(:lon, :lat), 4326) AS geography)
        ))
      )
    ORDER BY r.created_at ASC, r.id ASC
""")


def get_matched_rules(DB: Session, public_key: str, latitude: float, longitude: float) -> List[Dict[str, str]]:
    """
    Active rules whose area contains (latitude, longitude) for this wallet.

    Returns:
        list of {'rule_id', 'rule_name', 'rule_type'}, oldest rule first.
        Rule ids are stringified.

    Raises:
        Any database error (missing PostGIS, connection loss). The anchoring
        core treats that as "no rules" for the update.
    """
    rows = DB.execute(
        _MATCHED_RULES_QUERY,
        {'public_key': public_key, 'lat': latitude, 'lon': longitude}
    ).all()

    return [
        {
            'rule_id': str(row.id),
            'rule_name': row.rule_name if isinstance(row.rule_name, str) else str(row.rule_name),
            'rule_type': row.rule_type if isinstance(row.rule_type, str) else str(row.rule_type),
        }
        for row in rows
    ]

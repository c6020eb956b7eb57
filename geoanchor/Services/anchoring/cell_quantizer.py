# geoanchor/Services/anchoring/cell_quantizer.py
"""
Cell Quantizer
==============
Maps a coordinate to the identifier of the grid cell containing it.

Each axis is floored to a multiple of the precision and formatted with six
decimals; the two values are joined with an underscore:

    (34.0512, -118.2437), precision 0.001  →  "34.051000_-118.244000"

Floor, not round: boundaries resolve toward the lower bucket on both sides
of the equator and the prime meridian, so -118.2437 lands in -118.244, not
-118.243. Two points a few meters apart can straddle a boundary and get
different cells; this is a grid, not a clustering algorithm.
"""

import math


class InvalidLocationError(ValueError):
    """Coordinates or precision outside their valid range (caller bug)."""


def quantize(value: float, precision: float) -> float:
    return math.floor(value / precision) * precision


def calculate_cell_id(latitude: float, longitude: float, precision: float = 0.001) -> str:
    """
    Compute the cell identifier of (latitude, longitude).

    Args:
        latitude: Decimal degrees in [-90, 90]
        longitude: Decimal degrees in [-180, 180]
        precision: Cell size in degrees, > 0

    Raises:
        InvalidLocationError: out-of-range input. Callers validate before
        reaching the core, so this signals a programming error.
    """
    if not (precision > 0):
        raise InvalidLocationError(f"Grid precision must be positive, got {precision!r}")
    if not (-90 <= latitude <= 90):
        raise InvalidLocationError(f"Latitude out of range: {latitude!r}")
    if not (-180 <= longitude <= 180):
        raise InvalidLocationError(f"Longitude out of range: {longitude!r}")

    lat_cell = quantize(latitude, precision)
    lon_cell = quantize(longitude, precision)

    return f"{lat_cell:.6f}_{lon_cell:.6f}"

"""Geospatial utilities (no external dependencies)."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from poi_proximity.models import Coordinate


EARTH_RADIUS_M = 6_371_000.0  # mean Earth radius in meters


class InvalidCoordinate(ValueError):
    """Latitude/longitude is NaN, infinite or outside the WGS84 range."""


def is_valid_coordinate(lat: float, lon: float) -> bool:
    """Return True if (lat, lon) is a finite WGS84 pair in decimal degrees."""

    for v in (lat, lon):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return False
    lat_f = float(lat)
    lon_f = float(lon)
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return False
    return -90.0 <= lat_f <= 90.0 and -180.0 <= lon_f <= 180.0


def validate_coordinate(lat: float, lon: float) -> None:
    """Raise InvalidCoordinate unless (lat, lon) is a valid pair."""

    if not is_valid_coordinate(lat, lon):
        raise InvalidCoordinate(f"无效坐标：lat={lat!r}, lon={lon!r}")


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute Haversine distance in meters between two lat/lon points.

    Args:
        lat1: Latitude 1 in degrees.
        lon1: Longitude 1 in degrees.
        lat2: Latitude 2 in degrees.
        lon2: Longitude 2 in degrees.

    Returns:
        Distance in meters.

    Raises:
        InvalidCoordinate: If any input is NaN or out of range.
    """

    validate_coordinate(lat1, lon1)
    validate_coordinate(lat2, lon2)

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    # rounding can push a slightly past 1.0 near antipodes
    a = min(1.0, max(0.0, a))
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters between two coordinates."""

    return haversine_m(a.latitude, a.longitude, b.latitude, b.longitude)


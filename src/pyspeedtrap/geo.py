"""Geodesic helpers.

Spherical-earth formulas are accurate to well under a metre at the
distances the detector cares about (a few kilometres).
"""

from __future__ import annotations

from math import asin, atan2, cos, degrees, radians, sin, sqrt

from pyspeedtrap._constants import EARTH_RADIUS_M
from pyspeedtrap.models._base import GeoPoint


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in meters."""
    lat1 = radians(a.latitude)
    lat2 = radians(b.latitude)
    dlat = lat2 - lat1
    dlon = radians(b.longitude - a.longitude)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair above 1 for antipodal points.
    return 2 * EARTH_RADIUS_M * asin(sqrt(min(1.0, h)))


def normalize_heading(value: float) -> float:
    """Wrap a heading into ``[0, 360)``."""
    wrapped = value % 360.0
    # -1e-15 % 360 == 360.0 in floating point
    return 0.0 if wrapped == 360.0 else wrapped


def bearing(origin: GeoPoint, target: GeoPoint) -> float:
    """Initial compass bearing from *origin* toward *target*, in ``[0, 360)``."""
    lat1 = radians(origin.latitude)
    lat2 = radians(target.latitude)
    dlon = radians(target.longitude - origin.longitude)

    x = sin(dlon) * cos(lat2)
    y = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)
    return normalize_heading(degrees(atan2(x, y)))


def angular_difference(a: float, b: float) -> float:
    """Smallest absolute difference between two headings, in ``[0, 180]``."""
    diff = abs(a - b) % 360.0
    return 360.0 - diff if diff > 180.0 else diff

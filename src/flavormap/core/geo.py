from __future__ import annotations

import math
from dataclasses import dataclass
from math import asin, atan2, cos, degrees, radians, sin, sqrt
from typing import Any

"""
Geospatial helpers.

Spherical-earth math for the map view: distance, bearing, forward projection
and angle differences. We keep this layer dependency-free so the filtering
pipeline and the API can share it without pulling in a GIS stack.

None of these functions validate coordinate ranges. Non-finite inputs give NaN
instead of raising (Python's `math.sin(inf)` would raise otherwise); callers
drop unlocatable markers first.
"""

EARTH_RADIUS_KM = 6371.0
NAN = float("nan")


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float


def _all_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in kilometers (haversine)."""
    if not _all_finite(a.lat, a.lon, b.lat, b.lon):
        return NAN
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = lat2 - lat1
    dlon = radians(b.lon - a.lon)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding pushes h slightly outside [0, 1] near antipodes, and latitudes
    # beyond +-90 can make the cosine product negative.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * asin(sqrt(h))


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two points."""
    return distance_km(a, b) * 1000.0


def normalize_bearing(deg: float) -> float:
    """Fold an angle in degrees into [0, 360)."""
    deg = float(deg)
    if not math.isfinite(deg):
        return NAN
    out = math.fmod(deg, 360.0)
    if out < 0:
        out += 360.0
    # A tiny negative remainder lands exactly on 360.0 after the shift.
    if out >= 360.0:
        out = 0.0
    return out


def initial_bearing_deg(a: GeoPoint, b: GeoPoint) -> float:
    """Compass bearing from `a` to `b` (0 = north, clockwise), in [0, 360).

    The bearing is unspecified when the points coincide; the current result is
    whatever `atan2(0, 0)` gives after normalization and must not be relied on.
    """
    if not _all_finite(a.lat, a.lon, b.lat, b.lon):
        return NAN
    phi1 = radians(a.lat)
    phi2 = radians(b.lat)
    dlon = radians(b.lon - a.lon)

    y = sin(dlon) * cos(phi2)
    x = cos(phi1) * sin(phi2) - sin(phi1) * cos(phi2) * cos(dlon)
    return normalize_bearing(degrees(atan2(y, x)))


def destination_point(origin: GeoPoint, bearing_deg: float, distance_km: float) -> GeoPoint:
    """Project `origin` along `bearing_deg` for `distance_km` on a sphere.

    The returned longitude is wrapped into [-180, 180).
    """
    if not _all_finite(origin.lat, origin.lon, float(bearing_deg), float(distance_km)):
        return GeoPoint(lat=NAN, lon=NAN)
    brng = radians(bearing_deg)
    d = distance_km / EARTH_RADIUS_KM
    phi1 = radians(origin.lat)
    lam1 = radians(origin.lon)

    sin_phi2 = sin(phi1) * cos(d) + cos(phi1) * sin(d) * cos(brng)
    phi2 = asin(max(-1.0, min(1.0, sin_phi2)))
    lam2 = lam1 + atan2(sin(brng) * sin(d) * cos(phi1), cos(d) - sin(phi1) * sin(phi2))

    lon = math.fmod(degrees(lam2) + 540.0, 360.0)
    if lon < 0:
        lon += 360.0
    return GeoPoint(lat=degrees(phi2), lon=lon - 180.0)


def angle_diff(a: float, b: float) -> float:
    """Smallest absolute difference between two bearings, in [0, 180]."""
    a = float(a)
    b = float(b)
    if not _all_finite(a, b):
        return NAN
    d = math.fmod(abs(a - b), 360.0)
    if d > 180.0:
        d = 360.0 - d
    return d


def as_float(value: Any) -> float | None:
    """Best-effort numeric coercion; returns None for missing or unparseable values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_finite_point(lat: Any, lon: Any) -> bool:
    """True when both coordinates are present, numeric and finite."""
    lat_f = as_float(lat)
    lon_f = as_float(lon)
    if lat_f is None or lon_f is None:
        return False
    return math.isfinite(lat_f) and math.isfinite(lon_f)

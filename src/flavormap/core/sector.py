"""
Viewing-cone (circular sector) geometry.

The map can show a "what's in front of me" cone from the user's location. We
approximate the sector as a closed polygon ring for rendering, and test marker
membership directly against distance + bearing (no polygon needed).
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Any

from flavormap.core.geo import (
    GeoPoint,
    angle_diff,
    destination_point,
    distance_km,
    initial_bearing_deg,
    normalize_bearing,
)

DEFAULT_STEPS = 32


def _validate_sector_args(bearing_deg: float, width_deg: float, radius_km: float, steps: int) -> None:
    if not math.isfinite(float(bearing_deg)):
        raise ValueError("bearing_deg must be a finite number")
    if not (0 < float(width_deg) <= 360):
        raise ValueError("width_deg must be in (0, 360]")
    if not (math.isfinite(float(radius_km)) and float(radius_km) > 0):
        raise ValueError("radius_km must be > 0")
    if int(steps) < 1:
        raise ValueError("steps must be >= 1")


def build_sector(
    center: GeoPoint,
    bearing_deg: float,
    width_deg: float,
    radius_km: float,
    steps: int = DEFAULT_STEPS,
) -> list[GeoPoint]:
    """Return a closed ring `[center, arc..., center]` approximating a sector.

    The arc has `steps + 1` points from `bearing - width/2` to `bearing + width/2`,
    sweeping clockwise (the short way for any width below 360). A 360-degree width
    gives a full circle whose first and last arc points coincide.

    Raises:
        ValueError: If width, radius or steps are out of range.
    """
    _validate_sector_args(bearing_deg, width_deg, radius_km, steps)
    steps = int(steps)
    start = normalize_bearing(float(bearing_deg) - float(width_deg) / 2)
    sweep = float(width_deg)

    ring = [center]
    for i in range(steps + 1):
        angle = normalize_bearing(start + sweep * (i / steps))
        ring.append(destination_point(center, angle, float(radius_km)))
    ring.append(center)
    return ring


def sector_contains(
    center: GeoPoint,
    point: GeoPoint,
    *,
    bearing_deg: float,
    width_deg: float,
    radius_km: float,
) -> bool:
    """True when `point` is within `radius_km` of `center` and inside the cone."""
    d = distance_km(center, point)
    if not math.isfinite(d) or d > radius_km:
        return False
    return in_cone(center, point, bearing_deg=bearing_deg, width_deg=width_deg)


def in_cone(center: GeoPoint, point: GeoPoint, *, bearing_deg: float, width_deg: float) -> bool:
    """Angle-only half of the sector test (no radius limit)."""
    diff = angle_diff(initial_bearing_deg(center, point), bearing_deg)
    # NaN compares False, so unlocatable points fall out here.
    return diff <= float(width_deg) / 2


def sector_to_geojson(ring: list[GeoPoint] | tuple[GeoPoint, ...]) -> dict[str, Any]:
    """Wrap a ring as a GeoJSON Polygon Feature (`[lon, lat]` coordinate order)."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[p.lon, p.lat] for p in ring]],
        },
        "properties": {},
    }


@lru_cache(maxsize=256)
def _cached_ring(
    lat: float, lon: float, bearing_deg: float, width_deg: float, radius_km: float, steps: int
) -> tuple[GeoPoint, ...]:
    ring = build_sector(GeoPoint(lat=lat, lon=lon), bearing_deg, width_deg, radius_km, steps)
    return tuple(ring)


def build_sector_cached(
    center: GeoPoint,
    bearing_deg: float,
    width_deg: float,
    radius_km: float,
    steps: int = DEFAULT_STEPS,
) -> tuple[GeoPoint, ...]:
    """Memoized `build_sector` for high-frequency callers (e.g. live compass updates).

    Inputs are rounded (1e-6 degrees, 1e-3 km) before keying the cache, so the
    ring may differ from `build_sector` by well under a meter.
    """
    return _cached_ring(
        round(float(center.lat), 6),
        round(float(center.lon), 6),
        round(normalize_bearing(bearing_deg), 6) if math.isfinite(float(bearing_deg)) else float(bearing_deg),
        round(float(width_deg), 6),
        round(float(radius_km), 3),
        int(steps),
    )

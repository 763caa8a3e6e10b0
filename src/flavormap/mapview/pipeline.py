"""
Marker filter/sort pipeline.

Given the raw marker list, the map's `FilterState` and (optionally) the user's
location, compute the list the map should render:

1. No user location: every marker with valid coordinates, unfiltered.
2. Drop markers without finite lat/lng.
3. Viewing cone (if enabled): drop markers outside `bearing +- cone_width/2`.
4. Search radius: drop markers farther than `radius_km`.
5. Optional stable sort by distance (ties keep input order).

Everything is recomputed per call; marker lists are tens to low hundreds of
items. Bad marker data is dropped, never raised.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from flavormap.core.geo import GeoPoint, distance_km, initial_bearing_deg, is_finite_point
from flavormap.core.sector import in_cone
from flavormap.domain.models import FilterState, GeoPoint as PointModel, Marker, MarkerView
from flavormap.mapview.format import format_distance

logger = logging.getLogger(__name__)

PointLike = GeoPoint | PointModel | tuple[float, float]


@dataclass(frozen=True)
class _Located:
    marker: Marker
    point: GeoPoint
    distance_km: float | None
    bearing_deg: float | None


def to_core_point(point: PointLike | None) -> GeoPoint | None:
    """Accept a core point, a pydantic point or a `(lat, lon)` tuple."""
    if point is None:
        return None
    if isinstance(point, GeoPoint):
        return point
    if isinstance(point, tuple):
        lat, lon = point
        return GeoPoint(lat=float(lat), lon=float(lon))
    return GeoPoint(lat=float(point.lat), lon=float(point.lon))


def has_valid_coordinates(marker: Marker) -> bool:
    """True when the marker can be placed on the map."""
    return is_finite_point(marker.lat, marker.lng)


def _locate(markers: Iterable[Marker], origin: GeoPoint | None) -> tuple[list[_Located], int]:
    located: list[_Located] = []
    dropped = 0
    for m in markers:
        if not has_valid_coordinates(m):
            dropped += 1
            continue
        p = GeoPoint(lat=float(m.lat), lon=float(m.lng))
        if origin is None:
            located.append(_Located(marker=m, point=p, distance_km=None, bearing_deg=None))
            continue
        located.append(
            _Located(
                marker=m,
                point=p,
                distance_km=distance_km(origin, p),
                bearing_deg=initial_bearing_deg(origin, p),
            )
        )
    return located, dropped


def _run(markers: Iterable[Marker], filters: FilterState, user_location: PointLike | None) -> list[_Located]:
    origin = to_core_point(user_location)
    if origin is not None and not is_finite_point(origin.lat, origin.lon):
        # An unusable origin behaves like "no location yet".
        origin = None

    located, dropped = _locate(markers, origin)
    if dropped:
        logger.debug("Dropped %d marker(s) without usable coordinates", dropped)

    if origin is None:
        return located

    if filters.direction_enabled:
        located = [
            e
            for e in located
            if in_cone(origin, e.point, bearing_deg=filters.bearing_deg, width_deg=filters.cone_width_deg)
        ]

    radius = float(filters.radius_km)
    located = [e for e in located if e.distance_km is not None and e.distance_km <= radius]

    if filters.sort_by_distance:
        # list.sort is stable, so equal distances keep their input order.
        located.sort(key=lambda e: e.distance_km if e.distance_km is not None else math.inf)

    return located


def filter_markers(
    markers: Iterable[Marker],
    filters: FilterState,
    user_location: PointLike | None = None,
) -> list[Marker]:
    """Return the markers to render, in render order (new list; inputs untouched)."""
    return [e.marker for e in _run(markers, filters, user_location)]


def annotate_markers(
    markers: Iterable[Marker],
    filters: FilterState,
    user_location: PointLike | None = None,
) -> list[MarkerView]:
    """Like `filter_markers`, but each item carries distance/bearing relative to the user."""
    out: list[MarkerView] = []
    for e in _run(markers, filters, user_location):
        out.append(
            MarkerView(
                marker=e.marker,
                distance_km=e.distance_km,
                bearing_deg=e.bearing_deg,
                distance_label=format_distance(e.distance_km) if e.distance_km is not None else None,
            )
        )
    return out

"""
Small display formatting helpers.

Used by the API (distance labels) and the CLI (compact per-marker lines).
"""

from __future__ import annotations

import math

from flavormap.domain.models import MarkerView


def _round_half_up(x: float) -> int:
    # Match the web client's Math.round (halves round up, not to even).
    return int(math.floor(x + 0.5))


def format_distance(km: float) -> str:
    """Render a distance the way the map labels it: `850m` below 1 km, else `1.2km`."""
    if km < 1:
        return f"{_round_half_up(km * 1000)}m"
    tenths = _round_half_up(km * 10)
    if tenths % 10 == 0:
        return f"{tenths // 10}km"
    return f"{tenths / 10}km"


def one_line_summary(view: MarkerView) -> str:
    """Render a compact single-line summary for an annotated marker."""
    m = view.marker
    parts = [str(m.name)]
    if view.distance_label:
        parts.append(view.distance_label)
    if view.bearing_deg is not None:
        parts.append(f"bearing={view.bearing_deg:.0f}")
    if m.address:
        parts.append(m.address)
    return " | ".join(parts)

"""
FlavorMap CLI entrypoint.

Intended for quick local checks of the map filtering without the web UI.
It delegates to `flavormap.mapview.service.build_map_view` and the geodesy helpers.
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any

from flavormap.catalog.loader import load_markers, save_markers
from flavormap.config.settings import get_settings
from flavormap.core.geo import GeoPoint as CoreGeoPoint, distance_km, initial_bearing_deg
from flavormap.core.logging import configure_logging
from flavormap.core.sector import build_sector, sector_to_geojson
from flavormap.domain.models import FilterState, GeoPoint, MapViewRequest
from flavormap.ingestion.restaurants_client import RestaurantsClient
from flavormap.mapview.format import format_distance, one_line_summary
from flavormap.mapview.service import build_cache, build_map_view, default_filters

logger = logging.getLogger(__name__)


def _cmd_filter(args: argparse.Namespace) -> int:
    """Handle the `filter` subcommand."""
    settings = get_settings()
    base = default_filters(settings)

    filters = FilterState(
        radius_km=float(args.radius) if args.radius is not None else base.radius_km,
        sort_by_distance=bool(args.sort) or base.sort_by_distance,
        direction_enabled=args.bearing is not None,
        bearing_deg=float(args.bearing) if args.bearing is not None else base.bearing_deg,
        cone_width_deg=float(args.cone_width) if args.cone_width is not None else base.cone_width_deg,
    )

    user_location = None
    if args.lat is not None and args.lon is not None:
        user_location = GeoPoint(lat=float(args.lat), lon=float(args.lon))

    markers = load_markers(args.catalog) if args.catalog else None
    request = MapViewRequest(markers=markers, user_location=user_location, filters=filters)
    result = build_map_view(request, settings=settings)

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    meta = result.meta
    print(
        f"Showing {meta['result_count']} of {meta['input_count']} markers"
        f" ({meta['dropped_invalid']} without coordinates)"
    )
    for i, view in enumerate(result.results, start=1):
        print(f"{i:>3}. {one_line_summary(view)}")
    return 0


def _cmd_sector(args: argparse.Namespace) -> int:
    settings = get_settings()
    ring = build_sector(
        CoreGeoPoint(lat=float(args.lat), lon=float(args.lon)),
        float(args.bearing),
        float(args.width),
        float(args.radius) if args.radius is not None else settings.map.sector.radius_km,
        int(args.steps) if args.steps is not None else settings.map.sector.steps,
    )
    print(json.dumps(sector_to_geojson(ring), indent=2))
    return 0


def _cmd_distance(args: argparse.Namespace) -> int:
    a = CoreGeoPoint(lat=float(args.lat1), lon=float(args.lon1))
    b = CoreGeoPoint(lat=float(args.lat2), lon=float(args.lon2))
    d = distance_km(a, b)
    bearing = "n/a" if a == b else f"{initial_bearing_deg(a, b):.1f}"
    print(f"distance={d:.3f}km ({format_distance(d)}) bearing={bearing}")
    return 0


def _cmd_fetch_markers(args: argparse.Namespace) -> int:
    settings = get_settings()
    client = RestaurantsClient(settings, build_cache(settings))
    markers = client.get_markers(
        municipality_id=args.municipality_id,
        dish_id=args.dish_id,
        kind=args.kind,
        q=args.q,
        limit=args.limit,
    )
    out = save_markers(args.out or settings.catalog.path, markers)
    print(f"Saved {len(markers)} markers to {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the FlavorMap CLI."""
    parser = argparse.ArgumentParser(prog="flavormap")
    sub = parser.add_subparsers(dest="command", required=True)

    flt = sub.add_parser("filter", help="Filter/sort catalog markers around a location.")
    flt.add_argument("--lat", type=float, default=None, help="User latitude (omit to skip distance filters)")
    flt.add_argument("--lon", type=float, default=None, help="User longitude")
    flt.add_argument("--radius", type=float, default=None, help="Search radius in km")
    flt.add_argument("--sort", action="store_true", help="Sort by distance (nearest first)")
    flt.add_argument("--bearing", type=float, default=None, help="Enable the viewing cone facing this bearing")
    flt.add_argument("--cone-width", dest="cone_width", type=float, default=None, help="Cone width in degrees")
    flt.add_argument("--catalog", type=str, default=None, help="Marker JSON file (defaults to catalog.path)")
    flt.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    flt.set_defaults(func=_cmd_filter)

    sec = sub.add_parser("sector", help="Print a viewing-cone polygon as GeoJSON.")
    sec.add_argument("--lat", required=True, type=float)
    sec.add_argument("--lon", required=True, type=float)
    sec.add_argument("--bearing", required=True, type=float)
    sec.add_argument("--width", type=float, default=60.0)
    sec.add_argument("--radius", type=float, default=None, help="Sector radius in km")
    sec.add_argument("--steps", type=int, default=None, help="Arc segments")
    sec.set_defaults(func=_cmd_sector)

    dist = sub.add_parser("distance", help="Great-circle distance and bearing between two points.")
    dist.add_argument("lat1", type=float)
    dist.add_argument("lon1", type=float)
    dist.add_argument("lat2", type=float)
    dist.add_argument("lon2", type=float)
    dist.set_defaults(func=_cmd_distance)

    fetch = sub.add_parser("fetch-markers", help="Pull restaurants from the CRUD API into a catalog file.")
    fetch.add_argument("--municipality-id", dest="municipality_id", type=int, default=None)
    fetch.add_argument("--dish-id", dest="dish_id", type=int, default=None)
    fetch.add_argument("--kind", type=str, default=None)
    fetch.add_argument("--q", type=str, default=None)
    fetch.add_argument("--limit", type=int, default=None)
    fetch.add_argument("--out", type=str, default=None, help="Output path (defaults to catalog.path)")
    fetch.set_defaults(func=_cmd_fetch_markers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m flavormap.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

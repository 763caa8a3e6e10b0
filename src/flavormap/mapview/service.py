from __future__ import annotations

# Orchestration for one map render:
# - resolve settings (with safe per-request overrides)
# - pick the marker source (request payload, or the local catalog)
# - run the filter/sort pipeline
# - attach the viewing-cone polygon when direction filtering is on

import logging
import time
from datetime import datetime, timezone

from flavormap.catalog.loader import load_markers
from flavormap.config.overrides import apply_settings_overrides
from flavormap.config.settings import Settings, get_settings
from flavormap.core.cache import FileCache
from flavormap.core.env import resolve_project_path
from flavormap.core.sector import build_sector_cached, sector_to_geojson
from flavormap.domain.models import FilterState, MapViewRequest, MapViewResult, Marker
from flavormap.mapview.pipeline import annotate_markers, has_valid_coordinates, to_core_point

logger = logging.getLogger(__name__)


def build_cache(settings: Settings) -> FileCache:
    return FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )


def default_filters(settings: Settings) -> FilterState:
    """Filter state the map starts with (from `map.*` settings)."""
    m = settings.map
    return FilterState(
        radius_km=m.default_radius_km,
        sort_by_distance=m.sort_by_distance_default,
        direction_enabled=False,
        bearing_deg=m.default_bearing_deg,
        cone_width_deg=m.default_cone_width_deg,
    )


def build_map_view(
    request: MapViewRequest,
    *,
    settings: Settings | None = None,
    markers: list[Marker] | None = None,
) -> MapViewResult:
    """Compute the markers (and sector) the map should render for `request`.

    Marker source precedence: `request.markers`, then `markers`, then the catalog.

    Raises:
        ValueError: On disallowed settings overrides.
        FileNotFoundError: If the catalog is needed but missing.
    """
    t0 = time.perf_counter()
    settings = apply_settings_overrides(settings or get_settings(), request.settings_overrides)
    filters = request.filters or default_filters(settings)

    source = "request"
    candidates = request.markers
    if candidates is None:
        candidates = markers
        source = "provided"
    if candidates is None:
        candidates = load_markers(settings.catalog.path)
        source = "catalog"

    views = annotate_markers(candidates, filters, request.user_location)

    sector = None
    origin = to_core_point(request.user_location)
    if request.include_sector and origin is not None and filters.direction_enabled:
        ring = build_sector_cached(
            origin,
            filters.bearing_deg,
            filters.cone_width_deg,
            settings.map.sector.radius_km,
            settings.map.sector.steps,
        )
        sector = sector_to_geojson(ring)

    locatable = sum(1 for m in candidates if has_valid_coordinates(m))
    elapsed_ms = int(round((time.perf_counter() - t0) * 1000))
    logger.info(
        "Map view: source=%s input=%d locatable=%d shown=%d in %dms",
        source,
        len(candidates),
        locatable,
        len(views),
        elapsed_ms,
    )

    return MapViewResult(
        generated_at=datetime.now(timezone.utc),
        results=views,
        filters=filters,
        user_location=request.user_location,
        sector=sector,
        meta={
            "source": source,
            "input_count": len(candidates),
            "locatable_count": locatable,
            "dropped_invalid": len(candidates) - locatable,
            "result_count": len(views),
            "elapsed_ms": elapsed_ms,
        },
    )

"""
API routes.

Endpoints:
- POST `/api/map/view`: filter/sort markers around the user and build the viewing cone.
- POST `/api/map/sector`: standalone sector polygon (GeoJSON Feature).
- GET  `/api/markers`: markers from the local catalog.
- GET  `/api/settings`: public map defaults for the web UI.
- GET  `/api/geo/distance`, `/api/geo/bearing`: small geodesy helpers.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache

from fastapi import APIRouter, HTTPException

from flavormap.catalog.loader import load_markers
from flavormap.config.settings import get_settings
from flavormap.core.geo import GeoPoint as CoreGeoPoint, distance_km, initial_bearing_deg
from flavormap.core.sector import build_sector, sector_to_geojson
from flavormap.domain.models import MapViewRequest, MapViewResult, SectorRequest
from flavormap.ingestion.restaurants_client import RestaurantsClient
from flavormap.mapview.format import format_distance
from flavormap.mapview.service import build_cache, build_map_view

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def _client() -> RestaurantsClient:
    settings = get_settings()
    return RestaurantsClient(settings, build_cache(settings))


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return map defaults for the UI (no paths or upstream URLs)."""
    settings = get_settings()
    return {"app": {"name": settings.app.name}, "map": settings.map.model_dump(mode="json")}


@router.get("/api/markers")
def get_markers(live: bool = False) -> dict:
    """Return catalog markers; `live=true` reads through the CRUD API instead."""
    settings = get_settings()
    try:
        markers = _client().get_markers() if live else load_markers(settings.catalog.path)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail={"code": "CATALOG_NOT_FOUND", "message": str(e)}) from e
    except Exception as e:
        logger.exception("Failed to load markers (live=%s)", live)
        raise HTTPException(status_code=502, detail={"code": "UPSTREAM_ERROR", "message": str(e)}) from e
    return {
        "source": "api" if live else "catalog",
        "count": len(markers),
        "markers": [m.model_dump(mode="json") for m in markers],
    }


@router.post("/api/map/view", response_model=MapViewResult)
def post_map_view(request: MapViewRequest) -> MapViewResult:
    """Compute what the map should render for the given location and filters."""
    try:
        return build_map_view(request, settings=get_settings())
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail={"code": "CATALOG_NOT_FOUND", "message": str(e)}) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e
    except Exception as e:
        logger.exception("Map view failed")
        raise HTTPException(status_code=500, detail={"code": "INTERNAL_ERROR", "message": str(e)}) from e


@router.post("/api/map/sector")
def post_sector(request: SectorRequest) -> dict:
    """Return the viewing-cone polygon as a GeoJSON Feature."""
    sector_settings = get_settings().map.sector
    center = CoreGeoPoint(lat=request.center.lat, lon=request.center.lon)
    try:
        ring = build_sector(
            center,
            request.bearing_deg,
            request.width_deg,
            request.radius_km or sector_settings.radius_km,
            request.steps or sector_settings.steps,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e
    return sector_to_geojson(ring)


@router.get("/api/geo/distance")
def get_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> dict:
    a = CoreGeoPoint(lat=lat1, lon=lon1)
    b = CoreGeoPoint(lat=lat2, lon=lon2)
    d = distance_km(a, b)
    if not math.isfinite(d):
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": "coordinates must be finite"})
    return {"distance_km": d, "label": format_distance(d)}


@router.get("/api/geo/bearing")
def get_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> dict:
    """Initial bearing from point 1 to point 2; `null` when the points coincide."""
    a = CoreGeoPoint(lat=lat1, lon=lon1)
    b = CoreGeoPoint(lat=lat2, lon=lon2)
    if a == b:
        return {"bearing_deg": None}
    bearing = initial_bearing_deg(a, b)
    if not math.isfinite(bearing):
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": "coordinates must be finite"})
    return {"bearing_deg": bearing}

"""
Domain models (Pydantic).

These types are the contract between layers:
- catalog / CRUD API rows (`Marker`)
- map controls (`FilterState`)
- API/CLI inputs and outputs (`MapViewRequest`, `MapViewResult`, `SectorRequest`)

Markers are permissive: restaurant rows come from MySQL with
DECIMAL coordinates serialized as strings, or with no coordinates at all, and a
bad row must never break the map. Coordinates that cannot be parsed become
`None`; the filtering pipeline treats those markers as unlocatable.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from flavormap.core.geo import as_float, normalize_bearing


class GeoPoint(BaseModel):
    """A geographic point in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class Marker(BaseModel):
    """A restaurant (or other point of interest) shown on the map."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    name: str
    lat: float | None = None
    lng: float | None = None
    address: str | None = None

    slug: str | None = None
    kind: str | None = None
    municipality_id: int | None = None
    rating: float | None = None

    @field_validator("lat", "lng", "rating", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return as_float(value)

    @field_validator("municipality_id", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> int | None:
        number = as_float(value)
        if number is None or not math.isfinite(number):
            return None
        return int(number)

    @field_serializer("lat", "lng", "rating")
    def _finite_or_none(self, value: float | None) -> float | None:
        # JSON has no NaN; unlocatable coordinates go out as null.
        if value is None or not math.isfinite(value):
            return None
        return value


class FilterState(BaseModel):
    """Map filter controls: search radius, distance sort and the viewing cone."""

    radius_km: float = Field(5.0, ge=0, allow_inf_nan=False)
    sort_by_distance: bool = False
    direction_enabled: bool = False
    bearing_deg: float = Field(0.0, allow_inf_nan=False)
    cone_width_deg: float = Field(60.0, gt=0, le=180)

    @field_validator("bearing_deg")
    @classmethod
    def _normalize_bearing(cls, value: float) -> float:
        return normalize_bearing(value)


class MarkerView(BaseModel):
    """One rendered marker plus its position relative to the user (if known)."""

    marker: Marker
    distance_km: float | None = None
    bearing_deg: float | None = None
    distance_label: str | None = None


class MapViewRequest(BaseModel):
    """Request payload for computing what the map should render."""

    markers: list[Marker] | None = None
    user_location: GeoPoint | None = None
    filters: FilterState | None = None
    include_sector: bool = True
    settings_overrides: dict[str, Any] | None = None


class MapViewResult(BaseModel):
    """Filtered/sorted markers plus the sector polygon to draw (if any)."""

    generated_at: datetime
    results: list[MarkerView]
    filters: FilterState
    user_location: GeoPoint | None = None
    sector: dict[str, Any] | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


class SectorRequest(BaseModel):
    """Request payload for a standalone sector polygon."""

    center: GeoPoint
    bearing_deg: float = Field(0.0, allow_inf_nan=False)
    width_deg: float = Field(60.0, gt=0, le=360)
    radius_km: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    steps: int | None = Field(default=None, ge=1, le=720)

"""
Map view state with explicit subscriptions.

The web client wired its map controls (radius slider, compass toggle, "near me")
to the map through window-level custom events. Here the same wiring is a plain
object: controls call setters, and anything rendering the map subscribes to a
typed `MapViewUpdate`.

Not thread-safe. Setters recompute synchronously and notify listeners before
returning.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from flavormap.core.geo import GeoPoint, as_float, is_finite_point, normalize_bearing
from flavormap.core.sector import DEFAULT_STEPS, build_sector_cached
from flavormap.domain.models import FilterState, Marker
from flavormap.mapview.pipeline import filter_markers

logger = logging.getLogger(__name__)


def heading_from_device_alpha(alpha: Any) -> int | None:
    """Turn a DeviceOrientationEvent `alpha` into a compass heading in [0, 360).

    `alpha` grows counter-clockwise, compass headings clockwise. Returns None for
    missing or non-finite readings (some devices report null before calibration).
    """
    value = as_float(alpha)
    if value is None or not math.isfinite(value):
        return None
    heading = int(math.floor(normalize_bearing(360.0 - value) + 0.5))
    return heading % 360


@dataclass(frozen=True)
class MapViewUpdate:
    """What a map renderer needs after any state change."""

    markers: list[Marker]
    filters: FilterState
    user_location: GeoPoint | None
    sector: tuple[GeoPoint, ...] | None
    reason: str


Listener = Callable[[MapViewUpdate], None]


@dataclass
class MapViewState:
    """Holds markers, user location and filters; recomputes and notifies on change."""

    filters: FilterState = field(default_factory=FilterState)
    sector_radius_km: float = 10.0
    sector_steps: int = DEFAULT_STEPS
    _markers: list[Marker] = field(default_factory=list)
    _user_location: GeoPoint | None = None
    _listeners: list[Listener] = field(default_factory=list)
    _last: MapViewUpdate | None = None

    @property
    def markers(self) -> list[Marker]:
        return list(self._markers)

    @property
    def user_location(self) -> GeoPoint | None:
        return self._user_location

    @property
    def last_update(self) -> MapViewUpdate | None:
        return self._last

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def set_markers(self, markers: Iterable[Marker]) -> MapViewUpdate:
        # Snapshot so later mutation of the caller's list cannot leak in.
        self._markers = list(markers)
        return self._publish("markers")

    def set_user_location(self, lat: float, lon: float) -> MapViewUpdate:
        if not is_finite_point(lat, lon):
            logger.warning("Ignoring non-finite user location lat=%r lon=%r", lat, lon)
            self._user_location = None
        else:
            self._user_location = GeoPoint(lat=float(lat), lon=float(lon))
        return self._publish("user_location")

    def clear_user_location(self) -> MapViewUpdate:
        self._user_location = None
        return self._publish("user_location")

    def update_filters(self, **changes: Any) -> MapViewUpdate:
        """Apply partial filter changes (validated by `FilterState`).

        Raises:
            pydantic.ValidationError: If a value is out of range.
        """
        payload = {**self.filters.model_dump(), **changes}
        self.filters = FilterState.model_validate(payload)
        return self._publish("filters")

    def set_heading_from_device(self, alpha: Any) -> MapViewUpdate | None:
        """Follow the device compass; unusable readings are ignored (returns None).

        An unchanged heading does not notify again and returns the last update.
        """
        heading = heading_from_device_alpha(alpha)
        if heading is None:
            return None
        if heading == self.filters.bearing_deg and self._last is not None:
            return self._last
        return self.update_filters(bearing_deg=heading)

    def current_sector(self) -> tuple[GeoPoint, ...] | None:
        if self._user_location is None or not self.filters.direction_enabled:
            return None
        return build_sector_cached(
            self._user_location,
            self.filters.bearing_deg,
            self.filters.cone_width_deg,
            self.sector_radius_km,
            self.sector_steps,
        )

    def _publish(self, reason: str) -> MapViewUpdate:
        update = MapViewUpdate(
            markers=filter_markers(self._markers, self.filters, self._user_location),
            filters=self.filters,
            user_location=self._user_location,
            sector=self.current_sector(),
            reason=reason,
        )
        self._last = update
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception:
                logger.exception("Map view listener failed (reason=%s)", reason)
        return update

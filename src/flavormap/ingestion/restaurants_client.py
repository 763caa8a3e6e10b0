"""
Restaurants CRUD API client.

Fetches restaurant rows from the food-map backend (`GET /api/restaurants`) and
turns them into `Marker`s for the map. Responses are cached on disk; when the
backend is unreachable we serve the last cached copy (stale-if-error) so the
map degrades instead of going blank.
"""

from __future__ import annotations

import logging
from typing import Any

from flavormap.catalog.loader import parse_marker_rows
from flavormap.config.settings import Settings
from flavormap.core.cache import FileCache
from flavormap.core.http import get_json
from flavormap.domain.models import Marker

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "restaurants"


class RestaurantsClient:
    """Fetches and caches restaurant rows from the CRUD API."""

    def __init__(self, settings: Settings, cache: FileCache):
        self._settings = settings
        self._cache = cache

    @property
    def endpoint(self) -> str:
        return self._settings.ingestion.api.base_url.rstrip("/") + "/api/restaurants"

    def _params(
        self,
        *,
        municipality_id: int | None,
        dish_id: int | None,
        kind: str | None,
        q: str | None,
        limit: int | None,
    ) -> dict[str, Any]:
        # Query names follow the Express API (camelCase).
        params: dict[str, Any] = {"limit": int(limit or self._settings.ingestion.api.default_limit)}
        if municipality_id is not None:
            params["municipalityId"] = int(municipality_id)
        if dish_id is not None:
            params["dishId"] = int(dish_id)
        if kind:
            params["kind"] = kind
        if q:
            params["q"] = q
        return params

    def get_restaurant_rows(
        self,
        *,
        municipality_id: int | None = None,
        dish_id: int | None = None,
        kind: str | None = None,
        q: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return raw rows (cached).

        Raises:
            httpx.HTTPError: If the API fails and no cached copy exists.
            ValueError: If the API answers with something other than a JSON array.
        """
        params = self._params(municipality_id=municipality_id, dish_id=dish_id, kind=kind, q=q, limit=limit)
        cache_key = "&".join(f"{k}={params[k]}" for k in sorted(params))

        def builder() -> list[dict[str, Any]]:
            logger.info("Fetching restaurants from %s params=%s", self.endpoint, params)
            payload = get_json(
                self.endpoint,
                params=params,
                timeout_seconds=self._settings.ingestion.api.timeout_seconds,
            )
            if not isinstance(payload, list):
                raise ValueError("Restaurants API returned a non-array payload")
            return payload

        rows = self._cache.get_or_set(
            CACHE_NAMESPACE,
            cache_key,
            builder,
            ttl_seconds=self._settings.ingestion.api.cache_ttl_seconds,
            stale_if_error=True,
        )
        return [r for r in rows if isinstance(r, dict)]

    def get_markers(self, **filters: Any) -> list[Marker]:
        """Return validated markers; rows without usable ids/names are skipped."""
        return parse_marker_rows(self.get_restaurant_rows(**filters), source="restaurants api")

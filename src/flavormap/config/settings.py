# src/flavormap/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/flavormap/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `FLAVORMAP_API_BASE_URL`, `FLAVORMAP_LOG_LEVEL`)
- an external YAML file via `FLAVORMAP_CONFIG_PATH`

Design rule:
- Map defaults (radius, cone width, sector fidelity) live in YAML, not in the filtering code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from flavormap.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `flavormap.config`."""
    text = resources.files("flavormap.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "FlavorMap"
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/flavormap"
    default_ttl_seconds: int = 60 * 60 * 24


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/markers.json"


class MapCenterSettings(BaseModel):
    lat: float = Field(14.8527, ge=-90, le=90)
    lon: float = Field(120.816, ge=-180, le=180)


class SectorSettings(BaseModel):
    radius_km: float = Field(10.0, gt=0)
    steps: int = Field(32, ge=1, le=720)


class MapSettings(BaseModel):
    center: MapCenterSettings = Field(default_factory=MapCenterSettings)
    default_radius_km: float = Field(5.0, ge=0)
    min_radius_km: float = Field(1.0, ge=0)
    max_radius_km: float = Field(20.0, gt=0)
    radius_presets_km: list[float] = Field(default_factory=lambda: [1, 2, 5, 10, 20])
    default_bearing_deg: float = Field(0.0, ge=0, lt=360)
    default_cone_width_deg: float = Field(60.0, gt=0, le=180)
    min_cone_width_deg: float = Field(10.0, gt=0, le=180)
    max_cone_width_deg: float = Field(180.0, gt=0, le=180)
    sort_by_distance_default: bool = False
    sector: SectorSettings = Field(default_factory=SectorSettings)

    @model_validator(mode="after")
    def _validate_bounds(self) -> "MapSettings":
        if self.min_radius_km > self.max_radius_km:
            raise ValueError("map.min_radius_km must be <= map.max_radius_km")
        if self.min_cone_width_deg > self.max_cone_width_deg:
            raise ValueError("map.min_cone_width_deg must be <= map.max_cone_width_deg")
        return self


class RestaurantsApiSettings(BaseModel):
    base_url: str = "http://localhost:3001"
    timeout_seconds: float = 15
    cache_ttl_seconds: int = 60 * 10
    default_limit: int = Field(200, ge=1)


class IngestionSettings(BaseModel):
    api: RestaurantsApiSettings = Field(default_factory=RestaurantsApiSettings)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)
    cache_dir = os.getenv("FLAVORMAP_CACHE_DIR")
    if cache_dir:
        data.setdefault("cache", {})["dir"] = cache_dir

    log_level = os.getenv("FLAVORMAP_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    base_url = os.getenv("FLAVORMAP_API_BASE_URL")
    if base_url:
        data.setdefault("ingestion", {}).setdefault("api", {})["base_url"] = base_url

    catalog_path = os.getenv("FLAVORMAP_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("FLAVORMAP_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")

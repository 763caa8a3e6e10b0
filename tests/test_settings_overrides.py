from __future__ import annotations

import pytest

from flavormap.config.overrides import apply_settings_overrides
from flavormap.config.settings import get_settings


def test_defaults_load_from_packaged_yaml():
    settings = get_settings()
    assert settings.map.center.lat == pytest.approx(14.8527)
    assert settings.map.default_radius_km == 5
    assert settings.map.sector.steps == 32
    assert settings.map.radius_presets_km == [1, 2, 5, 10, 20]


def test_apply_settings_overrides_returns_same_object_when_none():
    settings = get_settings()
    # No overrides is a fast path that returns the shared object untouched.
    assert apply_settings_overrides(settings, None) is settings


def test_apply_settings_overrides_can_override_map_knobs():
    settings = get_settings()
    out = apply_settings_overrides(settings, {"map": {"sector": {"steps": 64}, "default_radius_km": 7}})
    assert out.map.sector.steps == 64
    assert out.map.default_radius_km == 7
    # The cached settings must not leak per-request changes.
    assert settings.map.sector.steps == 32


def test_apply_settings_overrides_rejects_paths_with_clear_key():
    settings = get_settings()
    with pytest.raises(ValueError, match=r"catalog"):
        apply_settings_overrides(settings, {"catalog": {"path": "/etc/passwd"}})


def test_apply_settings_overrides_rejects_unknown_nested_key():
    settings = get_settings()
    with pytest.raises(ValueError, match=r"map\.tile_url"):
        apply_settings_overrides(settings, {"map": {"tile_url": "http://evil"}})


def test_apply_settings_overrides_rejects_wrong_shapes():
    settings = get_settings()
    with pytest.raises(ValueError, match=r"settings_overrides key 'map' must be a mapping"):
        apply_settings_overrides(settings, {"map": 1})


def test_apply_settings_overrides_revalidates_ranges():
    settings = get_settings()
    with pytest.raises(ValueError):
        apply_settings_overrides(settings, {"map": {"min_radius_km": 30}})

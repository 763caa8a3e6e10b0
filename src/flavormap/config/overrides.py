from __future__ import annotations

from typing import Any, Mapping

from flavormap.config.settings import Settings

"""
Per-request settings overrides (safe subset).

The map API can send `settings_overrides` to tune map defaults (e.g. sector
fidelity or the radius bounds) for a single request. This module:
- validates the override payload against a whitelist,
- deep-merges the safe subset onto current settings,
- re-validates with Pydantic to ensure types/ranges remain correct.

Security note:
We do NOT allow overriding file paths, the cache directory or the upstream API URL.
"""

# True means "allow any keys under this subtree"; a nested dict restricts recursively.
ALLOWED_SETTINGS_OVERRIDES_TREE: dict[str, Any] = {
    "map": {
        "center": True,
        "default_radius_km": True,
        "min_radius_km": True,
        "max_radius_km": True,
        "radius_presets_km": True,
        "default_bearing_deg": True,
        "default_cone_width_deg": True,
        "min_cone_width_deg": True,
        "max_cone_width_deg": True,
        "sort_by_distance_default": True,
        "sector": True,
    },
}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(base)
    for key, override_value in override.items():
        if isinstance(override_value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(dict(merged[key]), override_value)
            continue
        merged[key] = override_value
    return merged


def _filter_overrides(
    overrides: Mapping[str, Any],
    *,
    allowed_tree: Mapping[str, Any],
    path: tuple[str, ...] = (),
) -> dict[str, Any]:
    filtered: dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in allowed_tree:
            dotted_path = ".".join((*path, key))
            raise ValueError(f"settings_overrides contains a disallowed key: '{dotted_path}'")

        allowed = allowed_tree[key]
        if allowed is True:
            filtered[key] = value
            continue

        if not isinstance(value, Mapping):
            dotted_path = ".".join((*path, key))
            raise ValueError(f"settings_overrides key '{dotted_path}' must be a mapping")

        filtered[key] = _filter_overrides(value, allowed_tree=allowed, path=(*path, key))
    return filtered


def apply_settings_overrides(settings: Settings, overrides: Mapping[str, Any] | None) -> Settings:
    """Return `settings` with a whitelisted override payload merged on top.

    Raises:
        ValueError: On disallowed keys or wrong value shapes (pydantic's
            `ValidationError` is a `ValueError` too).
    """
    if not overrides:
        return settings

    safe_overrides = _filter_overrides(overrides, allowed_tree=ALLOWED_SETTINGS_OVERRIDES_TREE)
    merged_payload = _deep_merge(settings.model_dump(mode="python"), safe_overrides)
    return Settings.model_validate(merged_payload)

"""
Marker catalog loader.

The catalog is a local JSON file (default: `data/catalogs/markers.json`) holding
restaurant rows as the CRUD API returns them (`id`, `name`, `lat`, `lng`,
`address`, ...). Rows are validated one by one so a single malformed record is
skipped instead of failing the whole map.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from flavormap.core.env import resolve_project_path
from flavormap.domain.models import Marker

logger = logging.getLogger(__name__)


def parse_marker_rows(rows: Iterable[Any], *, source: str = "catalog") -> list[Marker]:
    """Validate raw rows into markers, skipping rows that are not usable records."""
    markers: list[Marker] = []
    skipped = 0
    for row in rows:
        if not isinstance(row, dict):
            skipped += 1
            continue
        try:
            markers.append(Marker.model_validate(row))
        except ValidationError as e:
            skipped += 1
            logger.debug("Skipping %s row id=%r: %s", source, row.get("id"), e.errors()[:1])
    if skipped:
        logger.warning("Skipped %d invalid row(s) from %s", skipped, source)
    return markers


def load_markers(path: str | Path) -> list[Marker]:
    """Load and validate a marker catalog JSON file.

    Accepts either a bare JSON array or an object with a `markers` array.

    Raises:
        FileNotFoundError: If the catalog file does not exist.
        ValueError: If the file is not JSON or has no marker array.
    """
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("markers")
    if not isinstance(payload, list):
        raise ValueError(f"Marker catalog {resolved} must be a JSON array (or {{'markers': [...]}})")
    return parse_marker_rows(payload, source=str(resolved))


def save_markers(path: str | Path, markers: Iterable[Marker]) -> Path:
    """Write markers to a catalog file (atomic replace); returns the resolved path."""
    resolved = resolve_project_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    payload = [m.model_dump(mode="json", exclude_none=True) for m in markers]
    tmp = resolved.with_suffix(resolved.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(resolved)
    return resolved

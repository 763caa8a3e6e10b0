"""
Simple on-disk JSON cache.

Used by the restaurants API client so the map keeps working when the CRUD API
is slow or down:
- values are stored as JSON envelopes under `.cache/flavormap/` by default,
- keys are hashed (SHA-256) to avoid filesystem path issues,
- TTL is enforced on read, and expired entries can still be served as a
  stale fallback when a refresh fails.
"""

from __future__ import annotations

import contextvars
import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Serialized cache envelope stored on disk."""

    created_at_unix: int
    ttl_seconds: int
    value: Any

    def is_expired(self, now: int, ttl_seconds: int | None = None) -> bool:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        return now - self.created_at_unix > ttl


@dataclass
class CacheStats:
    """Per-request cache usage stats (best-effort)."""

    hits: int = 0
    misses: int = 0
    sets: int = 0
    stale_fallbacks: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "stale_fallbacks": self.stale_fallbacks,
        }


_cache_stats_var: contextvars.ContextVar[CacheStats | None] = contextvars.ContextVar(
    "flavormap_cache_stats", default=None
)


def _bump(field_name: str) -> None:
    st = _cache_stats_var.get()
    if st is not None:
        setattr(st, field_name, getattr(st, field_name) + 1)


@contextmanager
def record_cache_stats() -> Iterator[CacheStats]:
    """Capture cache stats within the current context (thread/task-safe)."""
    stats = CacheStats()
    token = _cache_stats_var.set(stats)
    try:
        yield stats
    finally:
        _cache_stats_var.reset(token)


class FileCache:
    """A filesystem-backed cache keyed by (namespace, key)."""

    def __init__(self, base_dir: Path, enabled: bool = True, default_ttl_seconds: int = 86400):
        self._base_dir = Path(base_dir)
        self._enabled = enabled
        self._default_ttl_seconds = default_ttl_seconds

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _key_path(self, namespace: str, key: str) -> Path:
        digest = sha256(f"{namespace}:{key}".encode("utf-8")).hexdigest()
        return self._base_dir / namespace / f"{digest}.json"

    def read_entry(self, namespace: str, key: str) -> CacheEntry | None:
        """Return the raw envelope regardless of age (None if absent or unreadable)."""
        if not self._enabled:
            return None
        path = self._key_path(namespace, key)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(
                created_at_unix=int(raw["created_at_unix"]),
                ttl_seconds=int(raw["ttl_seconds"]),
                value=raw["value"],
            )
        except (OSError, ValueError, KeyError, TypeError):
            logger.warning("Ignoring unreadable cache file %s", path)
            return None

    def get(self, namespace: str, key: str, ttl_seconds: int | None = None) -> Any | None:
        """Read a cached value if present and not expired; otherwise return None."""
        entry = self.read_entry(namespace, key)
        if entry is None or entry.is_expired(int(time.time()), ttl_seconds):
            _bump("misses")
            return None
        _bump("hits")
        return entry.value

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Write a JSON-serializable value to disk (temp file + atomic replace)."""
        if not self._enabled:
            return None

        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl_seconds
        path = self._key_path(namespace, key)
        path.parent.mkdir(parents=True, exist_ok=True)

        payload = {"created_at_unix": int(time.time()), "ttl_seconds": int(ttl), "value": value}
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)
        _bump("sets")

    def get_or_set(
        self,
        namespace: str,
        key: str,
        builder: Callable[[], Any],
        ttl_seconds: int | None = None,
        *,
        stale_if_error: bool = False,
    ) -> Any:
        """Return cached value, or compute/store it via `builder`.

        With `stale_if_error`, a failing `builder()` falls back to an expired entry
        when one exists; otherwise the builder's exception propagates.
        """
        cached = self.get(namespace, key, ttl_seconds=ttl_seconds)
        if cached is not None:
            return cached
        try:
            value = builder()
        except Exception:
            if stale_if_error:
                entry = self.read_entry(namespace, key)
                if entry is not None and entry.value is not None:
                    _bump("stale_fallbacks")
                    logger.warning("Serving stale cache for %s:%s", namespace, key)
                    return entry.value
            raise
        self.set(namespace, key, value, ttl_seconds=ttl_seconds)
        return value

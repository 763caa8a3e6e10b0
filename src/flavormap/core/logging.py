"""
Logging configuration.

`src/flavormap/config/logging.yaml` sends everything to a single stderr console
handler and keeps the chatty `httpx` and `uvicorn.access` loggers at WARNING, so
CLI output on stdout stays clean and per-request map logs stay readable.

`FLAVORMAP_LOG_LEVEL` (via `app.log_level`) replaces the root and handler levels;
the per-logger WARNING floors from the YAML are left alone. The CLI and the API
module both call `configure_logging()` once at startup.
"""

from __future__ import annotations

import logging.config

from flavormap.config.settings import get_logging_config, get_settings


def configure_logging() -> None:
    """Configure the Python logging system based on packaged YAML config + settings."""
    settings = get_settings()
    config = get_logging_config()

    level = settings.app.log_level.upper()
    config.setdefault("root", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)

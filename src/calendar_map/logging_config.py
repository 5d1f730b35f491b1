"""Logging setup shared by the API server and the CLI."""

from __future__ import annotations

import logging
import logging.config
from typing import Any

_configured = False


def build_logging_config(level: str = "INFO") -> dict[str, Any]:
    """Build the dictConfig for the application."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "loggers": {
            "calendar_map": {"level": level.upper()},
            # Request lines from httpx would leak the Maps API key in the URL
            "httpx": {"level": "WARNING"},
            "googleapiclient.discovery_cache": {"level": "ERROR"},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }


def setup_logging(level: str = "INFO", force: bool = False) -> None:
    """Configure logging once per process."""
    global _configured

    if _configured and not force:
        return

    logging.config.dictConfig(build_logging_config(level))
    _configured = True

"""Central logging configuration for the insight engine."""
from __future__ import annotations

from logging.config import dictConfig
from pathlib import Path

from pydantic import ValidationError

from insight_engine.config import get_settings

SERVICE_LOGGER = "insight_engine.services"
STORE_LOGGER = "insight_engine.store"

_configured = False


def _default_config(log_dir: Path, level: str, service_level: str | None = None) -> dict:
    """
    Build the dictConfig payload.

    Handlers carry no level of their own so the pipeline loggers can be made
    more verbose than the root without touching anything else.
    """
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / "insights.log"),
                "encoding": "utf-8",
                "formatter": "standard",
            },
        },
        "loggers": {
            # Detection, alert and recommendation decisions
            SERVICE_LOGGER: {"level": service_level or level},
            STORE_LOGGER: {"level": level},
        },
        "root": {
            "level": level,
            "handlers": ["console", "file"],
        },
    }


def configure_logging() -> None:
    """Configure application logging once per process."""

    global _configured
    if _configured:
        return

    try:
        settings = get_settings()
        log_dir = settings.log_dir
        level = settings.log_level
        service_level = settings.service_log_level
    except ValidationError:
        # Malformed INSIGHTS_* variables should not prevent logging from starting.
        log_dir = Path("logs")
        level = "INFO"
        service_level = None
    log_dir.mkdir(parents=True, exist_ok=True)

    dictConfig(_default_config(log_dir, level, service_level))
    _configured = True

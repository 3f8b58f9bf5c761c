"""
Single entry-point that wires settings, logging and the configured backends.
Call once at application start-up.
"""

from __future__ import annotations

from .config import Settings
from .log import configure_logging, get_logger
from .runtime import Chronoset

log = get_logger(__name__)


def init_chronoset(settings: Settings | None = None) -> Chronoset:
    """
    Load settings from the environment when none are given, configure
    logging and return a ready `Chronoset` handle (SQL tables are created
    on first use of a database).
    """
    if settings is None:
        settings = Settings.from_env()
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    db = Chronoset.from_settings(settings)
    log.info("chronoset_ready", backend=settings.backend)
    return db

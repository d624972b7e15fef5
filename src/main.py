"""SheTrack engine entry point: logging setup and tracker construction.

Usage::

    from src.main import create_tracker

    tracker = create_tracker()          # reads Settings from env / .env
    tracker.get_current_cycle_day_info()
"""

from __future__ import annotations

import logging
import sys

from src.config import Settings, get_settings
from src.cycles.config_loader import load_tracker_config
from src.cycles.tracker import CycleTracker
from src.services.storage import JsonFileStorage, KeyValueStorage

logger = logging.getLogger("shetrack")


# ---------- Logging ----------

def configure_logging(settings: Settings | None = None) -> None:
    s = settings or get_settings()
    logging.basicConfig(
        level=logging.DEBUG if s.debug else s.log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


# ---------- Tracker factory ----------

def create_tracker(
    settings: Settings | None = None,
    storage: KeyValueStorage | None = None,
) -> CycleTracker:
    """Build and load a CycleTracker.

    Args:
        settings: Application settings.  Read from the environment when omitted.
        storage:  Persistence backend.  Defaults to JSON files in ``settings.data_dir``.

    Raises:
        StorageError: Persisted state could not be read.
        ConfigValidationError: The tracker config file is invalid.
    """
    s = settings or get_settings()
    configure_logging(s)
    config = load_tracker_config(s.tracker_config_path)
    backend = storage or JsonFileStorage(s.data_dir)
    logger.info("Starting %s v%s [%s]", s.app_name, s.app_version, s.environment)
    tracker = CycleTracker(backend, config)
    tracker.load()
    return tracker

"""Load and validate the SheTrack engine configuration.

The bundled config lives in ``tracker_config.yaml`` alongside this module.
``src.main.create_tracker`` loads it (or the file named by
``Settings.tracker_config_path``) and passes the result to ``CycleTracker``.

Usage::

    from src.cycles.config_loader import load_tracker_config

    config = load_tracker_config()
    config.storage.cycles_key               # 'shetrack-cycles'
    config.preferences.cycle_length_range   # (21, 40)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("shetrack.cycles.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "tracker_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class StorageKeysConfig:
    """Storage keys for the three persisted collections."""

    cycles_key: str = "shetrack-cycles"
    reminders_key: str = "shetrack-reminders"
    preferences_key: str = "shetrack-preferences"


@dataclass
class PreferenceLimitsConfig:
    """Allowed ranges for user overrides (inclusive)."""

    min_cycle_length: int = 21
    max_cycle_length: int = 40
    min_period_length: int = 1
    max_period_length: int = 10

    @property
    def cycle_length_range(self) -> tuple[int, int]:
        return self.min_cycle_length, self.max_cycle_length

    @property
    def period_length_range(self) -> tuple[int, int]:
        return self.min_period_length, self.max_period_length


@dataclass
class ForecastConfig:
    default_cycles_ahead: int = 3


@dataclass
class NotificationConfig:
    """How far ahead each notification kind starts showing."""

    enabled: bool = True
    period_lead_days: int = 5
    ovulation_lead_days: int = 2
    fertile_lead_days: int = 1


@dataclass
class TrackerConfig:
    """Complete, validated engine configuration.

    Attributes:
        version:       Config schema version string.
        storage:       Storage keys.
        preferences:   Allowed override ranges.
        forecast:      Forecast horizon used by the calendar view.
        notifications: Notification lead times.
    """

    version: str
    storage: StorageKeysConfig
    preferences: PreferenceLimitsConfig
    forecast: ForecastConfig
    notifications: NotificationConfig


def default_tracker_config() -> TrackerConfig:
    """Config built from dataclass defaults, no file involved."""
    return TrackerConfig(
        version="1.0",
        storage=StorageKeysConfig(),
        preferences=PreferenceLimitsConfig(),
        forecast=ForecastConfig(),
        notifications=NotificationConfig(),
    )


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when tracker_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    import yaml  # pyyaml

    if not path.exists():
        raise FileNotFoundError(f"Tracker config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> TrackerConfig:
    """Validate the raw YAML dict and construct a TrackerConfig.

    Missing sections fall back to defaults.  All problems are collected and
    reported together.

    Raises:
        ConfigValidationError: If any value is invalid.
    """
    errors: list[str] = []

    def _int(section: dict, key: str, path: str, default: int, minimum: int = 0) -> int:
        value = section.get(key, default)
        try:
            number = int(value)
        except (TypeError, ValueError):
            errors.append(f"{path} must be an integer, got {value!r}")
            return default
        if number < minimum:
            errors.append(f"{path} = {number} must be >= {minimum}")
        return number

    def _section(container: dict, key: str, path: str) -> dict:
        value = container.get(key) or {}
        if not isinstance(value, dict):
            errors.append(f"'{path}' must be a mapping")
            return {}
        return value

    if not isinstance(raw, dict):
        raise ConfigValidationError("tracker_config.yaml must contain a mapping at the top level")

    version = str(raw.get("version", "1.0"))

    # ── Storage keys ──
    keys_raw = _section(_section(raw, "storage", "storage"), "keys", "storage.keys")
    defaults = StorageKeysConfig()
    storage = StorageKeysConfig(
        cycles_key=str(keys_raw.get("cycles", defaults.cycles_key)),
        reminders_key=str(keys_raw.get("reminders", defaults.reminders_key)),
        preferences_key=str(keys_raw.get("preferences", defaults.preferences_key)),
    )
    used = [storage.cycles_key, storage.reminders_key, storage.preferences_key]
    if len(set(used)) != len(used):
        errors.append(f"storage.keys must be distinct, got {used}")

    # ── Preference limits ──
    prefs_raw = _section(raw, "preferences", "preferences")
    cl_raw = _section(prefs_raw, "cycle_length", "preferences.cycle_length")
    pl_raw = _section(prefs_raw, "period_length", "preferences.period_length")
    preferences = PreferenceLimitsConfig(
        min_cycle_length=_int(cl_raw, "min", "preferences.cycle_length.min", 21, 1),
        max_cycle_length=_int(cl_raw, "max", "preferences.cycle_length.max", 40, 1),
        min_period_length=_int(pl_raw, "min", "preferences.period_length.min", 1, 1),
        max_period_length=_int(pl_raw, "max", "preferences.period_length.max", 10, 1),
    )
    if preferences.min_cycle_length > preferences.max_cycle_length:
        errors.append("preferences.cycle_length.min must not exceed max")
    if preferences.min_period_length > preferences.max_period_length:
        errors.append("preferences.period_length.min must not exceed max")

    # ── Forecast ──
    fc_raw = _section(raw, "forecast", "forecast")
    forecast = ForecastConfig(
        default_cycles_ahead=_int(
            fc_raw, "default_cycles_ahead", "forecast.default_cycles_ahead", 3, 1
        ),
    )

    # ── Notifications ──
    nt_raw = _section(raw, "notifications", "notifications")
    notifications = NotificationConfig(
        enabled=bool(nt_raw.get("enabled", True)),
        period_lead_days=_int(nt_raw, "period_lead_days", "notifications.period_lead_days", 5),
        ovulation_lead_days=_int(
            nt_raw, "ovulation_lead_days", "notifications.ovulation_lead_days", 2
        ),
        fertile_lead_days=_int(nt_raw, "fertile_lead_days", "notifications.fertile_lead_days", 1),
    )

    if errors:
        raise ConfigValidationError(
            f"tracker_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return TrackerConfig(
        version=version,
        storage=storage,
        preferences=preferences,
        forecast=forecast,
        notifications=notifications,
    )


def load_tracker_config(path: Path | None = None) -> TrackerConfig:
    """Load and validate the tracker config from disk.

    Args:
        path: Override path to YAML. Uses the bundled tracker_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded tracker config v%s from %s", config.version, target)
    return config


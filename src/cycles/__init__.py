"""SheTrack cycle engine.

Records observed periods, derives average cycle and period length, forecasts
future periods and fertility windows, and resolves the current cycle day.

Modules:
    repository    : Sorted, write-through store of recorded cycles
    statistics    : Average cycle / period length with outlier filtering
    prediction    : Forecast periods and fertility windows
    status        : Current cycle day, period / fertile / ovulation flags
    preferences   : User overrides and onboarding state
    reminders     : Reminder CRUD
    notifications : Upcoming period / ovulation / fertile notifications
    calendar_view : Per-day calendar markers
    charts        : Chart data series
    config_loader : Load/validate tracker_config.yaml
    tracker       : CycleTracker facade
"""

from src.cycles.base import (
    CycleNotFoundError,
    InvalidRangeError,
    NotFoundError,
    PreferenceValidationError,
    ReminderNotFoundError,
    ShetrackError,
)
from src.cycles.config_loader import TrackerConfig, load_tracker_config
from src.cycles.prediction import FertilityWindow, Prediction
from src.cycles.status import CycleDayInfo
from src.cycles.tracker import CycleTracker

__all__ = [
    "CycleTracker",
    "CycleDayInfo",
    "Prediction",
    "FertilityWindow",
    "TrackerConfig",
    "load_tracker_config",
    "ShetrackError",
    "InvalidRangeError",
    "NotFoundError",
    "CycleNotFoundError",
    "ReminderNotFoundError",
    "PreferenceValidationError",
]

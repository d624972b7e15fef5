"""CycleTracker: the single object UI code talks to.

Reads go through the statistics, prediction and status components; writes go
only through the repository, preference and reminder stores.  Nothing is
global: build one with ``src.main.create_tracker`` or wire the parts by hand.

Usage::

    tracker = create_tracker()
    tracker.add_cycle(date(2024, 1, 1), date(2024, 1, 5))
    tracker.get_predicted_periods(3)
    tracker.get_current_cycle_day_info()
"""

from __future__ import annotations

import logging
from datetime import date

from src.cycles.calendar_view import CalendarView, DayMarkers
from src.cycles.charts import CycleCharts, CycleHistoryPoint, PhaseSlice
from src.cycles.config_loader import TrackerConfig, default_tracker_config
from src.cycles.notifications import CycleNotification, CycleNotifier
from src.cycles.prediction import FertilityWindow, Prediction, PredictionEngine
from src.cycles.preferences import PreferencesStore
from src.cycles.reminders import ReminderStore
from src.cycles.repository import CycleRepository
from src.cycles.statistics import CycleStatistics
from src.cycles.status import CycleDayInfo, CycleStatusResolver
from src.models.cycles import Cycle, DayEntry, Reminder, UserPreferences
from src.services.storage import KeyValueStorage

logger = logging.getLogger("shetrack.cycles.tracker")


class CycleTracker:
    """Facade over the cycle engine for one user.

    Args:
        storage: Persistence backend shared by the three stores.
        config:  Engine configuration; bundled defaults when omitted.
    """

    def __init__(self, storage: KeyValueStorage, config: TrackerConfig | None = None) -> None:
        self._config = config or default_tracker_config()
        keys = self._config.storage
        self.repository = CycleRepository(storage, key=keys.cycles_key)
        self.preferences = PreferencesStore(
            storage, key=keys.preferences_key, limits=self._config.preferences
        )
        self.reminders = ReminderStore(storage, key=keys.reminders_key)
        self.statistics = CycleStatistics(self.repository, self.preferences.get)
        self.prediction = PredictionEngine(self.repository, self.statistics)
        self.status = CycleStatusResolver(self.repository, self.statistics, self.prediction)
        self.notifier = CycleNotifier(
            self.repository, self.statistics, self.prediction, self._config.notifications
        )
        self.calendar = CalendarView(
            self.repository, self.prediction, self._config.forecast.default_cycles_ahead
        )
        self.charts = CycleCharts(self.repository, self.statistics)

    def load(self) -> None:
        """Load all persisted state.  Storage errors propagate."""
        cycles = self.repository.load()
        self.preferences.load()
        reminders = self.reminders.load()
        logger.info("Tracker ready: %d cycle(s), %d reminder(s)", cycles, reminders)

    @property
    def has_unsaved_changes(self) -> bool:
        return (
            self.repository.has_unsaved_changes
            or self.preferences.has_unsaved_changes
            or self.reminders.has_unsaved_changes
        )

    def retry_save(self) -> bool:
        """Retry every store with pending changes.  True when all are saved."""
        stores = (self.repository, self.preferences, self.reminders)
        results = [store.retry_save() for store in stores if store.has_unsaved_changes]
        return all(results)

    # ── Cycles ──

    @property
    def cycles(self) -> tuple[Cycle, ...]:
        return self.repository.cycles

    def add_cycle(
        self, start_date: date, end_date: date, days: list[DayEntry] | None = None
    ) -> Cycle:
        return self.repository.add_cycle(start_date, end_date, days)

    def update_cycle(self, cycle: Cycle) -> Cycle:
        return self.repository.update_cycle(cycle)

    def delete_cycle(self, cycle_id: str) -> None:
        self.repository.delete_cycle(cycle_id)

    def add_note_to_day(self, day: date, note: str) -> bool:
        return self.repository.add_note_to_day(day, note)

    # ── Derived values ──

    def get_average_cycle_length(self) -> int:
        return self.statistics.average_cycle_length()

    def get_average_period_length(self) -> int:
        return self.statistics.average_period_length()

    def get_predicted_periods(self, cycles_ahead: int = 3) -> list[Prediction]:
        return self.prediction.predicted_periods(cycles_ahead)

    def get_fertility_windows(
        self, cycles_ahead: int = 3, as_of: date | None = None
    ) -> list[FertilityWindow]:
        return self.prediction.fertility_windows(cycles_ahead, as_of=as_of)

    def get_current_cycle_day_info(self, as_of: date | None = None) -> CycleDayInfo:
        return self.status.current_cycle_day_info(as_of=as_of)

    def get_notifications(self, as_of: date | None = None) -> list[CycleNotification]:
        return self.notifier.notifications(as_of=as_of)

    def get_month_markers(
        self, year: int, month: int, as_of: date | None = None
    ) -> list[DayMarkers]:
        return self.calendar.month(year, month, as_of=as_of)

    def get_cycle_history(self) -> list[CycleHistoryPoint]:
        return self.charts.cycle_history()

    def get_phase_distribution(self) -> list[PhaseSlice]:
        return self.charts.phase_distribution()

    # ── Preferences ──

    def get_preferences(self) -> UserPreferences:
        return self.preferences.get()

    def update_preferences(self, **changes) -> UserPreferences:
        return self.preferences.update(**changes)

    def complete_onboarding(self) -> UserPreferences:
        return self.preferences.complete_onboarding()

    def get_computed_averages(self) -> tuple[int, int]:
        """(cycle, period) averages from history alone, for showing next to overrides."""
        return (
            self.statistics.computed_average_cycle_length(),
            self.statistics.computed_average_period_length(),
        )

    # ── Reminders ──

    def list_reminders(self) -> list[Reminder]:
        return self.reminders.list_all()

    def add_reminder(self, day: date, title: str, description: str | None = None) -> Reminder:
        return self.reminders.add(day, title, description)

    def update_reminder(self, reminder: Reminder) -> Reminder:
        return self.reminders.update(reminder)

    def toggle_reminder(self, reminder_id: str) -> Reminder:
        return self.reminders.toggle_completed(reminder_id)

    def delete_reminder(self, reminder_id: str) -> None:
        self.reminders.delete(reminder_id)

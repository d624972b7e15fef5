"""Per-day markers for calendar views.

A recorded or predicted period day never also shows fertile or ovulation
markers.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date

from src.cycles.base import date_range
from src.cycles.prediction import FertilityWindow, Prediction, PredictionEngine
from src.cycles.repository import CycleRepository
from src.models.cycles import Cycle, FlowIntensity


@dataclass(frozen=True)
class DayMarkers:
    date: date
    flow: FlowIntensity | None = None
    is_period: bool = False
    is_predicted_period: bool = False
    is_fertile: bool = False
    is_ovulation: bool = False
    is_today: bool = False
    has_notes: bool = False


class CalendarView:
    """Classify dates against recorded cycles and forecasts.

    Args:
        repository:   Recorded cycles.
        prediction:   Forecast source.
        cycles_ahead: Forecast horizon, in cycles.
    """

    def __init__(
        self,
        repository: CycleRepository,
        prediction: PredictionEngine,
        cycles_ahead: int = 3,
    ) -> None:
        self._repository = repository
        self._prediction = prediction
        self._cycles_ahead = cycles_ahead

    def _markers(
        self,
        day: date,
        today: date,
        cycles: tuple[Cycle, ...],
        predictions: list[Prediction],
        windows: list[FertilityWindow],
    ) -> DayMarkers:
        entry = None
        for cycle in cycles:
            entry = cycle.day(day)
            if entry is not None:
                break
        is_period = entry is not None
        is_predicted = any(p.contains(day) for p in predictions)
        is_fertile = is_ovulation = False
        if not is_period and not is_predicted:
            is_fertile = any(w.contains(day) for w in windows)
            is_ovulation = any(w.ovulation_date == day for w in windows)
        return DayMarkers(
            date=day,
            flow=entry.flow if entry else None,
            is_period=is_period,
            is_predicted_period=is_predicted,
            is_fertile=is_fertile,
            is_ovulation=is_ovulation,
            is_today=day == today,
            has_notes=bool(entry and entry.notes),
        )

    def days(self, start: date, end: date, as_of: date | None = None) -> list[DayMarkers]:
        """Markers for every date from ``start`` to ``end`` inclusive."""
        today = as_of or date.today()
        cycles = self._repository.cycles
        predictions = self._prediction.predicted_periods(self._cycles_ahead)
        windows = self._prediction.fertility_windows(self._cycles_ahead, as_of=today)
        return [
            self._markers(day, today, cycles, predictions, windows)
            for day in date_range(start, end)
        ]

    def day_markers(self, day: date, as_of: date | None = None) -> DayMarkers:
        return self.days(day, day, as_of=as_of)[0]

    def month(self, year: int, month: int, as_of: date | None = None) -> list[DayMarkers]:
        """Markers for each day of a calendar month."""
        last = calendar.monthrange(year, month)[1]
        return self.days(date(year, month, 1), date(year, month, last), as_of=as_of)

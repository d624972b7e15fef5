"""Forecast future periods and fertility windows.

Forecasts step forward from the most recent recorded start date in whole
average-cycle-length increments.  ``cycles_ahead`` counts cycles, not
calendar months.

Ovulation is placed ``LUTEAL_PHASE_DAYS`` before a forecast period start and
the fertile window covers the ``FERTILE_LEAD_DAYS`` before ovulation plus the
ovulation day itself.

Nothing here is cached; every call recomputes from the repository.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from src.cycles.base import FERTILE_LEAD_DAYS, LUTEAL_PHASE_DAYS, add_days
from src.cycles.repository import CycleRepository
from src.cycles.statistics import CycleStatistics

logger = logging.getLogger("shetrack.cycles.prediction")


@dataclass(frozen=True)
class Prediction:
    """A forecast period, inclusive on both ends."""

    start_date: date
    end_date: date

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {"startDate": self.start_date.isoformat(), "endDate": self.end_date.isoformat()}


@dataclass(frozen=True)
class FertilityWindow:
    """Predicted ovulation day and the fertile span ending on it.

    Attributes:
        ovulation_date: Estimated ovulation (forecast period start − 14 days).
        fertile_start:  First fertile day (ovulation − 5 days).
        fertile_end:    Last fertile day, equal to the ovulation date.
    """

    ovulation_date: date
    fertile_start: date
    fertile_end: date

    def contains(self, day: date) -> bool:
        return self.fertile_start <= day <= self.fertile_end

    def to_dict(self) -> dict:
        return {
            "ovulationDate": self.ovulation_date.isoformat(),
            "fertileStart": self.fertile_start.isoformat(),
            "fertileEnd": self.fertile_end.isoformat(),
        }


def fertility_window_for(period_start: date) -> FertilityWindow:
    """Fertility window of the cycle that ends just before ``period_start``."""
    ovulation = add_days(period_start, -LUTEAL_PHASE_DAYS)
    return FertilityWindow(
        ovulation_date=ovulation,
        fertile_start=add_days(ovulation, -FERTILE_LEAD_DAYS),
        fertile_end=ovulation,
    )


class PredictionEngine:
    """Project periods and fertility windows from recorded history.

    Usage::

        engine = PredictionEngine(repository, statistics)
        engine.predicted_periods(3)
        engine.fertility_windows(3, as_of=date(2024, 1, 12))
    """

    def __init__(self, repository: CycleRepository, statistics: CycleStatistics) -> None:
        self._repository = repository
        self._statistics = statistics

    def _forecast_starts(self, count: int) -> list[date]:
        latest = self._repository.latest
        if latest is None or count <= 0:
            return []
        step = self._statistics.average_cycle_length()
        starts: list[date] = []
        current = latest.start_date
        for _ in range(count):
            current = add_days(current, step)
            starts.append(current)
        return starts

    def predicted_periods(self, cycles_ahead: int = 3) -> list[Prediction]:
        """Return exactly ``cycles_ahead`` forecasts in chronological order.

        Empty when no cycles are recorded.
        """
        starts = self._forecast_starts(cycles_ahead)
        if not starts:
            return []
        period_length = self._statistics.average_period_length()
        return [
            Prediction(start_date=start, end_date=add_days(start, period_length - 1))
            for start in starts
        ]

    def current_fertility_window(self) -> FertilityWindow | None:
        """Window of the cycle in progress, whether or not it has elapsed."""
        starts = self._forecast_starts(1)
        return fertility_window_for(starts[0]) if starts else None

    def fertility_windows(
        self, cycles_ahead: int = 3, as_of: date | None = None
    ) -> list[FertilityWindow]:
        """Return the current window (if not over yet) plus ``cycles_ahead`` future ones.

        The current cycle's window is kept only when its ``fertile_end`` is
        strictly after ``as_of``.  Future windows are always returned.

        Args:
            cycles_ahead: Number of windows beyond the current cycle.
            as_of:        Reference date (defaults to today).
        """
        today = as_of or date.today()
        starts = self._forecast_starts(cycles_ahead + 1)
        if not starts:
            return []
        current, *future = (fertility_window_for(start) for start in starts)
        windows = [current] if current.fertile_end > today else []
        windows.extend(future)
        logger.debug(
            "Fertility windows as of %s: %d (current %s)",
            today.isoformat(),
            len(windows),
            "included" if windows and windows[0] is current else "elapsed",
        )
        return windows

"""Resolve where a given day sits in the user's current cycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from src.cycles.base import days_between
from src.cycles.prediction import PredictionEngine
from src.cycles.repository import CycleRepository
from src.cycles.statistics import CycleStatistics

logger = logging.getLogger("shetrack.cycles.status")


class CyclePhase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    fertile = "fertile"
    ovulation = "ovulation"
    luteal = "luteal"


@dataclass(frozen=True)
class CycleDayInfo:
    """Status of one day relative to the most recent recorded cycle.

    Attributes:
        current_day:            1-indexed day of cycle, None when there is no
                                history or the latest start is in the future.
        total_days:             Average cycle length in use.
        is_period_day:          The day has an entry in the latest cycle.
        is_fertile_day:         Inside the fertile window, not ovulation day.
        is_ovulation_day:       The predicted ovulation day.
        phase:                  Coarse phase label, None when unknown.
        days_until_next_period: Days to the next forecast start.
    """

    current_day: int | None
    total_days: int
    is_period_day: bool = False
    is_fertile_day: bool = False
    is_ovulation_day: bool = False
    phase: CyclePhase | None = None
    days_until_next_period: int | None = None


class CycleStatusResolver:
    """Answer "what day of my cycle is it" from repository + forecasts."""

    def __init__(
        self,
        repository: CycleRepository,
        statistics: CycleStatistics,
        prediction: PredictionEngine,
    ) -> None:
        self._repository = repository
        self._statistics = statistics
        self._prediction = prediction

    def current_cycle_day_info(self, as_of: date | None = None) -> CycleDayInfo:
        """Compute today's status.

        Args:
            as_of: Reference date (defaults to today).
        """
        today = as_of or date.today()
        total_days = self._statistics.average_cycle_length()
        latest = self._repository.latest
        if latest is None:
            return CycleDayInfo(current_day=None, total_days=total_days)

        since_start = days_between(latest.start_date, today)
        current_day = since_start + 1 if since_start >= 0 else None
        if current_day is None:
            logger.warning(
                "Latest cycle starts %s, after reference date %s",
                latest.start_date.isoformat(),
                today.isoformat(),
            )

        is_period_day = latest.day(today) is not None

        is_ovulation_day = False
        is_fertile_day = False
        window = self._prediction.current_fertility_window()
        if window is not None:
            is_ovulation_day = today == window.ovulation_date
            if not is_ovulation_day:
                is_fertile_day = window.contains(today)

        next_period = self._prediction.predicted_periods(1)
        days_until = days_between(today, next_period[0].start_date) if next_period else None
        phase = self._phase(
            current_day,
            is_period_day,
            is_fertile_day,
            is_ovulation_day,
            window.ovulation_date if window else None,
            today,
        )

        return CycleDayInfo(
            current_day=current_day,
            total_days=total_days,
            is_period_day=is_period_day,
            is_fertile_day=is_fertile_day,
            is_ovulation_day=is_ovulation_day,
            phase=phase,
            days_until_next_period=days_until,
        )

    @staticmethod
    def _phase(
        current_day: int | None,
        is_period_day: bool,
        is_fertile_day: bool,
        is_ovulation_day: bool,
        ovulation_date: date | None,
        today: date,
    ) -> CyclePhase | None:
        if current_day is None:
            return None
        if is_period_day:
            return CyclePhase.menstrual
        if is_ovulation_day:
            return CyclePhase.ovulation
        if is_fertile_day:
            return CyclePhase.fertile
        if ovulation_date is not None and today > ovulation_date:
            return CyclePhase.luteal
        return CyclePhase.follicular

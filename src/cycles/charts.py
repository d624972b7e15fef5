"""Data series for the cycle history and phase distribution charts."""

from __future__ import annotations

from dataclasses import dataclass

from src.cycles.base import FERTILE_WINDOW_DAYS, days_between
from src.cycles.repository import CycleRepository
from src.cycles.statistics import CycleStatistics


@dataclass(frozen=True)
class CycleHistoryPoint:
    label: str  # month abbreviation of the cycle start, e.g. "Jan"
    cycle_length: int
    period_length: int


@dataclass(frozen=True)
class PhaseSlice:
    name: str
    days: int


class CycleCharts:
    def __init__(self, repository: CycleRepository, statistics: CycleStatistics) -> None:
        self._repository = repository
        self._statistics = statistics

    def cycle_history(self) -> list[CycleHistoryPoint]:
        """One point per recorded cycle, oldest first.

        Completed cycles use the measured start-to-start length.  The latest
        cycle has no successor yet and is plotted with the average length.
        """
        cycles = self._repository.cycles
        points = [
            CycleHistoryPoint(
                label=previous.start_date.strftime("%b"),
                cycle_length=days_between(previous.start_date, current.start_date),
                period_length=previous.period_length,
            )
            for previous, current in zip(cycles, cycles[1:])
        ]
        if cycles:
            latest = cycles[-1]
            points.append(
                CycleHistoryPoint(
                    label=latest.start_date.strftime("%b"),
                    cycle_length=self._statistics.average_cycle_length(),
                    period_length=latest.period_length,
                )
            )
        return points

    def phase_distribution(self) -> list[PhaseSlice]:
        """Split the average cycle into period, fertile window and other days."""
        cycle_length = self._statistics.average_cycle_length()
        period_length = self._statistics.average_period_length()
        other = max(0, cycle_length - period_length - FERTILE_WINDOW_DAYS)
        return [
            PhaseSlice("Period", period_length),
            PhaseSlice("Fertile Window", FERTILE_WINDOW_DAYS),
            PhaseSlice("Other Days", other),
        ]

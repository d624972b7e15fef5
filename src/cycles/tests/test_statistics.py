"""Tests for average cycle / period length."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.cycles.base import round_half_up
from src.cycles.preferences import PreferencesStore
from src.cycles.repository import CycleRepository
from src.cycles.statistics import CycleStatistics


def add_period(repo: CycleRepository, start: date, length: int = 5):
    return repo.add_cycle(start, start + timedelta(days=length - 1))


class TestAverageCycleLength:
    def test_default_without_history(self, statistics: CycleStatistics) -> None:
        assert statistics.average_cycle_length() == 28

    def test_default_with_single_cycle(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        add_period(repository, date(2024, 1, 1))
        assert statistics.average_cycle_length() == 28

    def test_two_cycles_28_days_apart(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        add_period(repository, date(2024, 1, 1))
        add_period(repository, date(2024, 1, 29))
        assert statistics.average_cycle_length() == 28

    def test_averages_gaps(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        add_period(repository, date(2024, 1, 1))
        add_period(repository, date(2024, 1, 27))   # 26
        add_period(repository, date(2024, 2, 27))   # 31
        assert statistics.average_cycle_length() == 29  # 28.5 rounds up

    def test_gap_of_65_days_excluded(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        add_period(repository, date(2024, 1, 1))
        add_period(repository, date(2024, 1, 31))   # 30
        add_period(repository, date(2024, 4, 5))    # 65, excluded
        assert statistics.average_cycle_length() == 30

    def test_gap_of_exactly_60_excluded(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        add_period(repository, date(2024, 1, 1))
        add_period(repository, date(2024, 3, 1))    # 60
        assert statistics.average_cycle_length() == 28

    def test_same_day_starts_excluded(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        add_period(repository, date(2024, 1, 1))
        add_period(repository, date(2024, 1, 1))
        add_period(repository, date(2024, 1, 25))   # 24
        assert statistics.average_cycle_length() == 24

    def test_override_wins(
        self,
        repository: CycleRepository,
        preferences: PreferencesStore,
        statistics: CycleStatistics,
    ) -> None:
        add_period(repository, date(2024, 1, 1))
        add_period(repository, date(2024, 1, 25))
        preferences.update(average_cycle_length=35)
        assert statistics.average_cycle_length() == 35
        assert statistics.computed_average_cycle_length() == 24


class TestAveragePeriodLength:
    def test_default_without_history(self, statistics: CycleStatistics) -> None:
        assert statistics.average_period_length() == 5

    def test_single_five_day_period(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        repository.add_cycle(date(2024, 1, 1), date(2024, 1, 5))
        assert statistics.average_period_length() == 5

    def test_twenty_day_period_excluded_but_counted(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        add_period(repository, date(2024, 1, 1), length=6)
        add_period(repository, date(2024, 1, 29), length=6)
        add_period(repository, date(2024, 2, 26), length=20)
        # (6 + 6) / 3 cycles, the 20-day entry contributes nothing to the sum
        assert statistics.average_period_length() == 4

    def test_all_filtered_returns_default(
        self, repository: CycleRepository, statistics: CycleStatistics
    ) -> None:
        add_period(repository, date(2024, 1, 1), length=20)
        assert statistics.average_period_length() == 5

    def test_override_wins(
        self,
        repository: CycleRepository,
        preferences: PreferencesStore,
        statistics: CycleStatistics,
    ) -> None:
        add_period(repository, date(2024, 1, 1), length=4)
        preferences.update(average_period_length=7)
        assert statistics.average_period_length() == 7
        assert statistics.computed_average_period_length() == 4

    def test_cleared_override_falls_back(
        self,
        repository: CycleRepository,
        preferences: PreferencesStore,
        statistics: CycleStatistics,
    ) -> None:
        add_period(repository, date(2024, 1, 1), length=4)
        preferences.update(average_period_length=7)
        preferences.clear_overrides()
        assert statistics.average_period_length() == 4


@pytest.mark.parametrize(
    "value, expected",
    [(28.0, 28), (28.4, 28), (28.5, 29), (27.5, 28), (4.5, 5), (4.49, 4)],
)
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected

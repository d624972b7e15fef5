"""Average cycle and period length from recorded history.

An explicit override in UserPreferences always wins.  Otherwise the averages
are plain arithmetic means with an outlier filter; both functions fall back
to fixed defaults rather than raising on thin data.

Note the two averages use different denominators: cycle length divides by
the number of gaps that survive filtering, period length divides by the
total number of cycles.
"""

from __future__ import annotations

import logging
from typing import Callable

from src.cycles.base import (
    DEFAULT_CYCLE_LENGTH,
    DEFAULT_PERIOD_LENGTH,
    MAX_CYCLE_GAP_DAYS,
    MAX_PERIOD_DAYS,
    days_between,
    round_half_up,
)
from src.cycles.repository import CycleRepository
from src.models.cycles import Cycle, UserPreferences

logger = logging.getLogger("shetrack.cycles.statistics")


def cycle_gaps(cycles: list[Cycle] | tuple[Cycle, ...]) -> list[int]:
    """Start-to-start gaps between consecutive cycles that pass the outlier filter."""
    gaps: list[int] = []
    for previous, current in zip(cycles, cycles[1:]):
        gap = days_between(previous.start_date, current.start_date)
        if 0 < gap < MAX_CYCLE_GAP_DAYS:
            gaps.append(gap)
    return gaps


def compute_average_cycle_length(cycles: list[Cycle] | tuple[Cycle, ...]) -> int:
    if len(cycles) < 2:
        return DEFAULT_CYCLE_LENGTH
    gaps = cycle_gaps(cycles)
    if not gaps:
        return DEFAULT_CYCLE_LENGTH
    return round_half_up(sum(gaps) / len(gaps))


def compute_average_period_length(cycles: list[Cycle] | tuple[Cycle, ...]) -> int:
    if not cycles:
        return DEFAULT_PERIOD_LENGTH
    total = 0
    contributions = 0
    for cycle in cycles:
        length = cycle.period_length
        if 0 < length < MAX_PERIOD_DAYS:
            total += length
            contributions += 1
    if not contributions:
        return DEFAULT_PERIOD_LENGTH
    # Divides by every cycle, filtered or not.
    return round_half_up(total / len(cycles))


class CycleStatistics:
    """Averages over a CycleRepository, honouring preference overrides.

    Args:
        repository:  Source of recorded cycles.
        preferences: Callable returning the current UserPreferences (usually
                     ``PreferencesStore.get``).  None means no overrides.
    """

    def __init__(
        self,
        repository: CycleRepository,
        preferences: Callable[[], UserPreferences] | None = None,
    ) -> None:
        self._repository = repository
        self._preferences = preferences or UserPreferences

    def average_cycle_length(self) -> int:
        override = self._preferences().average_cycle_length
        if override is not None:
            return override
        return compute_average_cycle_length(self._repository.cycles)

    def average_period_length(self) -> int:
        override = self._preferences().average_period_length
        if override is not None:
            return override
        return compute_average_period_length(self._repository.cycles)

    def computed_average_cycle_length(self) -> int:
        """Average from history only, ignoring any override."""
        return compute_average_cycle_length(self._repository.cycles)

    def computed_average_period_length(self) -> int:
        return compute_average_period_length(self._repository.cycles)

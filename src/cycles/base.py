"""Design constants, exceptions and date helpers shared by the cycle engine.

The numeric constants below are fixed by design.  The only way to change the
averages the engine works with is an explicit override in UserPreferences.
"""

from __future__ import annotations

import math
from datetime import date, timedelta

# Fallbacks when there is not enough history to average.
DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5

# Outlier filters: values outside (0, limit) are ignored when averaging.
MAX_CYCLE_GAP_DAYS = 60
MAX_PERIOD_DAYS = 15

# Ovulation is placed this many days before the next period start.
LUTEAL_PHASE_DAYS = 14
# Days of the fertile window that precede ovulation.
FERTILE_LEAD_DAYS = 5
FERTILE_WINDOW_DAYS = FERTILE_LEAD_DAYS + 1


class ShetrackError(Exception):
    """Base class for all engine errors."""


class InvalidRangeError(ShetrackError, ValueError):
    """Raised when a cycle's end date precedes its start date, or a day
    entry falls outside the cycle it is attached to."""


class NotFoundError(ShetrackError, LookupError):
    """Raised when an update or delete targets an unknown id."""


class CycleNotFoundError(NotFoundError):
    pass


class ReminderNotFoundError(NotFoundError):
    pass


class PreferenceValidationError(ShetrackError, ValueError):
    """Raised when a preference override is outside its allowed range."""


def days_between(start: date, end: date) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start).days


def add_days(day: date, n: int) -> date:
    return day + timedelta(days=n)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values.

    Unlike the builtin ``round``, 28.5 becomes 29.
    """
    return int(math.floor(value + 0.5))


def date_range(start: date, end: date) -> list[date]:
    """Every date from ``start`` to ``end`` inclusive."""
    return [add_days(start, i) for i in range(days_between(start, end) + 1)]

"""Upcoming-event notifications derived from the latest cycle.

Four kinds are produced, each with a lead time from ``NotificationConfig``:

- period_start:      next period is 1..period_lead_days away
- ovulation:         ovulation is 0..ovulation_lead_days away
- fertility_start:   fertile window opens 0..fertile_lead_days away
- fertility_current: the reference day is strictly inside the fertile window

Notification ids are derived from the event date so a UI can remember which
ones were dismissed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from src.cycles.base import add_days, days_between
from src.cycles.config_loader import NotificationConfig
from src.cycles.prediction import PredictionEngine
from src.cycles.repository import CycleRepository
from src.cycles.statistics import CycleStatistics

logger = logging.getLogger("shetrack.cycles.notifications")


class NotificationKind(str, Enum):
    period_start = "period-start"
    ovulation = "ovulation"
    fertility_start = "fertility-start"
    fertility_current = "fertility-current"


@dataclass(frozen=True)
class CycleNotification:
    id: str
    kind: NotificationKind
    message: str
    date: date
    is_read: bool = False


def _plural(n: int) -> str:
    return "day" if n == 1 else "days"


class CycleNotifier:
    def __init__(
        self,
        repository: CycleRepository,
        statistics: CycleStatistics,
        prediction: PredictionEngine,
        config: NotificationConfig | None = None,
    ) -> None:
        self._repository = repository
        self._statistics = statistics
        self._prediction = prediction
        self._config = config or NotificationConfig()

    def notifications(self, as_of: date | None = None) -> list[CycleNotification]:
        """Notifications due on ``as_of`` (defaults to today).

        Empty when notifications are disabled or nothing is recorded.
        """
        cfg = self._config
        today = as_of or date.today()
        latest = self._repository.latest
        if not cfg.enabled or latest is None:
            return []

        result: list[CycleNotification] = []

        next_start = add_days(latest.start_date, self._statistics.average_cycle_length())
        until_period = days_between(today, next_start)
        if 0 < until_period <= cfg.period_lead_days:
            result.append(
                CycleNotification(
                    id=f"period-{next_start.isoformat()}",
                    kind=NotificationKind.period_start,
                    message=(
                        f"Your next period is expected to start in "
                        f"{until_period} {_plural(until_period)}."
                    ),
                    date=next_start,
                )
            )

        window = self._prediction.current_fertility_window()
        if window is None:
            return result

        until_ovulation = days_between(today, window.ovulation_date)
        if 0 <= until_ovulation <= cfg.ovulation_lead_days:
            message = (
                "Today is your estimated ovulation day."
                if until_ovulation == 0
                else f"Your estimated ovulation is in {until_ovulation} {_plural(until_ovulation)}."
            )
            result.append(
                CycleNotification(
                    id=f"ovulation-{window.ovulation_date.isoformat()}",
                    kind=NotificationKind.ovulation,
                    message=message,
                    date=window.ovulation_date,
                )
            )

        until_fertile = days_between(today, window.fertile_start)
        if 0 <= until_fertile <= cfg.fertile_lead_days:
            if until_fertile == 0:
                message = "Your fertile window begins today."
            elif until_fertile == 1:
                message = "Your fertile window begins tomorrow."
            else:
                message = f"Your fertile window begins in {until_fertile} days."
            result.append(
                CycleNotification(
                    id=f"fertility-start-{window.fertile_start.isoformat()}",
                    kind=NotificationKind.fertility_start,
                    message=message,
                    date=window.fertile_start,
                )
            )

        if window.fertile_start < today < window.fertile_end:
            result.append(
                CycleNotification(
                    id=f"fertility-current-{window.fertile_start.isoformat()}",
                    kind=NotificationKind.fertility_current,
                    message="You are currently in your fertile window.",
                    date=today,
                )
            )

        logger.debug("%d notification(s) due on %s", len(result), today.isoformat())
        return result

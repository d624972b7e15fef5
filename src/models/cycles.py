"""Pydantic models for recorded cycles, per-day details, user preferences
and reminders.

These are the persisted entities.  Derived values (predictions, fertility
windows, cycle-day status) are plain dataclasses in ``src.cycles``.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import Field, field_validator

from src.models.base import ShetrackBase


def new_id() -> str:
    return uuid.uuid4().hex


# ---------- Enums ----------

class FlowIntensity(str, Enum):
    light = "light"
    medium = "medium"
    heavy = "heavy"
    spotting = "spotting"
    none = "none"


class Mood(str, Enum):
    happy = "happy"
    neutral = "neutral"
    sad = "sad"


# ---------- Cycles ----------

class DayEntry(ShetrackBase):
    """One recorded day inside a period."""

    date: date
    flow: FlowIntensity = FlowIntensity.medium
    symptoms: list[str] = Field(default_factory=list)
    mood: Mood | None = None
    notes: list[str] = Field(default_factory=list)

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_legacy_note(cls, value):
        # Older records stored a single free-text note per day.
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value


class Cycle(ShetrackBase):
    """One observed menstrual period.

    Attributes:
        id:           Stable identifier, never reused.
        start_date:   First day of bleeding.
        end_date:     Last day of bleeding (inclusive).
        days:         Per-day records between start_date and end_date.
        cycle_length: Days since the previous cycle's start.  Maintained by
                      the repository; None for the earliest cycle.
        notes:        Free text attached to the whole cycle.
    """

    id: str = Field(default_factory=new_id)
    start_date: date
    end_date: date
    days: list[DayEntry] = Field(default_factory=list)
    cycle_length: int | None = None
    notes: str | None = None

    @property
    def period_length(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def day(self, day: date) -> DayEntry | None:
        for entry in self.days:
            if entry.date == day:
                return entry
        return None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_storage(self) -> dict:
        data = super().to_storage()
        data["periodLength"] = self.period_length
        return data


# ---------- Preferences ----------

class UserPreferences(ShetrackBase):
    """Explicit overrides for the computed averages plus onboarding state."""

    average_cycle_length: int | None = Field(default=None, ge=1)
    average_period_length: int | None = Field(default=None, ge=1)
    last_updated: datetime | None = None
    is_onboarding_complete: bool = False


# ---------- Reminders ----------

class Reminder(ShetrackBase):
    id: str = Field(default_factory=new_id)
    date: date
    title: str = Field(min_length=1)
    description: str | None = None
    completed: bool = False

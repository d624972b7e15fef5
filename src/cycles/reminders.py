"""Reminder CRUD, persisted as-is.  No derived logic beyond list ordering."""

from __future__ import annotations

import logging
import threading
from datetime import date

from pydantic import ValidationError

from src.cycles.base import ReminderNotFoundError
from src.models.cycles import Reminder
from src.services.storage import KeyValueStorage, StorageError

logger = logging.getLogger("shetrack.cycles.reminders")


class ReminderStore:
    def __init__(self, storage: KeyValueStorage, key: str = "shetrack-reminders") -> None:
        self._storage = storage
        self._key = key
        self._reminders: list[Reminder] = []
        self._lock = threading.RLock()
        self._unsaved = False

    def load(self) -> int:
        """Read stored reminders.

        Raises:
            StorageError: If the backend fails or the stored value is malformed.
        """
        raw = self._storage.load(self._key) or []
        if not isinstance(raw, list):
            raise StorageError(f"Stored value for {self._key!r} is not a list")
        try:
            reminders = [Reminder.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise StorageError(f"Malformed reminder data under {self._key!r}: {exc}") from exc
        with self._lock:
            self._reminders = reminders
            self._unsaved = False
        return len(reminders)

    def _save(self) -> bool:
        try:
            self._storage.save(self._key, [r.to_storage() for r in self._reminders])
        except StorageError as exc:
            self._unsaved = True
            logger.warning("Reminder changes not saved, retry later: %s", exc)
            return False
        self._unsaved = False
        return True

    @property
    def has_unsaved_changes(self) -> bool:
        return self._unsaved

    def retry_save(self) -> bool:
        """Write the current reminders again after a failed save."""
        with self._lock:
            return self._save()

    def _index(self, reminder_id: str) -> int:
        for index, reminder in enumerate(self._reminders):
            if reminder.id == reminder_id:
                return index
        raise ReminderNotFoundError(f"No reminder with id {reminder_id!r}")

    def list_all(self) -> list[Reminder]:
        """Incomplete reminders first, each group ordered by date."""
        with self._lock:
            ordered = sorted(self._reminders, key=lambda r: (r.completed, r.date))
            return [r.model_copy() for r in ordered]

    def get(self, reminder_id: str) -> Reminder:
        with self._lock:
            return self._reminders[self._index(reminder_id)].model_copy()

    def add(self, day: date, title: str, description: str | None = None) -> Reminder:
        """Create a reminder.

        Raises:
            pydantic.ValidationError: ``title`` is empty.
        """
        reminder = Reminder(date=day, title=title, description=description or None)
        with self._lock:
            self._reminders.append(reminder)
            self._save()
        logger.info("Added reminder %s for %s", reminder.id, day.isoformat())
        return reminder.model_copy()

    def update(self, reminder: Reminder) -> Reminder:
        with self._lock:
            self._reminders[self._index(reminder.id)] = reminder.model_copy()
            self._save()
        return reminder.model_copy()

    def toggle_completed(self, reminder_id: str) -> Reminder:
        with self._lock:
            index = self._index(reminder_id)
            current = self._reminders[index]
            toggled = current.model_copy(update={"completed": not current.completed})
            self._reminders[index] = toggled
            self._save()
            return toggled.model_copy()

    def delete(self, reminder_id: str) -> None:
        with self._lock:
            del self._reminders[self._index(reminder_id)]
            self._save()
        logger.info("Deleted reminder %s", reminder_id)

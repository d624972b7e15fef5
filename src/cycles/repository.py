"""In-memory, write-through repository of recorded cycles.

The collection is always sorted ascending by start date and every cycle's
``cycle_length`` is recomputed from its immediate predecessor after each
mutation.  Mutations rewrite the whole collection, so they are serialized
with a re-entrant lock.

Persistence failures follow two rules:

- ``load()`` propagates ``StorageError``; the repository cannot start
  without its persisted state.
- A failed save after a mutation is logged and remembered
  (``has_unsaved_changes``); the in-memory change stays in place and
  ``retry_save()`` can be called later.
"""

from __future__ import annotations

import logging
import threading
from datetime import date

from pydantic import ValidationError

from src.cycles.base import CycleNotFoundError, InvalidRangeError, days_between
from src.models.cycles import Cycle, DayEntry, new_id
from src.services.storage import KeyValueStorage, StorageError

logger = logging.getLogger("shetrack.cycles.repository")


def recompute_cycle_lengths(cycles: list[Cycle]) -> list[Cycle]:
    """Sort ``cycles`` by start date and refresh every ``cycle_length``.

    Returns a new list; the cycle objects themselves are updated in place.
    """
    ordered = sorted(cycles, key=lambda c: c.start_date)
    previous: Cycle | None = None
    for cycle in ordered:
        cycle.cycle_length = (
            days_between(previous.start_date, cycle.start_date) if previous else None
        )
        previous = cycle
    return ordered


def _check_range(start_date: date, end_date: date, days: list[DayEntry]) -> None:
    if end_date < start_date:
        raise InvalidRangeError(
            f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}"
        )
    seen: set[date] = set()
    for entry in days:
        if not start_date <= entry.date <= end_date:
            raise InvalidRangeError(
                f"Day {entry.date.isoformat()} is outside the cycle "
                f"{start_date.isoformat()}..{end_date.isoformat()}"
            )
        if entry.date in seen:
            raise InvalidRangeError(f"Day {entry.date.isoformat()} is recorded more than once")
        seen.add(entry.date)


class CycleRepository:
    """Owns the list of recorded cycles and persists it through ``storage``.

    Usage::

        repo = CycleRepository(JsonFileStorage(data_dir))
        repo.load()
        cycle = repo.add_cycle(date(2024, 1, 1), date(2024, 1, 5))
        repo.latest.start_date
    """

    def __init__(self, storage: KeyValueStorage, key: str = "shetrack-cycles") -> None:
        self._storage = storage
        self._key = key
        self._cycles: list[Cycle] = []
        self._lock = threading.RLock()
        self._unsaved = False

    # ------------------------------------------------------------------
    # Loading / saving
    # ------------------------------------------------------------------

    def load(self) -> int:
        """Read the persisted collection, replacing anything in memory.

        Returns:
            Number of cycles loaded.

        Raises:
            StorageError: If the storage backend fails or holds malformed data.
        """
        raw = self._storage.load(self._key)
        if raw is None:
            records: list[Cycle] = []
        else:
            if not isinstance(raw, list):
                raise StorageError(f"Stored value for {self._key!r} is not a list")
            try:
                records = [Cycle.model_validate(item) for item in raw]
            except ValidationError as exc:
                raise StorageError(f"Malformed cycle data under {self._key!r}: {exc}") from exc
        with self._lock:
            self._cycles = recompute_cycle_lengths(records)
            self._unsaved = False
        logger.info("Loaded %d cycle(s) from %s", len(records), self._key)
        return len(records)

    def _persist(self) -> bool:
        payload = [c.to_storage() for c in self._cycles]
        try:
            self._storage.save(self._key, payload)
        except StorageError as exc:
            self._unsaved = True
            logger.warning("Cycle changes not saved, retry later: %s", exc)
            return False
        self._unsaved = False
        return True

    @property
    def has_unsaved_changes(self) -> bool:
        return self._unsaved

    def retry_save(self) -> bool:
        """Write the current collection again after a failed save."""
        with self._lock:
            return self._persist()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def cycles(self) -> tuple[Cycle, ...]:
        """Copies of all cycles, oldest first."""
        with self._lock:
            return tuple(c.model_copy(deep=True) for c in self._cycles)

    @property
    def latest(self) -> Cycle | None:
        """The most recent cycle by start date."""
        with self._lock:
            return self._cycles[-1].model_copy(deep=True) if self._cycles else None

    def __len__(self) -> int:
        return len(self._cycles)

    def get(self, cycle_id: str) -> Cycle:
        with self._lock:
            for cycle in self._cycles:
                if cycle.id == cycle_id:
                    return cycle.model_copy(deep=True)
        raise CycleNotFoundError(f"No cycle with id {cycle_id!r}")

    def find_day(self, day: date) -> DayEntry | None:
        """Return the first recorded day entry for ``day`` across all cycles."""
        with self._lock:
            for cycle in self._cycles:
                entry = cycle.day(day)
                if entry is not None:
                    return entry.model_copy(deep=True)
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_cycle(
        self,
        start_date: date,
        end_date: date,
        days: list[DayEntry] | None = None,
    ) -> Cycle:
        """Record a new period.

        Raises:
            InvalidRangeError: ``end_date`` precedes ``start_date``, a day
                entry lies outside the range, or two entries share a date.
        """
        entries = sorted((d.model_copy(deep=True) for d in days or []), key=lambda d: d.date)
        _check_range(start_date, end_date, entries)
        with self._lock:
            existing = {c.id for c in self._cycles}
            cycle_id = new_id()
            while cycle_id in existing:
                cycle_id = new_id()
            cycle = Cycle(id=cycle_id, start_date=start_date, end_date=end_date, days=entries)
            self._cycles = recompute_cycle_lengths([*self._cycles, cycle])
            self._persist()
            logger.info(
                "Added cycle %s (%s..%s)", cycle_id, start_date.isoformat(), end_date.isoformat()
            )
            return cycle.model_copy(deep=True)

    def update_cycle(self, cycle: Cycle) -> Cycle:
        """Replace the stored cycle with the same id.

        Raises:
            CycleNotFoundError: No stored cycle has ``cycle.id``.
            InvalidRangeError:  The new dates are inverted or the day entries
                                are out of range or duplicated.
        """
        replacement = cycle.model_copy(deep=True)
        replacement.days = sorted(replacement.days, key=lambda d: d.date)
        _check_range(replacement.start_date, replacement.end_date, replacement.days)
        with self._lock:
            for index, stored in enumerate(self._cycles):
                if stored.id == replacement.id:
                    break
            else:
                raise CycleNotFoundError(f"No cycle with id {cycle.id!r}")
            updated = list(self._cycles)
            updated[index] = replacement
            self._cycles = recompute_cycle_lengths(updated)
            self._persist()
            logger.info("Updated cycle %s", replacement.id)
            return replacement.model_copy(deep=True)

    def delete_cycle(self, cycle_id: str) -> None:
        """Remove a cycle.

        Raises:
            CycleNotFoundError: No stored cycle has ``cycle_id``.
        """
        with self._lock:
            remaining = [c for c in self._cycles if c.id != cycle_id]
            if len(remaining) == len(self._cycles):
                raise CycleNotFoundError(f"No cycle with id {cycle_id!r}")
            self._cycles = recompute_cycle_lengths(remaining)
            self._persist()
            logger.info("Deleted cycle %s", cycle_id)

    def add_note_to_day(self, day: date, note: str) -> bool:
        """Append ``note`` to the recorded day entry for ``day``.

        Returns:
            True if at least one day entry was updated, False (nothing
            written) if no cycle has an entry for that date.
        """
        with self._lock:
            touched = 0
            for cycle in self._cycles:
                entry = cycle.day(day)
                if entry is not None:
                    entry.notes = [*entry.notes, note]
                    touched += 1
            if not touched:
                logger.debug("No recorded day for %s, note dropped", day.isoformat())
                return False
            self._persist()
            return True

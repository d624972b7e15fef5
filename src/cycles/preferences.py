"""User preference overrides and onboarding state."""

from __future__ import annotations

import logging
import threading

from pydantic import ValidationError

from src.cycles.base import PreferenceValidationError
from src.cycles.config_loader import PreferenceLimitsConfig
from src.models.base import utc_now
from src.models.cycles import UserPreferences
from src.services.storage import KeyValueStorage, StorageError

logger = logging.getLogger("shetrack.cycles.preferences")

# Sentinel so ``update(average_cycle_length=None)`` can clear an override.
_UNSET = object()


class PreferencesStore:
    """Write-through store for the single UserPreferences record."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = "shetrack-preferences",
        limits: PreferenceLimitsConfig | None = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._limits = limits or PreferenceLimitsConfig()
        self._prefs = UserPreferences()
        self._lock = threading.RLock()
        self._unsaved = False

    def load(self) -> UserPreferences:
        """Read stored preferences.

        Raises:
            StorageError: If the backend fails, the stored value is malformed,
                or an override lies outside the configured range.
        """
        raw = self._storage.load(self._key)
        try:
            prefs = UserPreferences.model_validate(raw) if raw is not None else UserPreferences()
            self._check(prefs.average_cycle_length, self._limits.cycle_length_range, "Cycle length")
            self._check(
                prefs.average_period_length, self._limits.period_length_range, "Period length"
            )
        except (ValidationError, PreferenceValidationError) as exc:
            raise StorageError(f"Malformed preferences under {self._key!r}: {exc}") from exc
        with self._lock:
            self._prefs = prefs
            self._unsaved = False
        return self.get()

    def get(self) -> UserPreferences:
        with self._lock:
            return self._prefs.model_copy()

    def _save(self) -> bool:
        try:
            self._storage.save(self._key, self._prefs.to_storage())
        except StorageError as exc:
            self._unsaved = True
            logger.warning("Preferences not saved, retry later: %s", exc)
            return False
        self._unsaved = False
        return True

    @property
    def has_unsaved_changes(self) -> bool:
        return self._unsaved

    def retry_save(self) -> bool:
        """Write the current preferences again after a failed save."""
        with self._lock:
            return self._save()

    def _check(self, value: int | None, bounds: tuple[int, int], label: str) -> None:
        if value is None:
            return
        low, high = bounds
        if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
            raise PreferenceValidationError(
                f"{label} must be a whole number between {low} and {high}, got {value!r}"
            )

    def update(
        self,
        average_cycle_length: int | None | object = _UNSET,
        average_period_length: int | None | object = _UNSET,
    ) -> UserPreferences:
        """Set (or clear with None) the average overrides.

        Raises:
            PreferenceValidationError: A value is outside the configured range.
        """
        changes: dict = {}
        if average_cycle_length is not _UNSET:
            self._check(average_cycle_length, self._limits.cycle_length_range, "Cycle length")
            changes["average_cycle_length"] = average_cycle_length
        if average_period_length is not _UNSET:
            self._check(average_period_length, self._limits.period_length_range, "Period length")
            changes["average_period_length"] = average_period_length
        with self._lock:
            self._prefs = self._prefs.model_copy(update={**changes, "last_updated": utc_now()})
            self._save()
            logger.info("Preferences updated: %s", sorted(changes))
            return self._prefs.model_copy()

    def clear_overrides(self) -> UserPreferences:
        """Drop both overrides so the computed averages apply again."""
        return self.update(average_cycle_length=None, average_period_length=None)

    def complete_onboarding(self) -> UserPreferences:
        with self._lock:
            self._prefs = self._prefs.model_copy(
                update={"is_onboarding_complete": True, "last_updated": utc_now()}
            )
            self._save()
            return self._prefs.model_copy()

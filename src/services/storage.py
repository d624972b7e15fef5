"""Local key-value persistence for cycles, reminders and preferences.

The engine never talks to disk directly: every store receives a
``KeyValueStorage`` and calls ``load`` once at startup and ``save`` after each
mutation.  Values are JSON-compatible structures (dicts, lists, strings).

``JsonFileStorage`` keeps one JSON document per key inside a data directory.
Writes go to a temporary file first and are moved into place with
``os.replace``.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

logger = logging.getLogger("shetrack.storage")

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(RuntimeError):
    """Raised when the storage backend cannot read or write a key."""


class KeyValueStorage(ABC):
    """Abstract load/save capability injected into every store."""

    @abstractmethod
    def load(self, key: str) -> Any | None:
        """Return the stored value for ``key`` or None when absent."""

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Persist ``value`` under ``key``, replacing any previous value."""


class InMemoryStorage(KeyValueStorage):
    """Dict-backed storage.  Values are deep-copied in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStorage(KeyValueStorage):
    """One ``<key>.json`` file per key under ``directory``.

    Args:
        directory: Data directory.  Created on first save if missing.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def load(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            logger.debug("No stored value for %s at %s", key, path)
            return None
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Failed to read {key!r} from {path}: {exc}") from exc

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=self._directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(value, fh, indent=2, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"Failed to write {key!r} to {path}: {exc}") from exc
        logger.debug("Saved %s to %s", key, path)

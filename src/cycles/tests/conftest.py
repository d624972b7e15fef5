"""Shared fixtures for cycle engine tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.cycles.config_loader import TrackerConfig, load_tracker_config
from src.cycles.prediction import PredictionEngine
from src.cycles.preferences import PreferencesStore
from src.cycles.repository import CycleRepository
from src.cycles.statistics import CycleStatistics
from src.cycles.status import CycleStatusResolver
from src.cycles.tracker import CycleTracker
from src.models.cycles import DayEntry, FlowIntensity
from src.services.storage import InMemoryStorage, StorageError

TEST_DATE = date(2024, 1, 12)


def make_days(start: date, end: date, flow: FlowIntensity = FlowIntensity.medium) -> list[DayEntry]:
    """One DayEntry per date from start to end inclusive."""
    return [
        DayEntry(date=start + timedelta(days=i), flow=flow)
        for i in range((end - start).days + 1)
    ]


class FailingStorage(InMemoryStorage):
    """Storage whose saves fail while ``fail_saves`` is True."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_saves = False
        self.fail_loads = False

    def save(self, key, value) -> None:
        if self.fail_saves:
            raise StorageError("disk full")
        super().save(key, value)

    def load(self, key):
        if self.fail_loads:
            raise StorageError("device storage unavailable")
        return super().load(key)


# ---------------------------------------------------------------------------
# Config / storage
# ---------------------------------------------------------------------------


@pytest.fixture
def tracker_config() -> TrackerConfig:
    """Load the real bundled tracker config."""
    return load_tracker_config()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()


# ---------------------------------------------------------------------------
# Engine components
# ---------------------------------------------------------------------------


@pytest.fixture
def repository(storage: InMemoryStorage) -> CycleRepository:
    return CycleRepository(storage)


@pytest.fixture
def preferences(storage: InMemoryStorage) -> PreferencesStore:
    return PreferencesStore(storage)


@pytest.fixture
def statistics(repository: CycleRepository, preferences: PreferencesStore) -> CycleStatistics:
    return CycleStatistics(repository, preferences.get)


@pytest.fixture
def engine(repository: CycleRepository, statistics: CycleStatistics) -> PredictionEngine:
    return PredictionEngine(repository, statistics)


@pytest.fixture
def resolver(
    repository: CycleRepository,
    statistics: CycleStatistics,
    engine: PredictionEngine,
) -> CycleStatusResolver:
    return CycleStatusResolver(repository, statistics, engine)


@pytest.fixture
def tracker(storage: InMemoryStorage, tracker_config: TrackerConfig) -> CycleTracker:
    t = CycleTracker(storage, tracker_config)
    t.load()
    return t


@pytest.fixture
def january_cycle(repository: CycleRepository):
    """A single recorded period, 2024-01-01..05, with day entries."""
    return repository.add_cycle(
        date(2024, 1, 1), date(2024, 1, 5), make_days(date(2024, 1, 1), date(2024, 1, 5))
    )

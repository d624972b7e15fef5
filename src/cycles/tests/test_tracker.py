"""End-to-end tests through the CycleTracker facade and JSON file storage."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from src.config import Settings
from src.cycles.base import CycleNotFoundError
from src.cycles.tracker import CycleTracker
from src.cycles.tests.conftest import make_days
from src.main import create_tracker
from src.services.storage import JsonFileStorage, StorageError


class TestJsonFileStorage:
    def test_missing_key_loads_none(self, tmp_path: Path) -> None:
        assert JsonFileStorage(tmp_path).load("shetrack-cycles") is None

    def test_round_trip_creates_directory(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path / "nested" / "data")
        storage.save("shetrack-reminders", [{"title": "Check-up"}])
        assert storage.load("shetrack-reminders") == [{"title": "Check-up"}]
        assert not list((tmp_path / "nested" / "data").glob("*.tmp"))

    def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        (tmp_path / "shetrack-cycles.json").write_text("{not json")
        with pytest.raises(StorageError):
            JsonFileStorage(tmp_path).load("shetrack-cycles")

    def test_invalid_utf8_raises(self, tmp_path: Path) -> None:
        (tmp_path / "shetrack-cycles.json").write_bytes(b'["\xff\xfe"]')
        with pytest.raises(StorageError):
            JsonFileStorage(tmp_path).load("shetrack-cycles")

    def test_invalid_utf8_is_fatal_at_startup(self, tmp_path: Path) -> None:
        (tmp_path / "shetrack-reminders.json").write_bytes(b'["\xff\xfe"]')
        with pytest.raises(StorageError):
            create_tracker(Settings(data_dir=tmp_path))

    def test_rejects_path_like_keys(self, tmp_path: Path) -> None:
        with pytest.raises(StorageError):
            JsonFileStorage(tmp_path).save("../escape", {})

    def test_unserializable_value_raises(self, tmp_path: Path) -> None:
        with pytest.raises(StorageError):
            JsonFileStorage(tmp_path).save("shetrack-cycles", {"when": date(2024, 1, 1)})


class TestCycleTracker:
    def test_full_walkthrough(self, tracker: CycleTracker) -> None:
        tracker.add_cycle(
            date(2024, 1, 1), date(2024, 1, 5), make_days(date(2024, 1, 1), date(2024, 1, 5))
        )
        assert tracker.get_average_cycle_length() == 28
        assert tracker.get_average_period_length() == 5
        assert [p.start_date for p in tracker.get_predicted_periods(3)] == [
            date(2024, 1, 29),
            date(2024, 2, 26),
            date(2024, 3, 25),
        ]
        windows = tracker.get_fertility_windows(1, as_of=date(2024, 1, 2))
        assert windows[0].to_dict() == {
            "ovulationDate": "2024-01-15",
            "fertileStart": "2024-01-10",
            "fertileEnd": "2024-01-15",
        }
        info = tracker.get_current_cycle_day_info(as_of=date(2024, 1, 3))
        assert info.current_day == 3
        assert info.is_period_day

    def test_preferences_flow_into_predictions(self, tracker: CycleTracker) -> None:
        tracker.add_cycle(date(2024, 1, 1), date(2024, 1, 5))
        tracker.update_preferences(average_cycle_length=30)
        assert tracker.get_predicted_periods(1)[0].start_date == date(2024, 1, 31)
        assert tracker.get_computed_averages() == (28, 5)

    def test_delete_missing_raises(self, tracker: CycleTracker) -> None:
        with pytest.raises(CycleNotFoundError):
            tracker.delete_cycle("missing")

    def test_reminders_and_onboarding(self, tracker: CycleTracker) -> None:
        r = tracker.add_reminder(date(2024, 2, 1), "Check-up")
        tracker.toggle_reminder(r.id)
        assert tracker.list_reminders()[0].completed
        tracker.delete_reminder(r.id)
        assert tracker.list_reminders() == []
        assert tracker.complete_onboarding().is_onboarding_complete

    def test_views_available(self, tracker: CycleTracker) -> None:
        tracker.add_cycle(date(2024, 1, 1), date(2024, 1, 5))
        assert len(tracker.get_month_markers(2024, 1, as_of=date(2024, 1, 5))) == 31
        assert len(tracker.get_cycle_history()) == 1
        assert tracker.get_notifications(as_of=date(2024, 1, 24))[0].id == "period-2024-01-29"
        assert sum(s.days for s in tracker.get_phase_distribution()) == 28


class TestCreateTracker:
    def test_persists_across_restarts(self, tmp_path: Path) -> None:
        settings = Settings(data_dir=tmp_path, environment="test")
        first = create_tracker(settings)
        cycle = first.add_cycle(date(2024, 1, 1), date(2024, 1, 5))
        first.add_note_to_day(date(2024, 1, 1), "ignored, no day entry")
        first.update_preferences(average_period_length=4)
        first.add_reminder(date(2024, 1, 20), "Buy supplies")

        stored = json.loads((tmp_path / "shetrack-cycles.json").read_text())
        assert stored[0]["startDate"] == "2024-01-01"
        assert "cycleLength" in stored[0]

        second = create_tracker(settings)
        assert [c.id for c in second.cycles] == [cycle.id]
        assert second.get_average_period_length() == 4
        assert second.list_reminders()[0].title == "Buy supplies"

    def test_corrupt_state_is_fatal(self, tmp_path: Path) -> None:
        (tmp_path / "shetrack-preferences.json").write_text("[broken")
        with pytest.raises(StorageError):
            create_tracker(Settings(data_dir=tmp_path))

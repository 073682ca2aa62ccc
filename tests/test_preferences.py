"""Tests for per-device preferences and usage tracking."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from murfkiddo.client.preferences import (
    DAILY_USAGE_KEY,
    PREFERENCES_KEY,
    JsonFileStorage,
    MemoryStorage,
    PreferencesStore,
)

START = datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def prefs(clock) -> PreferencesStore:
    return PreferencesStore(MemoryStorage(), clock=clock)


def test_load_defaults(prefs):
    loaded = prefs.load()
    assert loaded["favoriteVoiceType"] == "friendly"
    assert loaded["parentalSettings"]["timeLimit"] == 60
    assert loaded["usage"]["lastVisit"] == "2026-03-01T18:00:00Z"


def test_save_merges_and_update_section_merges_nested(prefs):
    prefs.save({"childName": "Mia"})
    prefs.update_section("accessibilitySettings", {"largeText": True})
    loaded = prefs.load()
    assert loaded["childName"] == "Mia"
    assert loaded["accessibilitySettings"]["largeText"] is True
    assert loaded["accessibilitySettings"]["highContrast"] is False


def test_corrupt_stored_preferences_fall_back_to_defaults(clock):
    storage = MemoryStorage()
    storage.set(PREFERENCES_KEY, "{not json")
    storage.set(DAILY_USAGE_KEY, "[1, 2")
    store = PreferencesStore(storage, clock=clock)
    assert store.load()["childName"] == ""
    assert store.usage_stats()["todayMinutes"] == 0


def test_usage_is_kept_per_day_and_mode(prefs, clock):
    prefs.track_usage("Story Mode", 10)
    prefs.track_usage("Story Mode", 5)
    clock.advance(days=2)
    prefs.track_usage("Play Mode", 20)

    stats = prefs.usage_stats()
    assert stats["todayMinutes"] == 20
    assert stats["weekMinutes"] == 35
    assert stats["monthMinutes"] == 35
    assert stats["favoriteMode"] == "Play Mode"
    assert prefs.load()["usage"]["totalTimeSpent"] == 35


def test_usage_older_than_thirty_days_is_pruned(prefs, clock):
    prefs.track_usage("Story Mode", 10)
    clock.advance(days=31)
    prefs.track_usage("Tutor Mode", 4)

    stored = json.loads(prefs._storage.get(DAILY_USAGE_KEY))
    assert list(stored) == [clock.now.date().isoformat()]
    assert prefs.usage_stats()["monthMinutes"] == 4


def test_favorite_mode_defaults_on_tie(prefs):
    prefs.track_usage("Play Mode", 5)
    prefs.track_usage("Story Mode", 5)
    assert prefs.usage_stats()["favoriteMode"] == "Story Mode"


def test_export_then_import_into_fresh_device(prefs, clock):
    prefs.save({"childName": "Leo"})
    prefs.track_usage("Bedtime Mode", 12)
    exported = prefs.export_data()
    assert json.loads(exported)["exportDate"] == "2026-03-01T18:00:00Z"

    other = PreferencesStore(MemoryStorage(), clock=clock)
    assert other.import_data(exported) is True
    assert other.load()["childName"] == "Leo"
    assert other.usage_stats()["todayMinutes"] == 12


def test_import_rejects_garbage(prefs):
    assert prefs.import_data("not json") is False
    assert prefs.import_data("[1, 2]") is False


def test_clear_all(prefs):
    prefs.save({"childName": "Mia"})
    prefs.track_usage("Story Mode", 3)
    prefs.clear_all()
    assert prefs.load()["childName"] == ""
    assert prefs.usage_stats()["todayMinutes"] == 0


def test_streak_for_returning_child(prefs, clock):
    prefs.save({"childName": "Mia"})
    prefs.track_usage("Story Mode", 1)
    clock.advance(days=3)
    streak = prefs.check_streak()
    assert streak == {"isReturningUser": True, "daysAway": 3, "shouldShowWelcome": True}


def test_streak_for_new_device(prefs):
    streak = prefs.check_streak()
    assert streak["isReturningUser"] is False
    assert streak["daysAway"] == 0
    assert streak["shouldShowWelcome"] is True


def test_streak_ignores_usage_that_is_not_an_object(prefs):
    assert prefs.import_data(json.dumps({"preferences": {"childName": "Mia", "usage": "oops"}}))
    streak = prefs.check_streak()
    assert streak["isReturningUser"] is True
    assert streak["daysAway"] == 0


def test_json_file_storage_persists(tmp_path):
    path = tmp_path / "kiddo" / "storage.json"
    storage = JsonFileStorage(path)
    storage.set("a", "1")
    storage.set("b", "2")
    storage.remove("a")
    reopened = JsonFileStorage(path)
    assert reopened.get("a") is None
    assert reopened.get("b") == "2"


def test_json_file_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{oops", encoding="utf-8")
    assert JsonFileStorage(path).get("anything") is None

"""Per-device preferences and daily usage minutes.

Two opaque JSON blobs under fixed keys, with no schema versioning. Stored
values that fail to decode are treated as absent.
"""

from __future__ import annotations

import copy
import json
import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Protocol

log = logging.getLogger(__name__)

PREFERENCES_KEY = "murfkiddo_preferences"
DAILY_USAGE_KEY = "murfkiddo_daily_usage"
USAGE_RETENTION_DAYS = 30
DEFAULT_FAVORITE_MODE = "Story Mode"


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def default_preferences(now: datetime | None = None) -> dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "childName": "",
        "favoriteVoiceType": "friendly",
        "autoPlayAudio": True,
        "preferredLanguage": "spanish",
        "favoriteGameType": "riddle",
        "bedtimePreferences": {
            "favoriteThings": "",
            "preferredContentType": "bedtime_story",
        },
        "accessibilitySettings": {
            "highContrast": False,
            "largeText": False,
            "reducedMotion": False,
            "screenReaderMode": False,
        },
        "parentalSettings": {
            "timeLimit": 60,
            "contentFiltering": "moderate",
            "voiceRecording": False,
            "notifications": True,
        },
        "usage": {
            "totalTimeSpent": 0,
            "favoriteMode": DEFAULT_FAVORITE_MODE,
            "lastVisit": _iso(now),
            "streakDays": 0,
        },
    }


class Storage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """All keys in one JSON object on disk, rewritten on every change."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            log.warning("Ignoring corrupt storage file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)


class PreferencesStore:
    """Load/save preferences and roll up usage minutes per day and mode."""

    def __init__(
        self,
        storage: Storage,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._storage = storage
        self._clock = clock

    def _load_json(self, key: str) -> Any:
        raw = self._storage.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            log.warning("Stored %s is not valid JSON; using defaults", key)
            return None

    # ── Preferences ─────────────────────────────────────────────────────

    def load(self) -> dict[str, Any]:
        prefs = default_preferences(self._clock())
        stored = self._load_json(PREFERENCES_KEY)
        if isinstance(stored, dict):
            prefs.update(stored)
        return prefs

    def save(self, updates: dict[str, Any]) -> dict[str, Any]:
        """Shallow-merge ``updates`` over the current preferences."""
        merged = {**self.load(), **copy.deepcopy(updates)}
        self._storage.set(PREFERENCES_KEY, json.dumps(merged))
        return merged

    def update_section(self, section: str, updates: dict[str, Any]) -> dict[str, Any]:
        current = self.load().get(section)
        if isinstance(current, dict):
            value: Any = {**current, **updates}
        else:
            value = dict(updates)
        return self.save({section: value})

    # ── Usage ───────────────────────────────────────────────────────────

    def _daily_usage(self) -> dict[str, dict[str, float]]:
        stored = self._load_json(DAILY_USAGE_KEY)
        if not isinstance(stored, dict):
            return {}
        return {
            day: {
                mode: float(minutes)
                for mode, minutes in modes.items()
                if isinstance(minutes, (int, float))
            }
            for day, modes in stored.items()
            if isinstance(modes, dict)
        }

    @staticmethod
    def _parse_day(day: str) -> date | None:
        try:
            return date.fromisoformat(day)
        except ValueError:
            return None

    def track_usage(self, mode: str, minutes: float) -> None:
        now = self._clock()
        today = now.date()
        usage = self._daily_usage()
        day = usage.setdefault(today.isoformat(), {})
        day[mode] = day.get(mode, 0) + minutes

        cutoff = today - timedelta(days=USAGE_RETENTION_DAYS)
        usage = {
            key: modes
            for key, modes in usage.items()
            if (parsed := self._parse_day(key)) is not None and parsed >= cutoff
        }
        self._storage.set(DAILY_USAGE_KEY, json.dumps(usage))

        total = sum(sum(modes.values()) for modes in usage.values())
        self.update_section("usage", {"totalTimeSpent": total, "lastVisit": _iso(now)})

    def usage_stats(self) -> dict[str, Any]:
        today = self._clock().date()
        week_ago = today - timedelta(days=7)
        month_ago = today - timedelta(days=USAGE_RETENTION_DAYS)

        today_minutes = week_minutes = month_minutes = 0.0
        by_mode: dict[str, float] = {}
        for key, modes in self._daily_usage().items():
            day = self._parse_day(key)
            if day is None:
                continue
            total = sum(modes.values())
            if day == today:
                today_minutes = total
            if day >= week_ago:
                week_minutes += total
            if day >= month_ago:
                month_minutes += total
                for mode, minutes in modes.items():
                    by_mode[mode] = by_mode.get(mode, 0) + minutes

        favorite = DEFAULT_FAVORITE_MODE
        for mode, minutes in by_mode.items():
            if minutes > by_mode.get(favorite, 0):
                favorite = mode
        return {
            "todayMinutes": today_minutes,
            "weekMinutes": week_minutes,
            "monthMinutes": month_minutes,
            "favoriteMode": favorite,
        }

    # ── Housekeeping ────────────────────────────────────────────────────

    def clear_all(self) -> None:
        self._storage.remove(PREFERENCES_KEY)
        self._storage.remove(DAILY_USAGE_KEY)

    def export_data(self) -> str:
        return json.dumps(
            {
                "preferences": self._load_json(PREFERENCES_KEY) or {},
                "usage": self._load_json(DAILY_USAGE_KEY) or {},
                "exportDate": _iso(self._clock()),
            },
            indent=2,
        )

    def import_data(self, payload: str) -> bool:
        try:
            data = json.loads(payload)
        except ValueError:
            log.warning("Refusing to import data that is not JSON")
            return False
        if not isinstance(data, dict):
            return False
        if isinstance(data.get("preferences"), dict):
            self._storage.set(PREFERENCES_KEY, json.dumps(data["preferences"]))
        if isinstance(data.get("usage"), dict):
            self._storage.set(DAILY_USAGE_KEY, json.dumps(data["usage"]))
        return True

    def check_streak(self) -> dict[str, Any]:
        """Days since the last visit and whether to show a welcome message."""
        prefs = self.load()
        usage = prefs.get("usage")
        last_visit_raw = str(usage.get("lastVisit", "")) if isinstance(usage, dict) else ""
        try:
            last_visit = datetime.fromisoformat(last_visit_raw.replace("Z", "+00:00"))
        except ValueError:
            last_visit = self._clock()
        if last_visit.tzinfo is None:
            last_visit = last_visit.replace(tzinfo=timezone.utc)
        days_away = max(0, (self._clock() - last_visit).days)

        returning = bool(prefs.get("childName"))
        return {
            "isReturningUser": returning,
            "daysAway": days_away,
            "shouldShowWelcome": days_away > 1 or not returning,
        }

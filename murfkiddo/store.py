"""Parental settings, usage counters and the recent-activity list.

Demo-grade storage: the in-memory store lives for the process lifetime, has
no locking and the last writer wins. It is injected through ``app.state``
so tests and alternative deployments can swap it.
"""

from __future__ import annotations

import copy
import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any

log = logging.getLogger(__name__)

# Parent-facing mode label -> usage counter it bumps.
MODE_COUNTERS = {
    "Story Mode": "storiesHeard",
    "Tutor Mode": "questionsAsked",
    "Play Mode": "gamesPlayed",
    "Language Buddy": "languagesExplored",
    "Bedtime Mode": "bedtimeStories",
}

_DURATION_RE = re.compile(r"^\s*(\d+)")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def default_settings() -> dict[str, Any]:
    return {
        "timeLimit": 60,
        "contentFiltering": "moderate",
        "voiceRecording": False,
        "notifications": True,
        "lastUpdated": _iso(_now()),
    }


def empty_usage() -> dict[str, Any]:
    usage: dict[str, Any] = {
        "todayMinutes": 0,
        "weekTotal": 0,
        "favoriteMode": "Story Mode",
    }
    usage.update({counter: 0 for counter in MODE_COUNTERS.values()})
    usage["lastActivity"] = _iso(_now())
    return usage


def _activity(time_label: str, mode: str, what: str, minutes: int, hours_ago: int) -> dict[str, Any]:
    return {
        "time": time_label,
        "mode": mode,
        "activity": what,
        "duration": f"{minutes} min",
        "timestamp": _iso(_now() - timedelta(hours=hours_ago)),
    }


def demo_activity() -> list[dict[str, Any]]:
    return [
        _activity("2:30 PM", "Story Mode", 'Listened to "The Dragon\'s Secret"', 12, 2),
        _activity("1:45 PM", "Tutor Mode", 'Asked "How do flowers bloom?"', 6, 3),
        _activity("12:15 PM", "Play Mode", "Played word association", 8, 4),
        _activity("11:30 AM", "Language Buddy", "Learned French numbers", 10, 5),
        _activity("10:45 AM", "Bedtime Mode", "Listened to a lullaby", 5, 6),
    ]


def demo_usage() -> dict[str, Any]:
    usage = empty_usage()
    usage.update(
        {
            "todayMinutes": 41,
            "weekTotal": 287,
            "storiesHeard": 12,
            "questionsAsked": 18,
            "gamesPlayed": 15,
            "languagesExplored": 4,
            "bedtimeStories": 7,
        }
    )
    return usage


class SettingsStore(ABC):
    """Read/replace/append interface over the parental data."""

    @abstractmethod
    def read_settings(self) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def replace_settings(self, settings: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def read_usage(self) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def replace_usage(self, usage: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def read_activity(self) -> list[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def append_activity(self, entry: dict[str, Any], cap: int) -> None:
        """Prepend ``entry`` and keep at most ``cap`` entries, newest first."""
        raise NotImplementedError

    @abstractmethod
    def clear_activity(self) -> None:
        raise NotImplementedError

    def snapshot(self) -> dict[str, Any]:
        return {
            "settings": self.read_settings(),
            "usage": self.read_usage(),
            "activity": self.read_activity(),
        }


class InMemorySettingsStore(SettingsStore):
    """Process-lifetime store; reads hand out copies."""

    def __init__(self, *, seed_demo: bool = True) -> None:
        self._settings = default_settings()
        if seed_demo:
            self._usage = demo_usage()
            self._usage.update({"todayMinutes": 23, "weekTotal": 156})
            self._activity = demo_activity()[:4]
        else:
            self._usage = empty_usage()
            self._activity = []

    def read_settings(self) -> dict[str, Any]:
        return copy.deepcopy(self._settings)

    def replace_settings(self, settings: dict[str, Any]) -> None:
        self._settings = copy.deepcopy(settings)

    def read_usage(self) -> dict[str, Any]:
        return copy.deepcopy(self._usage)

    def replace_usage(self, usage: dict[str, Any]) -> None:
        self._usage = copy.deepcopy(usage)

    def read_activity(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._activity)

    def append_activity(self, entry: dict[str, Any], cap: int) -> None:
        self._activity = [copy.deepcopy(entry), *self._activity][: max(1, cap)]

    def clear_activity(self) -> None:
        self._activity = []


# ── Parental actions ────────────────────────────────────────────────────


def update_settings(store: SettingsStore, updates: dict[str, Any]) -> dict[str, Any]:
    merged = {**store.read_settings(), **updates, "lastUpdated": _iso(_now())}
    store.replace_settings(merged)
    return merged


def parse_minutes(duration: Any) -> int:
    """``"8 min"`` -> 8. Unparseable durations count as zero."""
    if isinstance(duration, bool):
        return 0
    if isinstance(duration, (int, float)):
        return max(0, int(duration))
    match = _DURATION_RE.match(str(duration or ""))
    if match is None:
        log.warning("Unparseable activity duration %r, counting 0 minutes", duration)
        return 0
    return int(match.group(1))


def add_activity(
    store: SettingsStore, update: dict[str, Any], cap: int
) -> dict[str, Any]:
    """Log one activity and fold it into the usage counters."""
    now = _now()
    store.append_activity({**update, "timestamp": _iso(now)}, cap)

    minutes = parse_minutes(update.get("duration"))
    usage = store.read_usage()
    usage["todayMinutes"] = int(usage.get("todayMinutes", 0)) + minutes
    usage["weekTotal"] = int(usage.get("weekTotal", 0)) + minutes
    counter = MODE_COUNTERS.get(str(update.get("mode", "")))
    if counter is not None:
        usage[counter] = int(usage.get(counter, 0)) + 1
    usage["lastActivity"] = _iso(now)
    store.replace_usage(usage)
    return usage


def reset_data(store: SettingsStore) -> dict[str, Any]:
    usage = empty_usage()
    store.replace_usage(usage)
    store.clear_activity()
    return usage


def simulate_usage(store: SettingsStore, cap: int) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    store.clear_activity()
    # Oldest first so the newest ends up at the head of the list.
    for entry in reversed(demo_activity()):
        store.append_activity(entry, cap)
    usage = demo_usage()
    store.replace_usage(usage)
    return usage, store.read_activity()

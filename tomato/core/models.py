from __future__ import annotations

"""Persisted value types: Settings, TaskRecord and the Snapshot that bundles them."""

import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


DEFAULT_FOCUS_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5


class SyncStatus(str, Enum):
    SYNCED = "synced"
    SYNCING = "syncing"
    ERROR = "error"


@dataclass(frozen=True)
class Settings:
    focus_time: int = DEFAULT_FOCUS_MINUTES
    break_time: int = DEFAULT_BREAK_MINUTES

    def __post_init__(self) -> None:
        for value in (self.focus_time, self.break_time):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError("Durations must be positive integer minutes")

    @property
    def focus_seconds(self) -> int:
        return self.focus_time * 60

    @property
    def break_seconds(self) -> int:
        return self.break_time * 60

    def to_dict(self) -> dict[str, int]:
        return {"focusTime": self.focus_time, "breakTime": self.break_time}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        return cls(focus_time=data["focusTime"], break_time=data["breakTime"])


@dataclass(frozen=True)
class TaskRecord:
    id: str
    title: str
    notes: str
    timestamp: str

    @classmethod
    def create(cls, title: str, notes: str = "") -> TaskRecord:
        """Builds a record stamped with the current time."""
        now = datetime.now(timezone.utc)
        return cls(
            id=str(time.time_ns() // 1_000_000),
            title=title,
            notes=notes,
            timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        )

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "title": self.title, "notes": self.notes, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskRecord:
        if not isinstance(data, dict):
            raise TypeError("Task must be an object")
        for key in ("id", "title", "timestamp"):
            if not isinstance(data.get(key), str):
                raise ValueError(f"Task field {key!r} must be a string")
        notes = data.get("notes", "")
        if not isinstance(notes, str):
            raise ValueError("Task field 'notes' must be a string")
        return cls(id=data["id"], title=data["title"], notes=notes, timestamp=data["timestamp"])


@dataclass(frozen=True)
class Snapshot:
    settings: Settings = field(default_factory=Settings)
    tasks: tuple[TaskRecord, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "settings": self.settings.to_dict(),
            "tasks": [task.to_dict() for task in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        raw_tasks = data["tasks"]
        if not isinstance(raw_tasks, list):
            raise ValueError("'tasks' must be a list")
        return cls(
            settings=Settings.from_dict(data["settings"]),
            tasks=tuple(TaskRecord.from_dict(item) for item in raw_tasks),
        )


def encode_settings(settings: Settings) -> str:
    """Canonical text form used both for storage and for dirty checks."""
    return json.dumps(settings.to_dict(), ensure_ascii=False, separators=(",", ":"))


def encode_tasks(tasks: tuple[TaskRecord, ...] | list[TaskRecord]) -> str:
    return json.dumps([task.to_dict() for task in tasks], ensure_ascii=False, separators=(",", ":"))

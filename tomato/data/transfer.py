from __future__ import annotations

"""Backup files: the whole snapshot as indented UTF-8 JSON."""

import json
from datetime import date
from pathlib import Path

from tomato.core.models import Snapshot


class ImportFormatError(ValueError):
    """The backup file could not be understood."""


def default_export_name(today: date | None = None) -> str:
    today = today or date.today()
    return f"tomato-timer-backup-{today.isoformat()}.json"


def dumps(snapshot: Snapshot) -> str:
    return json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=2)


def loads(text: str) -> Snapshot:
    """Parses and validates the whole payload before returning anything."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ImportFormatError("Invalid file format") from e
    if not isinstance(data, dict) or "settings" not in data or "tasks" not in data:
        raise ImportFormatError("Invalid file format")
    try:
        return Snapshot.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ImportFormatError("Invalid file format") from e


def export_snapshot(snapshot: Snapshot, path: str | Path) -> Path:
    path = Path(path)
    path.write_text(dumps(snapshot), encoding="utf-8")
    return path


def import_snapshot(path: str | Path) -> Snapshot:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ImportFormatError("Invalid file format") from e
    return loads(text)

from __future__ import annotations

"""SQLite key-value store holding the local copy of settings and the session log."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from tomato.core.models import Settings, Snapshot, TaskRecord, encode_settings, encode_tasks


SCHEMA_VERSION = 1
SETTINGS_KEY = "pomodoroSettings"
TASKS_KEY = "pomodoroTasks"

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Local store read or write failed."""


class Storage:
    """Encapsulates the SQLite connection and transactional reads/writes."""
    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode = WAL;")
        except sqlite3.DatabaseError:
            pass
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        """Creates the tables on first launch."""
        try:
            with self._transaction() as conn:
                conn.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)")
                row = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
                if not row:
                    conn.execute("INSERT INTO schema_version(version) VALUES (?)", (SCHEMA_VERSION,))
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS settings(
                        key TEXT PRIMARY KEY,
                        value TEXT
                    )
                    """
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialise {self.db_path}: {e}") from e

    def get_raw(self, key: str) -> str | None:
        try:
            conn = self._connect()
            try:
                row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read {key}: {e}") from e
        return row["value"] if row else None

    def get_setting(self, key: str, default: Any = None) -> Any:
        raw = self.get_raw(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw

    def set_setting(self, key: str, value: Any) -> None:
        self._write({key: json.dumps(value)})

    def _write(self, values: dict[str, str]) -> None:
        try:
            with self._transaction() as conn:
                for key, payload in values.items():
                    conn.execute(
                        "INSERT INTO settings(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                        (key, payload),
                    )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write {', '.join(values)}: {e}") from e

    def last_saved(self) -> tuple[str | None, str | None]:
        """Returns the stored settings and tasks text exactly as written."""
        return self.get_raw(SETTINGS_KEY), self.get_raw(TASKS_KEY)

    def save(self, snapshot: Snapshot) -> None:
        self._write(
            {
                SETTINGS_KEY: encode_settings(snapshot.settings),
                TASKS_KEY: encode_tasks(snapshot.tasks),
            }
        )
        logger.debug(f"Saved {len(snapshot.tasks)} tasks locally")

    def load(self) -> Snapshot | None:
        """Loads whatever halves are present; None when nothing was ever saved."""
        settings_raw, tasks_raw = self.last_saved()
        if settings_raw is None and tasks_raw is None:
            return None
        settings = Settings()
        tasks: tuple[TaskRecord, ...] = ()
        try:
            if settings_raw is not None:
                settings = Settings.from_dict(json.loads(settings_raw))
            if tasks_raw is not None:
                items = json.loads(tasks_raw)
                if not isinstance(items, list):
                    raise ValueError("task log is not a list")
                tasks = tuple(TaskRecord.from_dict(item) for item in items)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Stored data is corrupt: {e}") from e
        return Snapshot(settings=settings, tasks=tasks)

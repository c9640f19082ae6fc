import re

import pytest

from tomato.core.models import Settings, Snapshot, TaskRecord, encode_settings, encode_tasks


def test_settings_defaults() -> None:
    settings = Settings()
    assert (settings.focus_time, settings.break_time) == (25, 5)
    assert settings.focus_seconds == 1500
    assert settings.break_seconds == 300


@pytest.mark.parametrize("focus, brk", [(0, 5), (25, -1), (2.5, 5), (True, 5)])
def test_settings_reject_invalid_minutes(focus, brk) -> None:
    with pytest.raises(ValueError):
        Settings(focus_time=focus, break_time=brk)


def test_task_record_create_stamps_id_and_time() -> None:
    task = TaskRecord.create("Write report", "draft")

    assert task.id.isdigit()
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", task.timestamp)
    assert (task.title, task.notes) == ("Write report", "draft")


def test_task_record_is_immutable() -> None:
    task = TaskRecord.create("Write report")
    with pytest.raises(AttributeError):
        task.title = "Other"  # type: ignore[misc]


def test_encoding_is_canonical() -> None:
    task = TaskRecord(id="1", title="Ünïcode", notes="", timestamp="2024-01-01T00:00:00.000Z")

    assert encode_settings(Settings()) == '{"focusTime":25,"breakTime":5}'
    assert encode_tasks([task]) == encode_tasks((task,))
    assert "Ünïcode" in encode_tasks([task])


def test_snapshot_to_dict_round_trip() -> None:
    snapshot = Snapshot(settings=Settings(focus_time=30, break_time=6), tasks=(TaskRecord.create("A"),))
    assert Snapshot.from_dict(snapshot.to_dict()) == snapshot

import json
from datetime import date

import pytest

from tomato.core.models import Settings, Snapshot, TaskRecord
from tomato.data.transfer import (
    ImportFormatError,
    default_export_name,
    dumps,
    export_snapshot,
    import_snapshot,
    loads,
)


SAMPLE = """
{
  "settings": { "focusTime": 25, "breakTime": 5 },
  "tasks": [
    { "id": "1700000000000", "title": "Write report", "notes": "draft", "timestamp": "2024-01-01T00:00:00.000Z" }
  ]
}
"""


def test_loads_documented_format() -> None:
    snapshot = loads(SAMPLE)

    assert snapshot.settings == Settings(focus_time=25, break_time=5)
    assert snapshot.tasks == (
        TaskRecord(id="1700000000000", title="Write report", notes="draft", timestamp="2024-01-01T00:00:00.000Z"),
    )


def test_dumps_uses_wire_keys() -> None:
    data = json.loads(dumps(loads(SAMPLE)))

    assert data == json.loads(SAMPLE)


def test_export_then_import_preserves_order(tmp_path) -> None:
    tasks = tuple(
        TaskRecord(id=str(n), title=f"Tâche {n}", notes="", timestamp="2024-01-01T00:00:00.000Z")
        for n in (3, 1, 2)
    )
    snapshot = Snapshot(settings=Settings(focus_time=50, break_time=10), tasks=tasks)

    path = export_snapshot(snapshot, tmp_path / "backup.json")

    assert import_snapshot(path) == snapshot


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[]",
        '{"settings": {"focusTime": 25, "breakTime": 5}}',
        '{"tasks": []}',
        '{"settings": {"focusTime": 0, "breakTime": 5}, "tasks": []}',
        '{"settings": {"focusTime": 25}, "tasks": []}',
        '{"settings": {"focusTime": 25, "breakTime": 5}, "tasks": {}}',
        '{"settings": {"focusTime": 25, "breakTime": 5}, "tasks": [{"title": "x"}]}',
        '{"settings": {"focusTime": 25, "breakTime": 5}, "tasks": ["x"]}',
        "[" * 200000,
    ],
    ids=lambda payload: payload[:40],
)
def test_malformed_payloads_rejected(payload: str) -> None:
    with pytest.raises(ImportFormatError):
        loads(payload)


def test_binary_file_rejected(tmp_path) -> None:
    path = tmp_path / "backup.json"
    path.write_bytes(b"\xff\xfe\x00garbage")

    with pytest.raises(ImportFormatError):
        import_snapshot(path)


def test_default_export_name() -> None:
    assert default_export_name(date(2024, 1, 31)) == "tomato-timer-backup-2024-01-31.json"

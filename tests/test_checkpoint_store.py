import json
from pathlib import Path

from republic import TapeEntry

from vibeforge.checkpoint import CheckpointFile, CheckpointStore


def _step(key: str) -> TapeEntry:
    return TapeEntry(0, "step", {"key": key, "status": "ok", "value": key}, {})


def test_store_isolated_by_run_id(tmp_path: Path) -> None:
    store = CheckpointStore(tmp_path / "runs")

    store.append("a", _step("one"))
    store.append("b", _step("two"))

    assert [entry.payload["key"] for entry in store.read("a")] == ["one"]
    assert [entry.payload["key"] for entry in store.read("b")] == ["two"]
    assert store.list_runs() == ["a", "b"]


def test_run_ids_are_quoted_in_file_names(tmp_path: Path) -> None:
    store = CheckpointStore(tmp_path / "runs")

    store.append("project/7:run", _step("one"))

    assert store.list_runs() == ["project/7:run"]
    assert len(list((tmp_path / "runs").iterdir())) == 1


def test_reset_drops_run(tmp_path: Path) -> None:
    store = CheckpointStore(tmp_path / "runs")
    store.append("run", _step("one"))

    store.reset("run")

    assert store.read("run") == []
    assert store.list_runs() == []


def test_append_increments_ids_and_survives_reopen(tmp_path: Path) -> None:
    path = tmp_path / "run.jsonl"
    checkpoint_file = CheckpointFile(path)

    checkpoint_file.append(_step("one"))
    checkpoint_file.append(_step("two"))

    reopened = CheckpointFile(path)
    reopened.append(_step("three"))
    assert [entry.id for entry in reopened.read()] == [1, 2, 3]


def test_torn_last_line_is_skipped(tmp_path: Path) -> None:
    path = tmp_path / "run.jsonl"
    path.write_text('{"id":1,"kind":"step","payload":{"key":"a"},"meta":{}}\n{"id":2,"kind":"st', encoding="utf-8")

    entries = CheckpointFile(path).read()

    assert [entry.payload["key"] for entry in entries] == ["a"]


def test_malformed_records_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "run.jsonl"
    path.write_text(
        '["not", "a", "record"]\n'
        '{"id":"1","kind":"step","payload":{}}\n'
        '{"id":3,"kind":"step","payload":{"key":"c"}}\n',
        encoding="utf-8",
    )

    entries = CheckpointFile(path).read()

    assert [(entry.id, entry.payload["key"], entry.meta) for entry in entries] == [(3, "c", {})]


def test_append_after_torn_line_starts_a_new_line(tmp_path: Path) -> None:
    path = tmp_path / "run.jsonl"
    path.write_text('{"id":1,"kind":"step","payload":{"key":"a"},"meta":{}}\n{"id":2,"ki', encoding="utf-8")

    CheckpointFile(path).append(_step("b"))

    assert [entry.payload["key"] for entry in CheckpointFile(path).read()] == ["a", "b"]


def test_records_carry_only_portable_fields(tmp_path: Path) -> None:
    path = tmp_path / "run.jsonl"

    CheckpointFile(path).append(TapeEntry(0, "step", {"key": "a"}, {"recorded_at": 12.5}))

    record = json.loads(path.read_text(encoding="utf-8").strip())
    assert sorted(record) == ["id", "kind", "meta", "payload"]
    assert record["meta"] == {"recorded_at": 12.5}


def test_extra_record_fields_are_ignored_on_load(tmp_path: Path) -> None:
    path = tmp_path / "run.jsonl"
    path.write_text(
        '{"id":1,"kind":"step","payload":{"key":"a"},"meta":{},"timestamp":1700000000.0}\n'
        '{"id":2,"kind":"step","payload":{"key":"b"},"meta":{},"date":"2026-01-01T00:00:00+00:00"}\n',
        encoding="utf-8",
    )

    entries = CheckpointFile(path).read()

    assert [(entry.id, entry.payload["key"]) for entry in entries] == [(1, "a"), (2, "b")]

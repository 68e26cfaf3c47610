"""Append-only checkpoint log, one JSONL file per workflow run."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from loguru import logger
from republic import TapeEntry

CHECKPOINT_FILE_SUFFIX = ".jsonl"


def _encode(entry: TapeEntry) -> str:
    record = {
        "id": entry.id,
        "kind": entry.kind,
        "payload": dict(entry.payload),
        "meta": dict(entry.meta),
    }
    return json.dumps(record, ensure_ascii=False)


def _decode(record: Any) -> TapeEntry | None:
    if not isinstance(record, dict):
        return None
    entry_id, kind, payload = record.get("id"), record.get("kind"), record.get("payload")
    if not isinstance(entry_id, int) or not isinstance(kind, str) or not isinstance(payload, dict):
        return None
    meta = record.get("meta")
    return TapeEntry(entry_id, kind, payload, meta if isinstance(meta, dict) else {})


class CheckpointFile:
    """One run's log. Entries are loaded once and kept in memory afterwards."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._entries: list[TapeEntry] | None = None

    def read(self) -> list[TapeEntry]:
        with self._lock:
            return list(self._loaded())

    def append(self, entry: TapeEntry) -> TapeEntry:
        with self._lock:
            entries = self._loaded()
            stored = TapeEntry(len(entries) + 1, entry.kind, dict(entry.payload), dict(entry.meta))
            self.path.parent.mkdir(parents=True, exist_ok=True)
            prefix = "\n" if self._ends_torn() else ""
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(prefix + _encode(stored) + "\n")
                handle.flush()
                os.fsync(handle.fileno())
            entries.append(stored)
            return stored

    def reset(self) -> None:
        with self._lock:
            self.path.unlink(missing_ok=True)
            self._entries = None

    def _ends_torn(self) -> bool:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return False
        with self.path.open("rb") as handle:
            handle.seek(-1, os.SEEK_END)
            return handle.read(1) != b"\n"

    def _loaded(self) -> list[TapeEntry]:
        if self._entries is None:
            self._entries = self._load()
        return self._entries

    def _load(self) -> list[TapeEntry]:
        if not self.path.exists():
            return []
        entries: list[TapeEntry] = []
        with self.path.open("r", encoding="utf-8") as handle:
            for lineno, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                try:
                    entry = _decode(json.loads(line))
                except json.JSONDecodeError:
                    # A crash mid-append leaves a torn last line; the step it described never completed.
                    logger.warning("checkpoint.skip path={} line={}", self.path.name, lineno)
                    continue
                if entry is not None:
                    entries.append(entry)
        return entries


class CheckpointStore:
    """Directory of per-run checkpoint logs."""

    def __init__(self, root: Path) -> None:
        self._root = root.expanduser().resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._files: dict[str, CheckpointFile] = {}
        self._lock = threading.Lock()

    def list_runs(self) -> list[str]:
        runs = [
            unquote(path.name.removesuffix(CHECKPOINT_FILE_SUFFIX))
            for path in self._root.glob(f"*{CHECKPOINT_FILE_SUFFIX}")
        ]
        return sorted(runs)

    def read(self, run_id: str) -> list[TapeEntry]:
        return self._file(run_id).read()

    def append(self, run_id: str, entry: TapeEntry) -> TapeEntry:
        return self._file(run_id).append(entry)

    def reset(self, run_id: str) -> None:
        self._file(run_id).reset()

    def _file(self, run_id: str) -> CheckpointFile:
        with self._lock:
            if run_id not in self._files:
                file_name = f"{quote(run_id, safe='')}{CHECKPOINT_FILE_SUFFIX}"
                self._files[run_id] = CheckpointFile(self._root / file_name)
            return self._files[run_id]

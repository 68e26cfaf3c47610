"""Step checkpoint runner.

A step is a named unit of side-effecting work inside one workflow run. The
first evaluation of a step executes the work and records its outcome in the
run's checkpoint log; later evaluations with the same run id and step key
return the recorded outcome without executing the work again.

Step keys are derived from the step name and how many times that name has
already been evaluated by this runner, so ``run_command`` called three times
yields ``run_command``, ``run_command:1`` and ``run_command:2``. A replay of the
same run issues steps in the same order and therefore lands on the same keys.
"""

from __future__ import annotations

import time
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger
from republic import TapeEntry

from vibeforge.checkpoint.store import CheckpointStore
from vibeforge.errors import StepFailedError

T = TypeVar("T")

STEP_KIND = "step"
STATUS_OK = "ok"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class StepRecord:
    """Recorded outcome of one step."""

    run_id: str
    key: str
    status: str
    value: Any = None
    error_type: str | None = None
    message: str | None = None
    attempt: int = 1

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_entry(self) -> TapeEntry:
        payload: dict[str, Any] = {"key": self.key, "status": self.status, "attempt": self.attempt}
        if self.ok:
            payload["value"] = self.value
        else:
            payload["error_type"] = self.error_type
            payload["message"] = self.message
        return TapeEntry(0, STEP_KIND, payload, {"run_id": self.run_id, "recorded_at": time.time()})

    @classmethod
    def from_entry(cls, run_id: str, entry: TapeEntry) -> StepRecord | None:
        if entry.kind != STEP_KIND:
            return None
        payload = entry.payload
        key = payload.get("key")
        status = payload.get("status")
        if not isinstance(key, str) or status not in {STATUS_OK, STATUS_ERROR}:
            return None
        return cls(
            run_id=run_id,
            key=key,
            status=status,
            value=payload.get("value"),
            error_type=payload.get("error_type"),
            message=payload.get("message"),
            attempt=int(payload.get("attempt", 1)),
        )


class StepRunner:
    """Memoizes named units of work for one workflow run."""

    def __init__(self, store: CheckpointStore, run_id: str, *, max_attempts: int = 1) -> None:
        self._store = store
        self._run_id = run_id
        self._max_attempts = max(max_attempts, 1)
        self._occurrences: Counter[str] = Counter()
        self._records = self._load()

    @property
    def run_id(self) -> str:
        return self._run_id

    def records(self) -> list[StepRecord]:
        return list(self._records.values())

    def next_key(self, name: str) -> str:
        count = self._occurrences[name]
        self._occurrences[name] += 1
        return name if count == 0 else f"{name}:{count}"

    def run(self, name: str, work: Callable[[], T]) -> T:
        """Execute `work` once per run for this step, replaying the recorded outcome afterwards.

        The return value of `work` is written to a JSON log and must be JSON serializable.
        """
        key = self.next_key(name)
        recorded = self._records.get(key)
        attempt = 1
        if recorded is not None:
            if recorded.ok:
                logger.debug("step.replay key={}", key)
                return recorded.value  # type: ignore[no-any-return]
            if recorded.attempt >= self._max_attempts:
                logger.info("step.replay key={} status=error", key)
                raise StepFailedError(key, recorded.error_type or "Exception", recorded.message or "")
            attempt = recorded.attempt + 1

        logger.info("step.run key={} attempt={}", key, attempt)
        try:
            value = work()
        except Exception as exc:
            logger.warning("step.error key={} attempt={} error={!s}", key, attempt, exc)
            self._record(
                StepRecord(
                    run_id=self._run_id,
                    key=key,
                    status=STATUS_ERROR,
                    error_type=type(exc).__name__,
                    message=str(exc),
                    attempt=attempt,
                )
            )
            raise

        self._record(StepRecord(run_id=self._run_id, key=key, status=STATUS_OK, value=value, attempt=attempt))
        return value

    def _record(self, record: StepRecord) -> None:
        self._store.append(self._run_id, record.to_entry())
        self._records[record.key] = record

    def _load(self) -> dict[str, StepRecord]:
        records: dict[str, StepRecord] = {}
        for entry in self._store.read(self._run_id):
            record = StepRecord.from_entry(self._run_id, entry)
            if record is not None:
                # Later entries for a key supersede earlier failed attempts.
                records[record.key] = record
        return records

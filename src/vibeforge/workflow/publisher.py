"""Outcome classification and result persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from loguru import logger

from vibeforge.checkpoint import StepRunner
from vibeforge.sandbox import EnvironmentHandle
from vibeforge.state import AgentState
from vibeforge.store import NewFragment, ProjectStore
from vibeforge.workflow.postprocess import PostProcessOutput

ERROR_MESSAGE = "Something went wrong. Please try again."
RESOLVE_ADDRESS_STEP = "get-sandbox-url"
SAVE_RESULT_STEP = "save-result"

Outcome = Literal["result", "error"]


def classify_outcome(state: AgentState) -> Outcome:
    """A run without a summary or without any written file is an error outcome."""
    return "result" if state.is_complete() else "error"


@dataclass(frozen=True)
class WorkflowOutput:
    """What a run returns to its trigger; mirrors the persisted fragment."""

    outcome: Outcome
    url: str
    title: str
    summary: str
    files: dict[str, str] = field(default_factory=dict)
    message_id: str | None = None


class ResultPublisher:
    """Resolves the sandbox address and records the run's assistant message."""

    def __init__(self, store: ProjectStore, *, port: int) -> None:
        self._store = store
        self._port = port

    def resolve_address(self, steps: StepRunner, environment: EnvironmentHandle) -> str:
        return steps.run(RESOLVE_ADDRESS_STEP, lambda: environment.resolve_address(self._port))

    def publish(
        self,
        steps: StepRunner,
        *,
        project_id: str,
        state: AgentState,
        post: PostProcessOutput,
        url: str,
    ) -> WorkflowOutput:
        outcome = classify_outcome(state)
        message_id = steps.run(SAVE_RESULT_STEP, lambda: self._save(project_id, outcome, state, post, url))
        logger.info("workflow.outcome project={} outcome={} message={}", project_id, outcome, message_id)
        if outcome == "error":
            return WorkflowOutput(outcome=outcome, url=url, title="", summary=state.summary, message_id=message_id)
        return WorkflowOutput(
            outcome=outcome,
            url=url,
            title=post.title,
            summary=state.summary,
            files=dict(state.files),
            message_id=message_id,
        )

    def _save(self, project_id: str, outcome: Outcome, state: AgentState, post: PostProcessOutput, url: str) -> str:
        if outcome == "error":
            record = self._store.create_message(project_id, content=ERROR_MESSAGE, role="ASSISTANT", type="ERROR")
            return record.id

        record = self._store.create_message(
            project_id,
            content=post.response,
            role="ASSISTANT",
            type="RESULT",
            fragment=NewFragment(sandbox_url=url, title=post.title, files=dict(state.files)),
        )
        return record.id

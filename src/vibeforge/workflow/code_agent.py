"""The code-agent workflow: one durable run per project prompt."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from republic import LLM

from vibeforge.agent import CODE_AGENT_PROMPT, Agent
from vibeforge.checkpoint import CheckpointStore, StepRunner
from vibeforge.config import Settings
from vibeforge.hookspecs import create_plugin_manager
from vibeforge.integrations.republic_client import build_llm
from vibeforge.logging_utils import bind_run, unbind_run
from vibeforge.network import AgentNetwork, CompletionDetector, SummaryRouter
from vibeforge.sandbox import EnvironmentHandle, SandboxBackend
from vibeforge.state import NetworkState
from vibeforge.store import ProjectStore
from vibeforge.tools import SANDBOX_TOOLS, ToolRegistry, register_builtin_tools
from vibeforge.workflow.postprocess import build_postprocess_agents, run_postprocessing
from vibeforge.workflow.publisher import ResultPublisher, WorkflowOutput

CODE_AGENT = "code-agent"
NETWORK_NAME = "coding-agent-network"
HISTORY_STEP = "get-previous-messages"

LLMFactory = Callable[[str], LLM]


@dataclass(frozen=True)
class CodeAgentEvent:
    """Trigger for one run. Re-sending an event with the same run id replays its checkpoints."""

    prompt: str
    project_id: str
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)


class CodeAgentWorkflow:
    """Acquire a sandbox, loop the coding agent, post-process and persist the result."""

    def __init__(
        self,
        *,
        settings: Settings,
        store: ProjectStore,
        checkpoints: CheckpointStore,
        sandbox: SandboxBackend,
        llm_factory: LLMFactory | None = None,
        tools: ToolRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._store = store
        self._checkpoints = checkpoints
        self._sandbox = sandbox
        self._llm_factory = llm_factory or (lambda model: build_llm(settings, model))
        self._tools = tools or register_builtin_tools(ToolRegistry())
        self._publisher = ResultPublisher(store, port=settings.sandbox_port)

    def run(self, event: CodeAgentEvent) -> WorkflowOutput:
        token = bind_run(event.run_id)
        try:
            return self._run(event)
        finally:
            unbind_run(token)

    def _run(self, event: CodeAgentEvent) -> WorkflowOutput:
        logger.info("workflow.start project={} run={}", event.project_id, event.run_id)
        steps = StepRunner(self._checkpoints, event.run_id, max_attempts=self._settings.step_max_attempts)

        environment = EnvironmentHandle.acquire(
            steps,
            self._sandbox,
            template=self._settings.sandbox_template,
            timeout_seconds=self._settings.sandbox_timeout_seconds,
        )
        previous = steps.run(HISTORY_STEP, lambda: self._previous_messages(event.project_id))
        state = NetworkState(messages=previous)

        network = self.build_network()
        result = network.run(event.prompt, state=state, steps=steps, environment=environment)

        title_agent, response_agent = build_postprocess_agents(
            self._llm_factory(self._settings.postprocess_model),
            max_tokens=self._settings.max_tokens,
        )
        post = run_postprocessing(
            result.state.data.summary,
            title_agent=title_agent,
            response_agent=response_agent,
            steps=steps,
        )

        url = self._publisher.resolve_address(steps, environment)
        return self._publisher.publish(
            steps,
            project_id=event.project_id,
            state=result.state.data,
            post=post,
            url=url,
        )

    def build_code_agent(self) -> Agent:
        return Agent(
            name=CODE_AGENT,
            description="An expert coding agent",
            system_prompt=CODE_AGENT_PROMPT,
            llm=self._llm_factory(self._settings.model),
            tools=self._tools.subset(SANDBOX_TOOLS),
            hooks=create_plugin_manager(CompletionDetector()),
            max_tokens=self._settings.max_tokens,
            temperature=self._settings.temperature,
        )

    def build_network(self) -> AgentNetwork:
        code_agent = self.build_code_agent()
        return AgentNetwork(
            name=NETWORK_NAME,
            agents=[code_agent],
            router=SummaryRouter(code_agent),
            max_iterations=self._settings.max_iterations,
        )

    def _previous_messages(self, project_id: str) -> list[dict[str, Any]]:
        records = self._store.recent_messages(project_id, limit=self._settings.history_limit)
        formatted = [
            {
                "role": "assistant" if record.role == "ASSISTANT" else "user",
                "type": "text",
                "content": record.content,
            }
            for record in records
        ]
        formatted.reverse()
        return formatted

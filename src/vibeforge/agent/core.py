"""Core agent implementation for Vibeforge."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any

import pluggy
from loguru import logger
from republic import LLM, ErrorPayload

from vibeforge.checkpoint import StepRunner
from vibeforge.errors import ModelBackendError
from vibeforge.sandbox import EnvironmentHandle
from vibeforge.state import NetworkState
from vibeforge.tools import ToolContext, ToolRegistry, ToolRejected, ToolResult

FALLBACK_OUTPUT = "Fragment"


@dataclass(frozen=True)
class ToolCall:
    """One tool call requested by the model."""

    id: str
    name: str
    arguments: str


@dataclass(frozen=True)
class ToolCallResult:
    call: ToolCall
    status: str
    output: str


@dataclass
class AgentResult:
    """Output of one agent invocation: the model turn plus the tool results it produced."""

    agent_name: str
    output: list[dict[str, Any]] = field(default_factory=list)
    tool_calls: list[ToolCallResult] = field(default_factory=list)

    def last_assistant_text(self) -> str | None:
        for message in reversed(self.output):
            if message.get("role") == "assistant" and message.get("type") == "text":
                content = message.get("content")
                if isinstance(content, str) and content:
                    return content
                return None
        return None

    def history(self) -> list[dict[str, Any]]:
        """Render this result as chat messages for the next model call."""
        text = self.last_assistant_text()
        if not text and not self.tool_calls:
            return []
        assistant: dict[str, Any] = {"role": "assistant", "content": text or None}
        if self.tool_calls:
            assistant["tool_calls"] = [
                {
                    "id": item.call.id,
                    "type": "function",
                    "function": {"name": item.call.name, "arguments": item.call.arguments},
                }
                for item in self.tool_calls
            ]
        messages = [assistant]
        messages.extend(
            {"role": "tool", "tool_call_id": item.call.id, "content": item.output} for item in self.tool_calls
        )
        return messages


class Agent:
    """LLM-backed actor bound to an instruction, a model and a tool subset.

    One `run` performs a single inference and dispatches the tool calls it
    returns, in order. The network decides whether the agent runs again.
    """

    def __init__(
        self,
        *,
        name: str,
        description: str,
        system_prompt: str,
        llm: LLM,
        tools: ToolRegistry | None = None,
        hooks: pluggy.PluginManager | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self._system_prompt = system_prompt
        self._llm = llm
        self._tools = tools or ToolRegistry()
        self._hooks = hooks
        self._max_tokens = max_tokens
        self._temperature = temperature

    def run(
        self,
        prompt: str,
        *,
        state: NetworkState,
        steps: StepRunner,
        environment: EnvironmentHandle | None = None,
    ) -> AgentResult:
        context = ToolContext(steps=steps, environment=environment, state=state.data) if environment else None
        schemas = self._tools.tool_schemas() if context is not None else []
        messages = self._build_messages(prompt, state)

        response = steps.run(f"{self.name}:infer", lambda: self._infer(messages, schemas))
        text = response.get("text") or ""
        calls = [ToolCall(**call) for call in response.get("tool_calls", [])]

        result = AgentResult(agent_name=self.name)
        if text:
            result.output.append({"role": "assistant", "type": "text", "content": text})
        if calls:
            result.output.append({
                "role": "assistant",
                "type": "tool_call",
                "tools": [{"id": call.id, "name": call.name} for call in calls],
            })
        for call in calls:
            outcome = self._dispatch(call, context)
            result.tool_calls.append(ToolCallResult(call=call, status=outcome.status, output=outcome.render()))

        if self._hooks is not None:
            self._hooks.hook.on_response(agent_name=self.name, result=result, state=state)
        return result

    def _dispatch(self, call: ToolCall, context: ToolContext | None) -> ToolResult:
        if context is None:
            return ToolRejected(tool=call.name, reason="no execution environment bound to this agent")
        return self._tools.execute(call.name, arguments=call.arguments, context=context)

    def _build_messages(self, prompt: str, state: NetworkState) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if self._system_prompt:
            messages.append({"role": "system", "content": self._system_prompt})
        for message in state.messages:
            messages.append({"role": message["role"], "content": message["content"]})
        messages.append({"role": "user", "content": prompt})
        messages.extend(state.history())
        return messages

    def _infer(self, messages: list[dict[str, Any]], schemas: list[dict[str, Any]]) -> dict[str, Any]:
        logger.info("agent.infer name={} messages={} tools={}", self.name, len(messages), len(schemas))
        kwargs: dict[str, Any] = {}
        if self._temperature is not None:
            kwargs["temperature"] = self._temperature
        try:
            if schemas:
                calls = self._llm.tool_calls(messages=messages, tools=schemas, max_tokens=self._max_tokens, **kwargs)
                if calls:
                    return {"text": "", "tool_calls": [_normalize_call(call) for call in calls]}
            text = self._llm.chat(messages=messages, max_tokens=self._max_tokens, **kwargs)
        except ErrorPayload as exc:
            raise ModelBackendError(str(exc)) from exc
        return {"text": text or "", "tool_calls": []}


def parse_agent_output(result: AgentResult) -> str:
    """Return the first output message's text, or a fixed fallback when it is not text."""
    if not result.output:
        return FALLBACK_OUTPUT
    first = result.output[0]
    if first.get("type") != "text":
        return FALLBACK_OUTPUT
    return str(first.get("content", ""))


def _normalize_call(call: dict[str, Any]) -> dict[str, str]:
    function = call.get("function") or {}
    arguments = function.get("arguments", "")
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments, ensure_ascii=False)
    return {
        "id": call.get("id") or f"call_{uuid.uuid4().hex[:12]}",
        "name": function.get("name") or "",
        "arguments": arguments,
    }

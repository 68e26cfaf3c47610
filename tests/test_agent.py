import pytest
from republic import ErrorPayload
from republic.core.errors import ErrorKind

from vibeforge.agent import Agent, AgentResult, parse_agent_output
from vibeforge.checkpoint import CheckpointStore, StepRunner
from vibeforge.errors import ModelBackendError
from vibeforge.hookspecs import create_plugin_manager, hookimpl
from vibeforge.sandbox import EnvironmentHandle
from vibeforge.state import NetworkState
from vibeforge.tools import SANDBOX_TOOLS, ToolRegistry

from .fakes import FakeLLM, FakeSandboxBackend, text_response, tool_call_response


@pytest.fixture
def steps(checkpoints: CheckpointStore) -> StepRunner:
    return StepRunner(checkpoints, "run-agent")


@pytest.fixture
def environment(steps: StepRunner, backend: FakeSandboxBackend) -> EnvironmentHandle:
    return EnvironmentHandle.acquire(steps, backend, template="tpl", timeout_seconds=60)


def _agent(llm: FakeLLM, registry: ToolRegistry | None = None, **kwargs) -> Agent:
    return Agent(
        name="code-agent",
        description="writes code",
        system_prompt="You are a coder.",
        llm=llm,  # type: ignore[arg-type]
        tools=registry.subset(SANDBOX_TOOLS) if registry is not None else None,
        **kwargs,
    )


class _Recorder:
    def __init__(self) -> None:
        self.seen: list[tuple[str, AgentResult]] = []

    @hookimpl
    def on_response(self, agent_name: str, result: AgentResult, state: NetworkState) -> None:
        self.seen.append((agent_name, result))


def test_tool_calls_are_dispatched_in_order(
    registry: ToolRegistry, steps: StepRunner, environment: EnvironmentHandle, backend: FakeSandboxBackend
) -> None:
    response = tool_call_response("write_files", {"files": [{"path": "a.ts", "content": "a"}]}, call_id="c1")
    response += tool_call_response("run_command", {"command": "cat a.ts"}, call_id="c2")
    backend.outputs["cat a.ts"] = "a"
    state = NetworkState()

    result = _agent(FakeLLM([response]), registry).run("build", state=state, steps=steps, environment=environment)

    assert [item.call.id for item in result.tool_calls] == ["c1", "c2"]
    assert [item.status for item in result.tool_calls] == ["ok", "ok"]
    assert result.tool_calls[1].output == "a"
    assert state.data.files == {"a.ts": "a"}
    assert result.output == [
        {
            "role": "assistant",
            "type": "tool_call",
            "tools": [{"id": "c1", "name": "write_files"}, {"id": "c2", "name": "run_command"}],
        }
    ]


def test_hook_fires_once_per_response(steps: StepRunner, environment: EnvironmentHandle) -> None:
    recorder = _Recorder()
    agent = _agent(FakeLLM([text_response("hello")]), hooks=create_plugin_manager(recorder))

    result = agent.run("hi", state=NetworkState(), steps=steps, environment=environment)

    assert recorder.seen == [("code-agent", result)]
    assert result.last_assistant_text() == "hello"


def test_rejected_arguments_are_reported_to_the_model(
    registry: ToolRegistry, steps: StepRunner, environment: EnvironmentHandle, backend: FakeSandboxBackend
) -> None:
    llm = FakeLLM([tool_call_response("run_command", "{broken")])

    result = _agent(llm, registry).run("go", state=NetworkState(), steps=steps, environment=environment)

    assert result.tool_calls[0].status == "rejected"
    assert result.tool_calls[0].output.startswith("Error: invalid arguments for run_command")
    assert backend.commands == []


def test_messages_include_prior_conversation_and_history(
    registry: ToolRegistry, steps: StepRunner, environment: EnvironmentHandle
) -> None:
    llm = FakeLLM([
        tool_call_response("read_files", {"files": []}, call_id="c1"),
        text_response("done"),
    ])
    agent = _agent(llm, registry)
    state = NetworkState(messages=[{"role": "user", "content": "earlier", "type": "RESULT"}])

    state.results.append(agent.run("build", state=state, steps=steps, environment=environment))
    agent.run("build", state=state, steps=steps, environment=environment)

    first, second = llm.requests("tool_calls")
    assert first["messages"] == [
        {"role": "system", "content": "You are a coder."},
        {"role": "user", "content": "earlier"},
        {"role": "user", "content": "build"},
    ]
    assert second["messages"][3:] == [
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {"id": "c1", "type": "function", "function": {"name": "read_files", "arguments": '{"files": []}'}}
            ],
        },
        {"role": "tool", "tool_call_id": "c1", "content": "[]"},
    ]
    assert [tool["function"]["name"] for tool in first["tools"]] == ["read_files", "run_command", "write_files"]
    assert second["messages"] == llm.requests("chat")[0]["messages"]


def test_inference_is_replayed_from_checkpoint(
    checkpoints: CheckpointStore, steps: StepRunner, environment: EnvironmentHandle
) -> None:
    llm = FakeLLM([text_response("first")])
    _agent(llm).run("go", state=NetworkState(), steps=steps, environment=environment)

    replay_steps = StepRunner(checkpoints, "run-agent")
    result = _agent(llm).run("go", state=NetworkState(), steps=replay_steps, environment=environment)

    assert result.last_assistant_text() == "first"
    assert len(llm.calls) == 1


def test_backend_errors_raise_model_backend_error(steps: StepRunner, environment: EnvironmentHandle) -> None:
    agent = _agent(FakeLLM([ErrorPayload(ErrorKind.PROVIDER, "upstream returned 502")]))

    with pytest.raises(ModelBackendError, match="upstream returned 502"):
        agent.run("go", state=NetworkState(), steps=steps, environment=environment)


def test_agent_without_tools_asks_for_text_only(steps: StepRunner, environment: EnvironmentHandle) -> None:
    llm = FakeLLM([text_response("plain answer")])

    result = _agent(llm).run("go", state=NetworkState(), steps=steps, environment=environment)

    assert result.last_assistant_text() == "plain answer"
    assert [call["method"] for call in llm.calls] == ["chat"]


def test_text_turn_falls_back_to_chat_within_one_step(
    registry: ToolRegistry, checkpoints: CheckpointStore, steps: StepRunner, environment: EnvironmentHandle
) -> None:
    llm = FakeLLM([text_response("all done")])

    result = _agent(llm, registry).run("go", state=NetworkState(), steps=steps, environment=environment)

    assert result.last_assistant_text() == "all done"
    assert [call["method"] for call in llm.calls] == ["tool_calls", "chat"]
    infer = [entry for entry in checkpoints.read("run-agent") if entry.payload["key"] == "code-agent:infer"]
    assert [entry.payload["value"] for entry in infer] == [{"text": "all done", "tool_calls": []}]


def test_temperature_is_forwarded_when_set(
    registry: ToolRegistry, steps: StepRunner, environment: EnvironmentHandle
) -> None:
    llm = FakeLLM([tool_call_response("read_files", {"files": []}), text_response("done")])
    agent = _agent(llm, registry, temperature=0.1)

    agent.run("go", state=NetworkState(), steps=steps, environment=environment)
    agent.run("go", state=NetworkState(), steps=steps, environment=environment)

    assert [call["kwargs"] for call in llm.calls] == [{"temperature": 0.1}] * 3


def test_temperature_is_omitted_by_default(steps: StepRunner, environment: EnvironmentHandle) -> None:
    llm = FakeLLM([text_response("hello")])

    _agent(llm).run("go", state=NetworkState(), steps=steps, environment=environment)

    assert llm.calls[0]["kwargs"] == {}


def test_calls_without_ids_get_distinct_recorded_ids(
    registry: ToolRegistry, checkpoints: CheckpointStore, steps: StepRunner, environment: EnvironmentHandle
) -> None:
    llm = FakeLLM([
        tool_call_response("read_files", {"files": []}, call_id=None),
        tool_call_response("read_files", {"files": []}, call_id=None),
    ])
    agent = _agent(llm, registry)
    state = NetworkState()

    for _ in range(2):
        state.results.append(agent.run("go", state=state, steps=steps, environment=environment))

    tool_ids = [message["tool_call_id"] for message in state.history() if message["role"] == "tool"]
    assert len(set(tool_ids)) == 2
    assert all(tool_id.startswith("call_") for tool_id in tool_ids)

    replayed = NetworkState()
    replay_steps = StepRunner(checkpoints, "run-agent")
    for _ in range(2):
        replayed.results.append(agent.run("go", state=replayed, steps=replay_steps, environment=environment))
    assert [item.call.id for result in replayed.results for item in result.tool_calls] == tool_ids


def test_recorded_calls_without_environment_are_rejected(
    registry: ToolRegistry, checkpoints: CheckpointStore, steps: StepRunner, environment: EnvironmentHandle
) -> None:
    llm = FakeLLM([tool_call_response("run_command", {"command": "ls"})])
    _agent(llm, registry).run("go", state=NetworkState(), steps=steps, environment=environment)

    replay_steps = StepRunner(checkpoints, "run-agent")
    result = _agent(llm, registry).run("go", state=NetworkState(), steps=replay_steps)

    assert result.tool_calls[0].status == "rejected"
    assert len(llm.calls) == 1


@pytest.mark.parametrize(
    ("output", "expected"),
    [
        ([{"role": "assistant", "type": "text", "content": "Landing page"}], "Landing page"),
        ([{"role": "assistant", "type": "tool_call", "tools": []}], "Fragment"),
        ([], "Fragment"),
    ],
)
def test_parse_agent_output(output: list[dict], expected: str) -> None:
    assert parse_agent_output(AgentResult(agent_name="title", output=output)) == expected

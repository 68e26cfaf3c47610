from __future__ import annotations

from pathlib import Path

import pytest

from vibeforge.checkpoint import CheckpointStore, StepRunner
from vibeforge.config import Settings
from vibeforge.sandbox import EnvironmentHandle
from vibeforge.state import AgentState
from vibeforge.tools import ToolContext, ToolRegistry, register_builtin_tools

from .fakes import FakeSandboxBackend


@pytest.fixture
def checkpoints(tmp_path: Path) -> CheckpointStore:
    return CheckpointStore(tmp_path / "runs")


@pytest.fixture
def backend() -> FakeSandboxBackend:
    return FakeSandboxBackend()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(_env_file=None, home=tmp_path / "home")


@pytest.fixture
def registry() -> ToolRegistry:
    return register_builtin_tools(ToolRegistry())


@pytest.fixture
def tool_context(checkpoints: CheckpointStore, backend: FakeSandboxBackend) -> ToolContext:
    steps = StepRunner(checkpoints, "run-tools")
    environment = EnvironmentHandle.acquire(steps, backend, template="tpl", timeout_seconds=60)
    return ToolContext(steps=steps, environment=environment, state=AgentState())

"""State threaded through one run of the agent network."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vibeforge.agent.core import AgentResult


@dataclass
class AgentState:
    """Data the tools and the completion detector accumulate during a run."""

    summary: str = ""
    files: dict[str, str] = field(default_factory=dict)

    def merge_files(self, written: Mapping[str, str]) -> None:
        """Apply a write-files result: replace written paths, keep everything else."""
        for path, content in written.items():
            self.files[path] = content

    def is_complete(self) -> bool:
        return bool(self.summary) and bool(self.files)


@dataclass
class NetworkState:
    """Shared state plus the conversation the network has produced so far."""

    data: AgentState = field(default_factory=AgentState)
    messages: list[dict[str, Any]] = field(default_factory=list)
    results: list[AgentResult] = field(default_factory=list)

    def history(self) -> list[dict[str, Any]]:
        """Model-facing history of every agent result produced in this run."""
        rendered: list[dict[str, Any]] = []
        for result in self.results:
            rendered.extend(result.history())
        return rendered

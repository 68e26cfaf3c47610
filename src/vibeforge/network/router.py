"""Routing strategies deciding which agent runs next."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from vibeforge.agent import Agent
from vibeforge.state import NetworkState


@dataclass(frozen=True)
class RouterInput:
    """What a router may look at when deciding."""

    state: NetworkState
    iteration: int
    agents: Sequence[Agent]


class Router(Protocol):
    def decide(self, route: RouterInput) -> Agent | None:
        """Return the next agent to run, or None to stop the network."""
        ...


class SummaryRouter:
    """Keep running one agent until the run has a summary."""

    def __init__(self, agent: Agent) -> None:
        self._agent = agent

    def decide(self, route: RouterInput) -> Agent | None:
        if route.state.data.summary:
            return None
        return self._agent


class FunctionRouter:
    """Adapt a plain decision function to the `Router` protocol."""

    def __init__(self, decide: Callable[[RouterInput], Agent | None]) -> None:
        self._decide = decide

    def decide(self, route: RouterInput) -> Agent | None:
        return self._decide(route)

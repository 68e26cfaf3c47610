"""Bounded agent network loop."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from vibeforge.agent import Agent
from vibeforge.checkpoint import StepRunner
from vibeforge.network.router import Router, RouterInput
from vibeforge.sandbox import EnvironmentHandle
from vibeforge.state import NetworkState

DEFAULT_MAX_ITERATIONS = 15


@dataclass(frozen=True)
class NetworkResult:
    state: NetworkState
    iterations: int

    @property
    def exhausted(self) -> bool:
        """True when the loop ended without any agent emitting the completion marker."""
        return not self.state.data.summary


class AgentNetwork:
    """Runs agents against shared state until the router returns none or the cap is hit."""

    def __init__(
        self,
        *,
        name: str,
        agents: Sequence[Agent],
        router: Router,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.name = name
        self.agents = list(agents)
        self._router = router
        self.max_iterations = max_iterations

    def run(
        self,
        prompt: str,
        *,
        state: NetworkState,
        steps: StepRunner,
        environment: EnvironmentHandle | None = None,
    ) -> NetworkResult:
        iterations = 0
        while iterations < self.max_iterations:
            agent = self._router.decide(RouterInput(state=state, iteration=iterations, agents=self.agents))
            if agent is None:
                break
            iterations += 1
            logger.info("network.iteration name={} iteration={} agent={}", self.name, iterations, agent.name)
            result = agent.run(prompt, state=state, steps=steps, environment=environment)
            state.results.append(result)

        logger.info(
            "network.done name={} iterations={} summary={} files={}",
            self.name,
            iterations,
            bool(state.data.summary),
            len(state.data.files),
        )
        return NetworkResult(state=state, iterations=iterations)

"""Single-shot agents that turn the run summary into user-facing text."""

from __future__ import annotations

from dataclasses import dataclass

from republic import LLM

from vibeforge.agent import FRAGMENT_TITLE_PROMPT, RESPONSE_PROMPT, Agent, parse_agent_output
from vibeforge.checkpoint import StepRunner
from vibeforge.state import NetworkState

TITLE_AGENT = "fragment-title-generator"
RESPONSE_AGENT = "response-generator"


@dataclass(frozen=True)
class PostProcessOutput:
    title: str
    response: str


def build_postprocess_agents(llm: LLM, *, max_tokens: int | None = None) -> tuple[Agent, Agent]:
    title_agent = Agent(
        name=TITLE_AGENT,
        description="A fragment title generator",
        system_prompt=FRAGMENT_TITLE_PROMPT,
        llm=llm,
        max_tokens=max_tokens,
    )
    response_agent = Agent(
        name=RESPONSE_AGENT,
        description="A response generator",
        system_prompt=RESPONSE_PROMPT,
        llm=llm,
        max_tokens=max_tokens,
    )
    return title_agent, response_agent


def run_postprocessing(
    summary: str,
    *,
    title_agent: Agent,
    response_agent: Agent,
    steps: StepRunner,
) -> PostProcessOutput:
    """Run each agent once against the summary, never against the raw user prompt."""
    title_result = title_agent.run(summary, state=NetworkState(), steps=steps)
    response_result = response_agent.run(summary, state=NetworkState(), steps=steps)
    return PostProcessOutput(
        title=parse_agent_output(title_result),
        response=parse_agent_output(response_result),
    )

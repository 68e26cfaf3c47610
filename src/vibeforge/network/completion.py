"""Completion detection for agent responses."""

from __future__ import annotations

from loguru import logger

from vibeforge.agent import COMPLETION_MARKER, AgentResult
from vibeforge.hookspecs import hookimpl
from vibeforge.state import NetworkState


class CompletionDetector:
    """Copy the last assistant text into the run summary when it carries the completion marker."""

    def __init__(self, marker: str = COMPLETION_MARKER) -> None:
        self.marker = marker

    @hookimpl
    def on_response(self, agent_name: str, result: AgentResult, state: NetworkState) -> None:
        text = result.last_assistant_text()
        if not text or self.marker not in text:
            return
        # Last marker wins: the summary is overwritten each time the marker is seen.
        # The summary router stops the loop after the first write, so in practice it is set once.
        state.data.summary = text
        logger.info("agent.completion agent={} chars={}", agent_name, len(text))

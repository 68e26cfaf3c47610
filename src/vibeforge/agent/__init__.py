"""Agent package for Vibeforge."""

from .core import Agent, AgentResult, ToolCall, ToolCallResult, parse_agent_output
from .prompts import COMPLETION_MARKER, CODE_AGENT_PROMPT, FRAGMENT_TITLE_PROMPT, RESPONSE_PROMPT

__all__ = [
    "CODE_AGENT_PROMPT",
    "COMPLETION_MARKER",
    "FRAGMENT_TITLE_PROMPT",
    "RESPONSE_PROMPT",
    "Agent",
    "AgentResult",
    "ToolCall",
    "ToolCallResult",
    "parse_agent_output",
]

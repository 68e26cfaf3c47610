"""Agent network orchestration."""

from .completion import CompletionDetector
from .loop import DEFAULT_MAX_ITERATIONS, AgentNetwork, NetworkResult
from .router import FunctionRouter, Router, RouterInput, SummaryRouter

__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "AgentNetwork",
    "CompletionDetector",
    "FunctionRouter",
    "NetworkResult",
    "Router",
    "RouterInput",
    "SummaryRouter",
]

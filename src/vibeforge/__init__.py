"""Vibeforge - durable orchestration for a sandboxed coding agent."""

from .workflow import CodeAgentEvent, CodeAgentWorkflow, WorkflowOutput

__version__ = "0.1.0"

__all__ = ["CodeAgentEvent", "CodeAgentWorkflow", "WorkflowOutput"]

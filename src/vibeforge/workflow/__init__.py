"""Workflow entry point and result publishing."""

from .code_agent import CodeAgentEvent, CodeAgentWorkflow
from .postprocess import PostProcessOutput, build_postprocess_agents, run_postprocessing
from .publisher import ERROR_MESSAGE, ResultPublisher, WorkflowOutput, classify_outcome

__all__ = [
    "ERROR_MESSAGE",
    "CodeAgentEvent",
    "CodeAgentWorkflow",
    "PostProcessOutput",
    "ResultPublisher",
    "WorkflowOutput",
    "build_postprocess_agents",
    "classify_outcome",
    "run_postprocessing",
]

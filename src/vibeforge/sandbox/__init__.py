"""Execution environment access."""

from .backend import E2BSandboxBackend, SandboxBackend, SandboxSession
from .handle import CommandOutput, EnvironmentHandle

__all__ = ["CommandOutput", "E2BSandboxBackend", "EnvironmentHandle", "SandboxBackend", "SandboxSession"]

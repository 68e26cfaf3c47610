"""Application-level exception types for Vibeforge."""

from __future__ import annotations


class VibeforgeError(Exception):
    """Base exception for Vibeforge."""


class ConfigurationError(VibeforgeError):
    """Base exception for configuration and startup validation errors."""


class ModelNotConfiguredError(ConfigurationError):
    """Raised when model configuration is missing."""


class InvalidModelFormatError(ConfigurationError):
    """Raised when model format is not provider:model."""


class StepFailedError(VibeforgeError):
    """Raised when a step replays a failure recorded by an earlier evaluation."""

    def __init__(self, step: str, error_type: str, message: str) -> None:
        super().__init__(f"step '{step}' failed: {error_type}: {message}")
        self.step = step
        self.error_type = error_type
        self.message = message


class SandboxError(VibeforgeError):
    """Raised when an execution environment cannot be created or reached."""


class ModelBackendError(VibeforgeError):
    """Raised when the model backend returns a response we cannot interpret."""


class ToolNotFoundError(VibeforgeError, KeyError):
    """Raised when a tool name is not registered."""

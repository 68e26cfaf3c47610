"""Configuration management for Vibeforge."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vibeforge.errors import InvalidModelFormatError, ModelNotConfiguredError

DEFAULT_HOME = Path.home() / ".vibeforge"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="VIBEFORGE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Model backend
    model: str = Field(default="openai:gpt-4.1", description="Coding agent model in provider:model form")
    postprocess_model: str = Field(default="openai:gpt-4o", description="Model for title and response generation")
    api_key: str | None = Field(default=None, description="API key for the LLM provider")
    api_base: str | None = Field(default=None, description="Optional API base URL")
    max_tokens: int = Field(default=4096, ge=1, description="Maximum tokens per model response")
    temperature: float = Field(default=0.1, ge=0, le=2, description="Sampling temperature for the coding agent")

    # Orchestration
    max_iterations: int = Field(default=15, ge=1, description="Network iteration cap")
    history_limit: int = Field(default=5, ge=0, description="Prior messages fed into a run")
    step_max_attempts: int = Field(default=1, ge=1, description="Evaluations allowed for a failing step")

    # Execution environment
    sandbox_template: str = Field(default="vibe-nextjs-filway-002", description="Sandbox template id")
    sandbox_timeout_seconds: int = Field(default=1800, ge=1, description="Sandbox lifetime")
    sandbox_port: int = Field(default=3000, description="Port of the preview server inside the sandbox")
    sandbox_api_key: str | None = Field(default=None, description="API key for the sandbox service")

    # Storage and logging
    home: Path = Field(default=DEFAULT_HOME, description="Directory for checkpoints and the project database")
    log_level: str = Field(default="INFO", description="Log level")

    def resolve_home(self) -> Path:
        home = self.home.expanduser()
        home.mkdir(parents=True, exist_ok=True)
        return home

    @property
    def runs_dir(self) -> Path:
        return self.resolve_home() / "runs"

    @property
    def database_path(self) -> Path:
        return self.resolve_home() / "projects.db"


def validate_model(model: str | None) -> str:
    """Return the model string if it has provider:model form."""
    if not model:
        raise ModelNotConfiguredError("Model not configured. Set VIBEFORGE_MODEL (e.g., 'openai:gpt-4.1').")
    provider, separator, name = model.partition(":")
    if not separator or not provider or not name:
        raise InvalidModelFormatError(f"Model must be in provider:model form, got '{model}'")
    return model


def load_settings(**overrides: Any) -> Settings:
    """Load settings from the environment and apply non-empty overrides."""
    settings = Settings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    validate_model(settings.model)
    validate_model(settings.postprocess_model)
    return settings

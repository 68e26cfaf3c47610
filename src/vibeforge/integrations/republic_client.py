"""Republic integration helpers."""

from __future__ import annotations

from republic import LLM

from vibeforge.config import Settings, validate_model


def build_llm(settings: Settings, model: str | None = None) -> LLM:
    """Build a Republic LLM client for `model` (defaults to the coding model)."""

    return LLM(
        validate_model(model or settings.model),
        api_key=settings.api_key,
        api_base=settings.api_base,
    )

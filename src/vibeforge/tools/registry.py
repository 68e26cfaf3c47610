"""Tool registry with schema-validated dispatch."""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel, ValidationError
from republic import schema_from_model

from vibeforge.checkpoint import StepRunner
from vibeforge.errors import ToolNotFoundError
from vibeforge.sandbox import EnvironmentHandle
from vibeforge.state import AgentState
from vibeforge.tools.results import ToolError, ToolRejected, ToolResult

ToolHandler = Callable[[Any, "ToolContext"], ToolResult]
ARGUMENT_PREVIEW_CHARS = 30


def _preview(value: Any) -> str:
    try:
        rendered = json.dumps(value, ensure_ascii=False)
    except TypeError:
        rendered = repr(value)
    if len(rendered) <= ARGUMENT_PREVIEW_CHARS:
        return rendered
    return rendered[: ARGUMENT_PREVIEW_CHARS - 3] + "..."


@dataclass
class ToolContext:
    """Everything a handler may touch during one call."""

    steps: StepRunner
    environment: EnvironmentHandle
    state: AgentState


@dataclass(frozen=True)
class ToolDescriptor:
    """Tool metadata, input schema and handler."""

    name: str
    short_description: str
    model: type[BaseModel]
    handler: ToolHandler


class ToolRegistry:
    """Registry for the tools agents may call."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    def register(
        self,
        *,
        name: str,
        short_description: str,
        model: type[BaseModel],
    ) -> Callable[[ToolHandler], ToolHandler]:
        def decorator(handler: ToolHandler) -> ToolHandler:
            self._tools[name] = ToolDescriptor(
                name=name,
                short_description=short_description,
                model=model,
                handler=handler,
            )
            return handler

        return decorator

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def descriptors(self) -> list[ToolDescriptor]:
        return sorted(self._tools.values(), key=lambda item: item.name)

    def subset(self, names: Iterable[str]) -> ToolRegistry:
        """Return a registry holding only `names`, for binding a tool subset to an agent."""
        selected = ToolRegistry()
        for name in names:
            descriptor = self.get(name)
            if descriptor is None:
                raise ToolNotFoundError(name)
            selected._tools[name] = descriptor
        return selected

    def tool_schemas(self) -> list[dict[str, Any]]:
        """Function-calling schemas sent to the model; calls come back through `execute`."""
        return [
            schema_from_model(descriptor.model, name=descriptor.name, description=descriptor.short_description)
            for descriptor in self.descriptors()
        ]

    def execute(self, name: str, *, arguments: str | dict[str, Any] | None, context: ToolContext) -> ToolResult:
        """Validate `arguments` against the tool schema and run the handler."""
        descriptor = self.get(name)
        if descriptor is None:
            logger.warning("tool.call.rejected name={} reason=unknown", name)
            return ToolRejected(tool=name, reason="unknown tool")

        try:
            params = descriptor.model.model_validate(_parse_arguments(arguments))
        except (ValueError, ValidationError) as exc:
            logger.warning("tool.call.rejected name={} reason={!s}", name, exc)
            return ToolRejected(tool=name, reason=_describe_rejection(exc))

        return self._invoke(descriptor, params, context)

    def _invoke(self, descriptor: ToolDescriptor, params: BaseModel, context: ToolContext) -> ToolResult:
        preview = ", ".join(f"{key}={_preview(value)}" for key, value in params.model_dump().items())
        logger.info("tool.call.start name={} {{ {} }}", descriptor.name, preview)
        start = time.monotonic()
        try:
            result = descriptor.handler(params, context)
        except Exception as exc:
            # Handlers report failures as data; anything escaping is still shown to the model.
            logger.exception("tool.call.error name={}", descriptor.name)
            result = ToolError(f"Error: {exc!s}")
        finally:
            duration = time.monotonic() - start
            logger.info("tool.call.end name={} duration={:.3f}ms", descriptor.name, duration * 1000)
        return result


def _parse_arguments(arguments: str | dict[str, Any] | None) -> dict[str, Any]:
    if arguments is None:
        return {}
    if isinstance(arguments, dict):
        return arguments
    raw = arguments.strip()
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"arguments are not valid JSON: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("arguments must be a JSON object")
    return parsed


def _describe_rejection(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ())) or "(root)"
            problems.append(f"{location}: {error.get('msg', 'invalid')}")
        return "; ".join(problems)
    return str(exc)

"""Explicit tool result variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

ToolStatus = Literal["ok", "error", "rejected"]


@dataclass(frozen=True)
class ToolOk:
    data: Any
    status: ToolStatus = "ok"

    def render(self) -> str:
        return self.data if isinstance(self.data, str) else str(self.data)


@dataclass(frozen=True)
class ToolError:
    """The tool ran and failed; the text is shown to the model."""

    error: str
    status: ToolStatus = "error"

    def render(self) -> str:
        return self.error


@dataclass(frozen=True)
class ToolRejected:
    """The call never reached a handler because its arguments were malformed."""

    tool: str
    reason: str
    status: ToolStatus = "rejected"

    def render(self) -> str:
        return f"Error: invalid arguments for {self.tool}: {self.reason}"


ToolResult = ToolOk | ToolError | ToolRejected

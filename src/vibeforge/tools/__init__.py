"""Tools package for Vibeforge."""

from .builtin import READ_FILES, RUN_COMMAND, SANDBOX_TOOLS, WRITE_FILES, register_builtin_tools
from .registry import ToolContext, ToolDescriptor, ToolRegistry
from .results import ToolError, ToolOk, ToolRejected, ToolResult

__all__ = [
    "READ_FILES",
    "RUN_COMMAND",
    "SANDBOX_TOOLS",
    "WRITE_FILES",
    "ToolContext",
    "ToolDescriptor",
    "ToolError",
    "ToolOk",
    "ToolRegistry",
    "ToolRejected",
    "ToolResult",
    "register_builtin_tools",
]

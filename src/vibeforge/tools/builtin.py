"""Built-in sandbox tools."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field

from vibeforge.sandbox import CommandOutput
from vibeforge.tools.registry import ToolContext, ToolRegistry
from vibeforge.tools.results import ToolError, ToolOk, ToolResult

RUN_COMMAND = "run_command"
WRITE_FILES = "write_files"
READ_FILES = "read_files"
SANDBOX_TOOLS = (RUN_COMMAND, WRITE_FILES, READ_FILES)


class RunCommandInput(BaseModel):
    command: str = Field(..., description="Shell command to run in the sandbox")


class FileEntry(BaseModel):
    path: str = Field(..., min_length=1, description="File path relative to the project root")
    content: str = Field(..., description="Full file content")


class WriteFilesInput(BaseModel):
    files: list[FileEntry] = Field(..., description="Files to create or overwrite")


class ReadFilesInput(BaseModel):
    files: list[str] = Field(..., description="Paths of the files to read")


def register_builtin_tools(registry: ToolRegistry) -> ToolRegistry:
    """Register run-command, write-files and read-files on `registry`."""

    register = registry.register

    @register(name=RUN_COMMAND, short_description="Use the terminal to run commands", model=RunCommandInput)
    def run_command(params: RunCommandInput, context: ToolContext) -> ToolResult:
        def _run() -> dict[str, Any]:
            output = context.environment.run(params.command)
            return {"stdout": output.stdout, "stderr": output.stderr, "error": output.error}

        output = CommandOutput(**context.steps.run(RUN_COMMAND, _run))
        if output.ok:
            return ToolOk(output.stdout)
        return ToolError(output.render())

    @register(name=WRITE_FILES, short_description="Create or update files in the sandbox", model=WriteFilesInput)
    def write_files(params: WriteFilesInput, context: ToolContext) -> ToolResult:
        def _write() -> dict[str, Any]:
            written: dict[str, str] = {}
            try:
                session = context.environment.connect()
                for entry in params.files:
                    session.write_file(entry.path, entry.content)
                    written[entry.path] = entry.content
            except Exception as exc:
                return {"written": written, "error": f"Error: {exc!s}"}
            return {"written": written, "error": None}

        outcome = context.steps.run(WRITE_FILES, _write)
        # Merge against the live state so consecutive calls see each other's writes.
        context.state.merge_files(outcome["written"])
        if outcome["error"]:
            return ToolError(outcome["error"])
        paths = ", ".join(outcome["written"])
        return ToolOk(f"Updated {len(outcome['written'])} file(s): {paths}")

    @register(name=READ_FILES, short_description="Read files from the sandbox", model=ReadFilesInput)
    def read_files(params: ReadFilesInput, context: ToolContext) -> ToolResult:
        def _read() -> dict[str, Any]:
            try:
                session = context.environment.connect()
                contents = [{"path": path, "content": session.read_file(path)} for path in params.files]
            except Exception as exc:
                return {"error": f"Error: {exc!s}"}
            return {"content": json.dumps(contents, ensure_ascii=False)}

        outcome = context.steps.run(READ_FILES, _read)
        if "error" in outcome:
            return ToolError(outcome["error"])
        return ToolOk(outcome["content"])

    return registry

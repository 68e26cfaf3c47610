"""Remote execution environment backends."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from e2b_code_interpreter import Sandbox

OutputCallback = Callable[[str], None]


class SandboxSession(Protocol):
    """Live connection to one execution environment."""

    def run_command(
        self,
        command: str,
        *,
        on_stdout: OutputCallback,
        on_stderr: OutputCallback,
    ) -> str:
        """Run a shell command and return its stdout."""
        ...

    def write_file(self, path: str, content: str) -> None: ...

    def read_file(self, path: str) -> str: ...

    def get_host(self, port: int) -> str: ...


class SandboxBackend(Protocol):
    """Service that creates and re-attaches execution environments by id."""

    def create(self, template: str, *, timeout_seconds: int) -> str:
        """Create an environment from `template` with a bounded lifetime and return its id."""
        ...

    def connect(self, sandbox_id: str) -> SandboxSession: ...


class E2BSandboxSession:
    """`SandboxSession` over an e2b code interpreter sandbox."""

    def __init__(self, sandbox: Sandbox) -> None:
        self._sandbox = sandbox

    def run_command(self, command: str, *, on_stdout: OutputCallback, on_stderr: OutputCallback) -> str:
        result = self._sandbox.commands.run(command, on_stdout=on_stdout, on_stderr=on_stderr)
        return result.stdout

    def write_file(self, path: str, content: str) -> None:
        self._sandbox.files.write(path, content)

    def read_file(self, path: str) -> str:
        return self._sandbox.files.read(path)

    def get_host(self, port: int) -> str:
        return self._sandbox.get_host(port)


class E2BSandboxBackend:
    """`SandboxBackend` backed by the e2b sandbox service."""

    def __init__(self, api_key: str | None = None) -> None:
        self._api_key = api_key

    def create(self, template: str, *, timeout_seconds: int) -> str:
        sandbox = Sandbox(template=template, api_key=self._api_key)
        sandbox.set_timeout(timeout_seconds)
        return sandbox.sandbox_id

    def connect(self, sandbox_id: str) -> SandboxSession:
        return E2BSandboxSession(Sandbox.connect(sandbox_id, api_key=self._api_key))

"""Execution environment handle bound to one workflow run."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from vibeforge.checkpoint import StepRunner
from vibeforge.errors import SandboxError
from vibeforge.sandbox.backend import SandboxBackend, SandboxSession

ACQUIRE_STEP = "get-sandbox-id"


@dataclass(frozen=True)
class CommandOutput:
    """Result of one shell command; failures are reported as data."""

    stdout: str
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self) -> str:
        if self.ok:
            return self.stdout
        return f"Command failed: {self.error} \nstdout: {self.stdout} \nstderr: {self.stderr}"


class EnvironmentHandle:
    """Opaque sandbox id plus the operations the tools need against it.

    The handle never caches a live connection: every operation re-attaches by
    id, so it keeps working after a process restart and replay.
    """

    def __init__(self, backend: SandboxBackend, sandbox_id: str) -> None:
        self._backend = backend
        self.sandbox_id = sandbox_id

    @classmethod
    def acquire(
        cls,
        steps: StepRunner,
        backend: SandboxBackend,
        *,
        template: str,
        timeout_seconds: int,
    ) -> EnvironmentHandle:
        def _create() -> str:
            try:
                return backend.create(template, timeout_seconds=timeout_seconds)
            except Exception as exc:
                raise SandboxError(f"failed to create sandbox from template '{template}': {exc!s}") from exc

        sandbox_id = steps.run(ACQUIRE_STEP, _create)
        logger.info("sandbox.acquired id={} template={}", sandbox_id, template)
        return cls(backend, sandbox_id)

    def connect(self) -> SandboxSession:
        return self._backend.connect(self.sandbox_id)

    def run(self, command: str) -> CommandOutput:
        stdout: list[str] = []
        stderr: list[str] = []
        try:
            session = self.connect()
            output = session.run_command(command, on_stdout=stdout.append, on_stderr=stderr.append)
        except Exception as exc:
            logger.warning("sandbox.command.error id={} command={!r} error={!s}", self.sandbox_id, command, exc)
            return CommandOutput(stdout="".join(stdout), stderr="".join(stderr), error=str(exc))
        return CommandOutput(stdout=output, stderr="".join(stderr))

    def write_file(self, path: str, content: str) -> None:
        self.connect().write_file(path, content)

    def read_file(self, path: str) -> str:
        return self.connect().read_file(path)

    def resolve_address(self, port: int) -> str:
        host = self.connect().get_host(port)
        return f"https://{host}"

"""Runtime logging helpers.

Every record carries the id of the workflow run that produced it. The id lives
in a context variable so concurrent runs in one process keep their own value.
"""

from __future__ import annotations

import os
import sys
from contextvars import ContextVar, Token
from logging import Handler
from typing import Literal, TextIO

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "cli"]

_FORMATS: dict[LogProfile, str] = {
    "cli": "{level} | {extra[run]} | {message}",
    "default": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {extra[run]} | {message}",
}
_active_profile: LogProfile | None = None
_run_context: ContextVar[str] = ContextVar("run")


def current_run() -> str:
    """Get the id of the workflow run executing in this context."""
    return _run_context.get("-")


def bind_run(run_id: str) -> Token[str]:
    """Bind a run id to the current context; returns a token for `unbind_run`."""
    return _run_context.set(run_id)


def unbind_run(token: Token[str]) -> None:
    _run_context.reset(token)


def _sink(profile: LogProfile) -> Handler | TextIO:
    if profile == "cli":
        return RichHandler(console=get_console(), show_time=False, show_path=False, markup=False)
    return sys.stderr


def _tag_run(record: loguru.Record) -> None:
    record["extra"]["run"] = current_run()


def configure_logging(*, profile: LogProfile = "default", level: str | None = None) -> None:
    """Route loguru output for this process. Calling again with the active profile does nothing."""
    global _active_profile
    if _active_profile == profile:
        return

    logger.remove()
    logger.configure(patcher=_tag_run)
    logger.add(
        _sink(profile),
        level=(level or os.getenv("VIBEFORGE_LOG_LEVEL", "INFO")).upper(),
        format=_FORMATS[profile],
        backtrace=False,
        diagnose=False,
    )
    _active_profile = profile

"""Vibeforge command line interface."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from vibeforge.checkpoint import CheckpointStore
from vibeforge.config import Settings, load_settings
from vibeforge.logging_utils import configure_logging
from vibeforge.sandbox import E2BSandboxBackend
from vibeforge.store import SQLiteProjectStore
from vibeforge.workflow import CodeAgentEvent, CodeAgentWorkflow, WorkflowOutput

app = typer.Typer(
    name="vibeforge",
    help="Run the sandboxed coding agent against a project.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _settings(model: Optional[str] = None) -> Settings:
    settings = load_settings(model=model)
    configure_logging(profile="cli", level=settings.log_level)
    return settings


def _render_output(output: WorkflowOutput) -> None:
    if output.outcome == "error":
        console.print(f"[red]Run failed[/red] ({output.url})")
        return
    console.print(f"[bold]{output.title}[/bold]  {output.url}")
    table = Table("path", "bytes")
    for path, content in sorted(output.files.items()):
        table.add_row(path, str(len(content.encode("utf-8"))))
    console.print(table)
    console.print(output.summary)


@app.command()
def run(
    prompt: str = typer.Argument(..., help="What the agent should build"),
    project_id: str = typer.Option(..., "--project-id", "-p", help="Project the run belongs to"),
    run_id: Optional[str] = typer.Option(None, "--run-id", help="Replay or resume an existing run"),
    model: Optional[str] = typer.Option(None, "--model", help="Override the coding model (provider:model)"),
) -> None:
    """Record the prompt and execute one workflow run."""
    settings = _settings(model)
    store = SQLiteProjectStore(str(settings.database_path))
    workflow = CodeAgentWorkflow(
        settings=settings,
        store=store,
        checkpoints=CheckpointStore(settings.runs_dir),
        sandbox=E2BSandboxBackend(settings.sandbox_api_key),
    )
    if run_id is None:
        store.add_user_message(project_id, prompt)
        event = CodeAgentEvent(prompt=prompt, project_id=project_id)
    else:
        event = CodeAgentEvent(prompt=prompt, project_id=project_id, run_id=run_id)
    console.print(f"run id: {event.run_id}")
    _render_output(workflow.run(event))


@app.command()
def history(
    project_id: str = typer.Option(..., "--project-id", "-p", help="Project to show"),
    limit: int = typer.Option(10, "--limit", min=1),
) -> None:
    """Show the latest messages of a project."""
    settings = _settings()
    store = SQLiteProjectStore(str(settings.database_path))
    table = Table("role", "type", "content", "fragment")
    for record in reversed(store.recent_messages(project_id, limit=limit)):
        fragment = f"{record.fragment.title} ({record.fragment.sandbox_url})" if record.fragment else "-"
        table.add_row(record.role, record.type, record.content, fragment)
    console.print(table)


@app.command()
def runs() -> None:
    """List runs with a checkpoint log."""
    settings = _settings()
    checkpoints = CheckpointStore(settings.runs_dir)
    for run_id in checkpoints.list_runs():
        console.print(f"{run_id} steps={len(checkpoints.read(run_id))}")

"""CLI interface for Taskboard using Typer.

Usage:
    taskboard project create -n "Portal" --start 2024-01-01 --end 2024-03-31
    taskboard task move task-1 COMPLETED
    taskboard project timeline proj-1 --type team
    taskboard notify check

The CLI is structured as:
- app: Main Typer application
- commands/: Individual command groups (project, task, notify, user)
- common.py: Shared utilities for CLI commands
- main.py: Entry point that runs the app
"""

import logging
from typing import Optional

import typer

from taskboard import __version__
from taskboard.config import get_config
from taskboard.interfaces.cli.commands import notify, project, task, user

app = typer.Typer(
    name="taskboard",
    help="Project and task lifecycle tracking",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"taskboard version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Taskboard - projects, tasks, timelines and deadline notifications."""
    level = "DEBUG" if verbose else get_config().log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# =============================================================================
# Register Command Groups
# =============================================================================

app.add_typer(project.app, name="project")
app.add_typer(task.app, name="task")
app.add_typer(notify.app, name="notify")
app.add_typer(user.app, name="user")


__all__ = ["app"]

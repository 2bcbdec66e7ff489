"""Shared utilities for Taskboard CLI commands.

This module provides common utilities used across CLI commands:
- Tracker construction from configuration
- Acting-user resolution
- Formatted output helpers (error, success, info)
- Result unwrapping with a clean exit on failure
"""

import os
from typing import Annotated, Any, Optional, TypeVar

import typer

from taskboard.application import Tracker
from taskboard.config import get_config
from taskboard.domain.project import Project
from taskboard.domain.shared import Err, Result
from taskboard.domain.task import Task
from taskboard.domain.user import Role, Session
from taskboard.infrastructure.storage import JsonFileStore

T = TypeVar("T")

# Reusable acting-user options for CLI commands
# Usage: def my_command(user: UserOption = None, role: RoleOption = None) -> None:
UserOption = Annotated[Optional[str], typer.Option(
    "--user", "-u",
    help="Acting user ID (or set TASKBOARD_USER env var)",
    envvar="TASKBOARD_USER",
)]

RoleOption = Annotated[Optional[Role], typer.Option(
    "--role",
    help="Override the acting user's role",
    case_sensitive=False,
)]


def get_tracker() -> Tracker:
    """Build a tracker over the configured data directory."""
    return Tracker(JsonFileStore(get_config().data_path))


def get_session(tracker: Tracker, user: str | None, role: Role | None = None) -> Session:
    """Resolve the acting user.

    Resolution order:
    1. Explicit --user option (or TASKBOARD_USER)
    2. ``default_user`` from the config file

    Raises:
        typer.Exit: If no user can be determined.
    """
    user_id = user or os.environ.get("TASKBOARD_USER") or get_config().default_user
    if not user_id:
        print_error("No acting user specified.")
        typer.echo("Use --user USER_ID or set TASKBOARD_USER.")
        raise typer.Exit(1)
    return tracker.session_for(user_id, role)


def unwrap(result: Result[T, Any]) -> T:
    """Return the Ok value or print the error and exit with status 1."""
    if isinstance(result, Err):
        print_error(str(result.error))
        raise typer.Exit(1)
    return result.value


def print_error(msg: str) -> None:
    """Print a formatted error message."""
    typer.echo(typer.style(f"Error: {msg}", fg=typer.colors.RED), err=True)


def print_success(msg: str) -> None:
    """Print a formatted success message."""
    typer.echo(typer.style(msg, fg=typer.colors.GREEN))


def print_info(msg: str) -> None:
    """Print a formatted info message."""
    typer.echo(typer.style(msg, fg=typer.colors.BLUE))


def print_separator(char: str = "=", width: int = 60) -> None:
    typer.echo(char * width)


def print_header(title: str, width: int = 60) -> None:
    """Print a formatted header with separators."""
    print_separator("=", width)
    typer.echo(title)
    print_separator("=", width)


def format_project_line(project: Project) -> str:
    lock = " [read-only]" if project.is_read_only else ""
    return f"  [{project.id}] {project.name} ({project.status.value}){lock}"


def format_task_line(task: Task) -> str:
    deadline = f" due {task.deadline.date().isoformat()}" if task.deadline else ""
    assignee = task.assignee_id or "unassigned"
    return f"  [{task.id}] {task.title} ({task.status.value}, {task.priority.value}) -> {assignee}{deadline}"


__all__ = [
    "format_project_line",
    "format_task_line",
    "get_session",
    "get_tracker",
    "print_error",
    "print_header",
    "print_info",
    "print_separator",
    "print_success",
    "RoleOption",
    "unwrap",
    "UserOption",
]

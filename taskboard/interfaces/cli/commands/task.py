"""Task management CLI commands."""

from typing import Optional

import typer

from taskboard.domain.task import TaskPriority, TaskStatus
from taskboard.interfaces.cli.common import (
    RoleOption,
    UserOption,
    format_task_line,
    get_session,
    get_tracker,
    print_info,
    print_success,
    unwrap,
)

app = typer.Typer(help="Task management commands")


@app.command("create")
def create(
    project_id: str = typer.Argument(..., help="Project ID"),
    title: str = typer.Argument(..., help="Task title"),
    description: str = typer.Option("", "--description", "-d"),
    assignee: Optional[str] = typer.Option(None, "--assignee", "-a", help="Defaults to the acting user"),
    priority: TaskPriority = typer.Option(TaskPriority.MEDIUM, "--priority", "-p", case_sensitive=False),
    deadline: Optional[str] = typer.Option(None, "--deadline", help="ISO 8601 date"),
    tags: Optional[list[str]] = typer.Option(None, "--tag", help="Tag (repeatable)"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Create a task in an editable project."""
    payload: dict = {
        "project_id": project_id,
        "title": title,
        "description": description,
        "priority": priority,
        "tags": tags or [],
    }
    if assignee:
        payload["assignee_id"] = assignee
    if deadline:
        payload["deadline"] = deadline

    tracker = get_tracker()
    session = get_session(tracker, user, role)
    task = unwrap(tracker.create_task(payload, session))
    print_success(f"Created task: {task.id}")


@app.command("list")
def list_tasks(
    project_id: Optional[str] = typer.Option(None, "--project", help="Only tasks of this project"),
    assignee: Optional[str] = typer.Option(None, "--assignee", "-a"),
    status: Optional[TaskStatus] = typer.Option(None, "--status", "-s", case_sensitive=False),
) -> None:
    """List tasks."""
    tasks = get_tracker().tasks.list_all(project_id=project_id, assignee_id=assignee, status=status)
    if not tasks:
        typer.echo("No tasks found.")
        return
    for task in tasks:
        typer.echo(format_task_line(task))


@app.command("update")
def update(
    task_id: str = typer.Argument(..., help="Task ID"),
    title: Optional[str] = typer.Option(None, "--title"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    assignee: Optional[str] = typer.Option(None, "--assignee", "-a"),
    priority: Optional[TaskPriority] = typer.Option(None, "--priority", "-p", case_sensitive=False),
    deadline: Optional[str] = typer.Option(None, "--deadline"),
    clear_deadline: bool = typer.Option(False, "--clear-deadline", help="Remove the deadline"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Edit task fields."""
    fields = {
        "title": title,
        "description": description,
        "assignee_id": assignee,
        "priority": priority,
        "deadline": deadline,
    }
    patch = {key: value for key, value in fields.items() if value is not None}
    if clear_deadline:
        patch["deadline"] = None
    if not patch:
        print_info("Nothing to update.")
        return

    tracker = get_tracker()
    session = get_session(tracker, user, role)
    task = unwrap(tracker.update_task(task_id, patch, session))
    print_success(f"Updated task: {task.id}")


@app.command("move")
def move(
    task_id: str = typer.Argument(..., help="Task ID"),
    status: TaskStatus = typer.Argument(..., help="TODO, IN_PROGRESS or COMPLETED", case_sensitive=False),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Move a task to another board column."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    task = unwrap(tracker.move_task_status(task_id, status, session))
    print_success(f"{task.id} -> {task.status.value}")


@app.command("delete")
def delete(
    task_id: str = typer.Argument(..., help="Task ID"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Delete a task. Only admins and the task creator may do this."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    unwrap(tracker.delete_task(task_id, session))
    print_success(f"Deleted: {task_id}")

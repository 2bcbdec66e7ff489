"""Project management CLI commands.

Commands for the project lifecycle: creation, edits, status transitions,
team membership, milestones, deletion and the timeline view.
"""

from typing import Optional

import typer

from taskboard.domain.project import ProjectStatus
from taskboard.domain.timeline import (
    EVENT_FILTERS,
    STATUS_LABELS,
    event_label,
    format_duration,
    format_timestamp,
)
from taskboard.interfaces.cli.common import (
    RoleOption,
    UserOption,
    format_project_line,
    get_session,
    get_tracker,
    print_error,
    print_header,
    print_info,
    print_success,
    unwrap,
)

app = typer.Typer(help="Project management commands")


# =============================================================================
# Commands
# =============================================================================


@app.command("create")
def create(
    name: str = typer.Option(..., "--name", "-n", help="Project name"),
    start: str = typer.Option(..., "--start", help="Start date (ISO 8601)"),
    end: str = typer.Option(..., "--end", help="End date (ISO 8601)"),
    description: str = typer.Option("", "--description", "-d", help="Project description"),
    members: Optional[list[str]] = typer.Option(None, "--member", "-m", help="Team member ID (repeatable)"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Create a new ACTIVE project.

    Example:
        taskboard project create -n "Client Portal" --start 2024-01-01 --end 2024-03-31 -m user-2
    """
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    project = unwrap(
        tracker.create_project(
            {
                "name": name,
                "description": description,
                "start_date": start,
                "end_date": end,
                "assigned_user_ids": members or [],
            },
            session,
        )
    )
    print_success(f"Created project: {project.id}")


@app.command("list")
def list_projects(
    status: Optional[ProjectStatus] = typer.Option(None, "--status", "-s", help="Only this status"),
) -> None:
    """List projects."""
    projects = get_tracker().projects.list_all(status)
    if not projects:
        typer.echo("No projects found.")
        return
    typer.echo("Projects:")
    typer.echo("-" * 60)
    for project in projects:
        typer.echo(format_project_line(project))


@app.command("show")
def show(project_id: str = typer.Argument(..., help="Project ID")) -> None:
    """Show one project with its team and dates."""
    tracker = get_tracker()
    project = unwrap(tracker.projects.get(project_id))
    tasks = tracker.tasks.list_all(project_id=project_id)

    print_header(project.name)
    typer.echo(f"ID:       {project.id}")
    typer.echo(f"Status:   {STATUS_LABELS[project.status]}{' (read-only)' if project.is_read_only else ''}")
    typer.echo(f"Dates:    {project.start_date.date()} -> {project.end_date.date()}")
    typer.echo(f"Team:     {', '.join(project.assigned_user_ids) or '-'}")
    typer.echo(f"Tasks:    {len(tasks)}")
    if project.description:
        typer.echo(f"\n{project.description}")


@app.command("update")
def update(
    project_id: str = typer.Argument(..., help="Project ID"),
    name: Optional[str] = typer.Option(None, "--name", "-n"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
    status: Optional[ProjectStatus] = typer.Option(None, "--status", "-s"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Edit project fields.

    On a read-only project only --status takes effect.
    """
    fields = {
        "name": name,
        "description": description,
        "start_date": start,
        "end_date": end,
        "status": status,
    }
    patch = {key: value for key, value in fields.items() if value is not None}
    if not patch:
        print_info("Nothing to update.")
        return

    tracker = get_tracker()
    session = get_session(tracker, user, role)
    project = unwrap(tracker.update_project(project_id, patch, session))
    print_success(f"Updated project: {project.id} ({project.status.value})")


@app.command("status")
def set_status(
    project_id: str = typer.Argument(..., help="Project ID"),
    status: ProjectStatus = typer.Argument(..., help="ACTIVE, ON_HOLD or COMPLETED"),
    note: Optional[str] = typer.Option(None, "--note", help="Reason for the change"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Change a project's status and record it in the history."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    project = unwrap(tracker.set_project_status(project_id, status, session, note))
    print_success(f"{project.id} is now {STATUS_LABELS[project.status]}")


@app.command("members")
def members(
    project_id: str = typer.Argument(..., help="Project ID"),
    user_ids: list[str] = typer.Argument(..., help="Complete desired team"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Replace the project team; additions and removals are logged."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    project = unwrap(tracker.assign_members(project_id, user_ids, session))
    print_success(f"Team of {project.id}: {', '.join(project.assigned_user_ids)}")


@app.command("milestone")
def milestone(
    project_id: str = typer.Argument(..., help="Project ID"),
    title: str = typer.Argument(..., help="Milestone title"),
    note: Optional[str] = typer.Option(None, "--note"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Add a milestone to the project timeline."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    unwrap(tracker.add_milestone(project_id, title, session, note))
    print_success(f"Milestone added: {title.strip()}")


@app.command("request-completion")
def request_completion(
    project_id: str = typer.Argument(..., help="Project ID"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Ask the admins to mark a project completed."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    sent = unwrap(tracker.request_completion(project_id, session))
    print_success(f"Notified {len(sent)} admin(s)")


@app.command("delete")
def delete(
    project_id: str = typer.Argument(..., help="Project ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a project and all of its tasks."""
    if not yes:
        typer.confirm(f"Delete {project_id} and all of its tasks?", abort=True)
    unwrap(get_tracker().delete_project(project_id))
    print_success(f"Deleted: {project_id}")


@app.command("timeline")
def timeline(
    project_id: str = typer.Argument(..., help="Project ID"),
    event_type: Optional[str] = typer.Option(
        None,
        "--type",
        "-t",
        help="status_change, date_change, team, milestone or task_milestone",
    ),
    since: Optional[int] = typer.Option(None, "--since", help="Only the last N days"),
    export: bool = typer.Option(False, "--export", help="Plain-text export"),
) -> None:
    """Show the project timeline, oldest first."""
    known = [value for value, _label in EVENT_FILTERS if value]
    if event_type and event_type not in known:
        print_error(f"Unknown event type: {event_type}")
        typer.echo(f"Choose one of: {', '.join(known)}")
        raise typer.Exit(1)

    tracker = get_tracker()
    if export:
        typer.echo(unwrap(tracker.export_timeline(project_id, event_type, since)))
        return

    entries = unwrap(tracker.timeline(project_id, event_type, since))
    if not entries:
        typer.echo("No events.")
        return

    users = tracker.users_by_id()
    tasks = tracker.tasks_by_id(project_id)
    for entry in entries:
        event = entry.event
        gap = format_duration(entry.days_since_previous)
        if gap:
            typer.echo(f"    | {gap} later")
        who = ""
        if event.user_id:
            who = f" by {users[event.user_id].name if event.user_id in users else 'Someone'}"
        typer.echo(f"{format_timestamp(event.at)}  {event_label(event, tasks)}{who}")
        if event.note:
            typer.echo(f"    {event.note}")

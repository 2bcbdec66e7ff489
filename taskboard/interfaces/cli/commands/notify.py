"""Notification CLI commands: deadline scan and inbox."""

from typing import Optional

import typer

from taskboard.interfaces.cli.common import (
    RoleOption,
    UserOption,
    get_session,
    get_tracker,
    print_success,
    unwrap,
)

app = typer.Typer(help="Notification commands")


@app.command("check")
def check(
    now: Optional[str] = typer.Option(None, "--now", help="Reference time (ISO 8601), defaults to now"),
) -> None:
    """Run the deadline scan and notify assignees of due or overdue tasks.

    Safe to run repeatedly: a task is reported at most once per day.
    """
    created = unwrap(get_tracker().run_deadline_check(now))
    print_success(f"Created {len(created)} deadline notification(s)")
    for notification in created:
        typer.echo(f"  -> {notification.user_id}: {notification.message}")


@app.command("list")
def list_notifications(
    unread: bool = typer.Option(False, "--unread", help="Only unread notifications"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Show the acting user's inbox, newest first."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    notifications = tracker.inbox(session, unread_only=unread)
    if not notifications:
        typer.echo("No notifications.")
        return
    for notification in notifications:
        marker = " " if notification.read else "*"
        stamp = notification.created_at.strftime("%Y-%m-%d %H:%M")
        typer.echo(f"{marker} [{notification.id}] {stamp} {notification.message}")


@app.command("read")
def read(
    notification_id: str = typer.Argument(..., help="Notification ID"),
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Mark one notification as read."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    unwrap(tracker.mark_notification_read(notification_id, session))
    print_success(f"Marked read: {notification_id}")


@app.command("read-all")
def read_all(
    user: UserOption = None,
    role: RoleOption = None,
) -> None:
    """Mark every notification of the acting user as read."""
    tracker = get_tracker()
    session = get_session(tracker, user, role)
    count = unwrap(tracker.mark_all_read(session))
    print_success(f"Marked {count} notification(s) read")

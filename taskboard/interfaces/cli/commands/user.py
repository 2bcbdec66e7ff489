"""User directory CLI commands."""

from typing import Optional

import typer

from taskboard.domain.user import Role, User
from taskboard.interfaces.cli.common import get_tracker, print_success, unwrap

app = typer.Typer(help="User directory commands")


@app.command("add")
def add(
    user_id: str = typer.Argument(..., help="User ID"),
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    email: str = typer.Option("", "--email"),
    role: Role = typer.Option(Role.EMPLOYEE, "--role", case_sensitive=False),
    department: Optional[str] = typer.Option(None, "--department"),
    inactive: bool = typer.Option(False, "--inactive", help="Store the user as inactive"),
) -> None:
    """Add or replace a user record."""
    user = User(
        id=user_id,
        name=name,
        email=email,
        role=role,
        department=department,
        is_active=not inactive,
    )
    unwrap(get_tracker().save_user(user))
    print_success(f"Saved user: {user.id} ({user.role.value})")


@app.command("list")
def list_users() -> None:
    """List known users."""
    users = get_tracker().list_users()
    if not users:
        typer.echo("No users found.")
        return
    for user in users:
        state = "" if user.is_active else " [inactive]"
        typer.echo(f"  [{user.id}] {user.name} ({user.role.value}){state}")

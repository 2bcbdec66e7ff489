"""CLI command groups for Taskboard.

Command groups:
- project: Project lifecycle, team, milestones and timeline
- task: Task board operations
- notify: Deadline scan and inbox
- user: User directory

Each command group is a Typer app registered with the main app using
app.add_typer().
"""

from taskboard.interfaces.cli.commands import notify, project, task, user

__all__ = ["project", "task", "notify", "user"]

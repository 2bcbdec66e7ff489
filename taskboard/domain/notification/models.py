"""Notification domain models and deadline rules.

Notifications are a side channel: creating one never mutates a task or
project.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from taskboard.domain.shared.clock import UtcDateTime, day_key, days_between
from taskboard.domain.task.models import Task, TaskStatus


class NotificationType(str, Enum):
    ASSIGNED = "ASSIGNED"
    DEADLINE = "DEADLINE"
    PROJECT_COMPLETION_REQUEST = "PROJECT_COMPLETION_REQUEST"


class Notification(BaseModel):
    """A message in one user's inbox."""

    id: str
    user_id: str
    type: NotificationType
    message: str
    project_id: str | None = None
    task_id: str | None = None
    read: bool = False
    created_at: UtcDateTime
    dedup_key: str | None = None


def deadline_dedup_key(task_id: str, now: datetime) -> str:
    """One deadline notification per task per UTC day."""
    return f"deadline:{task_id}:{day_key(now)}"


def days_until_deadline(task: Task, now: datetime) -> int | None:
    """Calendar days until the task's deadline; negative when overdue."""
    if task.deadline is None:
        return None
    return days_between(now, task.deadline)


def needs_deadline_notice(task: Task, now: datetime) -> bool:
    """True for an open, assigned task that is due today or overdue."""
    if task.status is TaskStatus.COMPLETED or not task.assignee_id:
        return False
    remaining = days_until_deadline(task, now)
    return remaining is not None and remaining <= 0


def deadline_message(task: Task, now: datetime) -> str:
    remaining = days_until_deadline(task, now) or 0
    if remaining == 0:
        return f'Task "{task.title}" is due today.'
    overdue = -remaining
    suffix = "day" if overdue == 1 else "days"
    return f'Task "{task.title}" is overdue by {overdue} {suffix}.'

"""Application service layer for Taskboard.

Services orchestrate domain operations against an entity store. Each public
operation is one atomic read-modify-write and returns a Result.

Services:
    project_service - Project lifecycle (create, update, status, team, log, delete)
    task_service - Task lifecycle (create, update, move, delete)
    notification_service - Deadline scan and inboxes
    tracker - Facade composing the services

Example usage:
    >>> from taskboard.application import Tracker
    >>> from taskboard.infrastructure.storage import MemoryStore
    >>>
    >>> tracker = Tracker(MemoryStore())
    >>> result = tracker.create_project(payload, tracker.session_for("user-admin"))
"""

from taskboard.application.notification_service import NotificationService
from taskboard.application.project_service import ProjectService, seed_history, transition
from taskboard.application.task_service import TaskService, can_delete, can_edit
from taskboard.application.tracker import Tracker

__all__ = [
    # Project service
    "ProjectService",
    "seed_history",
    "transition",
    # Task service
    "TaskService",
    "can_edit",
    "can_delete",
    # Notification service
    "NotificationService",
    # Facade
    "Tracker",
]

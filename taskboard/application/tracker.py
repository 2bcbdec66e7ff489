"""Tracker facade.

Composes the lifecycle services over one store and one clock and performs
the cross-aggregate orchestration the individual services stay out of:
logging a ``task_milestone`` on the project when a task is completed, and
notifying assignees when work is handed to them.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from taskboard.application.notification_service import NotificationService
from taskboard.application.project_service import ProjectService
from taskboard.application.task_service import TaskResult, TaskService
from taskboard.domain.notification import Notification, NotificationType
from taskboard.domain.project import ActivityType, NewActivity, Project, ProjectStatus
from taskboard.domain.shared import (
    Clock,
    Err,
    NotFoundError,
    Ok,
    Result,
    StorageError,
    is_err,
    map_result,
    utc_now,
)
from taskboard.domain.task import Task, TaskStatus
from taskboard.domain.timeline import (
    AnnotatedEvent,
    annotate_durations,
    build_timeline,
    export_document,
    filter_timeline,
)
from taskboard.domain.user import Role, Session, User
from taskboard.infrastructure.storage import EntityStore, UserRepository

logger = logging.getLogger(__name__)

TASK_COMPLETED_MESSAGE = "Task completed"


class Tracker:
    """Single entry point used by the CLI and the HTTP API.

    Example:
        tracker = Tracker(JsonFileStore(config.data_path))
        admin = tracker.session_for("user-admin")
        result = tracker.move_task_status("task-1", TaskStatus.COMPLETED, admin)
    """

    def __init__(self, store: EntityStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock
        self.projects = ProjectService(store, clock)
        self.tasks = TaskService(store, clock)
        self.notifications = NotificationService(store, clock)
        self._users = UserRepository(store)

    # ------------------------------------------------------------------
    # Users and sessions
    # ------------------------------------------------------------------

    def list_users(self) -> list[User]:
        return self._users.list_all()

    def save_user(self, user: User) -> Result[User, StorageError]:
        """Insert or replace a user record."""
        with self.store.lock:
            users = self._users.list_all()
            if any(u.id == user.id for u in users):
                write = self._users.replace(users, user)
            else:
                write = self._users.append(users, user)
        if isinstance(write, Err):
            return Err(StorageError(write.error))
        return Ok(user)

    def session_for(self, user_id: str, role: Role | str | None = None) -> Session:
        """Build a session, taking the role from the stored user when not given."""
        if role is not None:
            return Session(user_id=user_id, role=Role(role))
        user = self._users.get(user_id)
        return Session(user_id=user_id, role=user.role if user else Role.EMPLOYEE)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def create_project(self, payload: Mapping[str, Any], session: Session) -> Result[Project, Any]:
        return self.projects.create(payload, session.user_id)

    def update_project(self, project_id: str, patch: Mapping[str, Any], session: Session) -> Result[Project, Any]:
        return self.projects.update(project_id, patch, session.user_id)

    def set_project_status(
        self,
        project_id: str,
        status: ProjectStatus | str,
        session: Session,
        note: str | None = None,
    ) -> Result[Project, Any]:
        return self.projects.set_status(project_id, status, session.user_id, note)

    def assign_members(self, project_id: str, user_ids: Iterable[str], session: Session) -> Result[Project, Any]:
        return self.projects.assign_members(project_id, user_ids, session.user_id)

    def add_milestone(
        self,
        project_id: str,
        title: str,
        session: Session,
        note: str | None = None,
    ) -> Result[Project, Any]:
        return self.projects.add_milestone(project_id, title, session.user_id, note)

    def record_activity(self, project_id: str, event: Mapping[str, Any], session: Session) -> Result[Project, Any]:
        return self.projects.record_activity(project_id, event, session.user_id)

    def delete_project(self, project_id: str) -> Result[None, Any]:
        return self.projects.remove(project_id)

    def request_completion(self, project_id: str, session: Session) -> Result[list[Notification], Any]:
        """Ask the admins to complete a project on behalf of an employee."""
        return self.notifications.notify_admins_completion_request(project_id, session.user_id)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(self, payload: Mapping[str, Any], session: Session) -> TaskResult:
        with self.store.lock:
            result = self.tasks.create(payload, session)
            if isinstance(result, Ok):
                self._notify_assignment(result.value, session)
        return result

    def update_task(self, task_id: str, patch: Mapping[str, Any], session: Session) -> TaskResult:
        with self.store.lock:
            before = self.tasks.get(task_id)
            result = self.tasks.update(task_id, patch, session)
            if isinstance(result, Ok) and isinstance(before, Ok):
                task = result.value
                if task.assignee_id != before.value.assignee_id:
                    self._notify_assignment(task, session)
                self._log_completion(before.value.status, task, session)
        return result

    def move_task_status(self, task_id: str, new_status: TaskStatus | str, session: Session) -> TaskResult:
        """Move a task and record a ``task_milestone`` when it becomes COMPLETED."""
        with self.store.lock:
            before = self.tasks.get(task_id)
            result = self.tasks.move_status(task_id, new_status, session)
            if isinstance(result, Ok) and isinstance(before, Ok):
                self._log_completion(before.value.status, result.value, session)
        return result

    def delete_task(self, task_id: str, session: Session) -> Result[None, Any]:
        return self.tasks.remove(task_id, session)

    # ------------------------------------------------------------------
    # Timeline
    # ------------------------------------------------------------------

    def timeline(
        self,
        project_id: str,
        event_type: str | None = None,
        since_days: int | None = None,
    ) -> Result[list[AnnotatedEvent], NotFoundError]:
        """Filtered, duration-annotated feed for one project."""
        now = self.clock()
        return map_result(
            self.projects.get(project_id),
            lambda project: annotate_durations(
                filter_timeline(build_timeline(project, now), event_type, since_days, now)
            ),
        )

    def export_timeline(
        self,
        project_id: str,
        event_type: str | None = None,
        since_days: int | None = None,
    ) -> Result[str, NotFoundError]:
        now = self.clock()

        def render(project: Project) -> str:
            events = filter_timeline(build_timeline(project, now), event_type, since_days, now)
            return export_document(project, events, self.users_by_id(), self.tasks_by_id(project_id))

        return map_result(self.projects.get(project_id), render)

    def users_by_id(self) -> dict[str, User]:
        return {u.id: u for u in self._users.list_all()}

    def tasks_by_id(self, project_id: str | None = None) -> dict[str, Task]:
        return {t.id: t for t in self.tasks.list_all(project_id=project_id)}

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def run_deadline_check(self, now: datetime | str | None = None) -> Result[list[Notification], Any]:
        return self.notifications.run_deadline_check(now)

    def inbox(self, session: Session, unread_only: bool = False) -> list[Notification]:
        return self.notifications.list_for_user(session.user_id, unread_only)

    def mark_notification_read(self, notification_id: str, session: Session) -> Result[Notification, Any]:
        return self.notifications.mark_read(notification_id, session.user_id)

    def mark_all_read(self, session: Session) -> Result[int, Any]:
        return self.notifications.mark_all_read(session.user_id)

    # ------------------------------------------------------------------
    # Orchestration helpers
    # ------------------------------------------------------------------

    def _log_completion(self, previous: TaskStatus, task: Task, session: Session) -> None:
        if task.status is not TaskStatus.COMPLETED or previous is TaskStatus.COMPLETED:
            return
        event = NewActivity(
            type=ActivityType.TASK_MILESTONE,
            payload={"task_id": task.id, "message": TASK_COMPLETED_MESSAGE},
        )
        result = self.projects.record_activity(task.project_id, event, session.user_id)
        if is_err(result):
            logger.warning(f"Could not log completion of {task.id}: {result.error}")

    def _notify_assignment(self, task: Task, session: Session) -> None:
        if not task.assignee_id or task.assignee_id == session.user_id:
            return
        result = self.notifications.create_for_user(
            task.assignee_id,
            NotificationType.ASSIGNED,
            f'You were assigned "{task.title}".',
            project_id=task.project_id,
            task_id=task.id,
        )
        if is_err(result):
            logger.warning(f"Could not notify {task.assignee_id}: {result.error}")

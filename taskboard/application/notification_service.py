"""Notification application service.

Runs the deadline scan and manages user inboxes. Notifications are an
append-only side channel: nothing here mutates a task or a project.
"""

import logging
from datetime import datetime

from taskboard.application.common import saved
from taskboard.domain.notification import (
    Notification,
    NotificationType,
    deadline_dedup_key,
    deadline_message,
    needs_deadline_notice,
)
from taskboard.domain.shared import (
    AuthorizationError,
    Clock,
    Err,
    NotFoundError,
    Ok,
    Result,
    StorageError,
    ValidationError,
    as_utc,
    new_id,
    utc_now,
)
from taskboard.infrastructure.storage import (
    EntityStore,
    NotificationRepository,
    ProjectRepository,
    TaskRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """Deadline scanner and inbox operations."""

    def __init__(self, store: EntityStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock
        self._notifications = NotificationRepository(store)
        self._tasks = TaskRepository(store)
        self._projects = ProjectRepository(store)
        self._users = UserRepository(store)

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """Newest first."""
        return self._notifications.list_for_user(user_id, unread_only)

    def unread_count(self, user_id: str) -> int:
        return len(self._notifications.list_for_user(user_id, unread_only=True))

    def create_for_user(
        self,
        user_id: str,
        notification_type: NotificationType | str,
        message: str,
        project_id: str | None = None,
        task_id: str | None = None,
        dedup_key: str | None = None,
    ) -> Result[Notification, StorageError]:
        """Append one notification to a user's inbox."""
        notification = Notification(
            id=new_id("notif"),
            user_id=user_id,
            type=NotificationType(notification_type),
            message=message,
            project_id=project_id,
            task_id=task_id,
            read=False,
            created_at=self._clock(),
            dedup_key=dedup_key,
        )
        with self._store.lock:
            existing = self._notifications.list_all()
            return saved(self._notifications.append(existing, notification), notification)

    def mark_read(
        self, notification_id: str, user_id: str
    ) -> Result[Notification, NotFoundError | AuthorizationError | StorageError]:
        """Mark one of the user's notifications as read."""
        with self._store.lock:
            existing = self._notifications.list_all()
            notification = next((n for n in existing if n.id == notification_id), None)
            if notification is None:
                return Err(NotFoundError(f"Notification not found: {notification_id}"))
            if notification.user_id != user_id:
                return Err(AuthorizationError("Notification belongs to another user"))
            if notification.read:
                return Ok(notification)
            updated = notification.model_copy(update={"read": True})
            return saved(self._notifications.replace(existing, updated), updated)

    def mark_all_read(self, user_id: str) -> Result[int, StorageError]:
        """Mark every unread notification of a user as read; return how many changed."""
        with self._store.lock:
            existing = self._notifications.list_all()
            changed = 0
            updated: list[Notification] = []
            for notification in existing:
                if notification.user_id == user_id and not notification.read:
                    notification = notification.model_copy(update={"read": True})
                    changed += 1
                updated.append(notification)
            if not changed:
                return Ok(0)
            return saved(self._notifications.save_all(updated), changed)

    def run_deadline_check(
        self, now: datetime | str | None = None
    ) -> Result[list[Notification], ValidationError | StorageError]:
        """Notify assignees of open tasks that are due today or overdue.

        At most one DEADLINE notification is created per task per UTC day;
        the dedup key is ``deadline:{task_id}:{YYYY-MM-DD}``. Completed tasks
        and tasks without a deadline or assignee are skipped.

        Args:
            now: Reference instant (ISO string or datetime); defaults to the clock.

        Returns:
            Ok(list) of notifications created by this run.
        """
        if now is None:
            reference = self._clock()
        elif isinstance(now, str):
            try:
                reference = as_utc(datetime.fromisoformat(now.replace("Z", "+00:00")))
            except ValueError:
                return Err(ValidationError(f"Invalid timestamp: {now}"))
        else:
            reference = as_utc(now)

        with self._store.lock:
            existing = self._notifications.list_all()
            seen = {n.dedup_key for n in existing if n.dedup_key}
            created: list[Notification] = []

            for task in self._tasks.list_all():
                if not needs_deadline_notice(task, reference):
                    continue
                key = deadline_dedup_key(task.id, reference)
                if key in seen:
                    continue
                seen.add(key)
                created.append(
                    Notification(
                        id=new_id("notif"),
                        user_id=task.assignee_id,
                        type=NotificationType.DEADLINE,
                        message=deadline_message(task, reference),
                        project_id=task.project_id,
                        task_id=task.id,
                        created_at=self._clock(),
                        dedup_key=key,
                    )
                )

            if not created:
                logger.debug("Deadline check found nothing new")
                return Ok([])
            result = saved(self._notifications.save_all([*existing, *created]), created)

        if isinstance(result, Ok):
            logger.info(f"Deadline check created {len(created)} notification(s)")
        return result

    def notify_admins_completion_request(
        self,
        project_id: str,
        requested_by_user_id: str,
    ) -> Result[list[Notification], NotFoundError | StorageError]:
        """Ask every active admin to mark a project completed."""
        project = self._projects.get(project_id)
        if project is None:
            return Err(NotFoundError(f"Project not found: {project_id}"))

        requester = self._users.get(requested_by_user_id)
        who = requester.name if requester else "An employee"
        message = f'{who} requested to mark project "{project.name}" as completed.'

        created: list[Notification] = []
        with self._store.lock:
            for admin in self._users.active_admins():
                result = self.create_for_user(
                    admin.id,
                    NotificationType.PROJECT_COMPLETION_REQUEST,
                    message,
                    project_id=project_id,
                )
                if isinstance(result, Err):
                    return result
                created.append(result.value)
        return Ok(created)

"""Task application service.

Owns task creation, updates, board moves and deletion. Whether a task can
be changed is decided from its parent project as it is stored at call time;
nothing about read-only state is cached on the task.
"""

import logging
from collections.abc import Mapping
from typing import Any

from taskboard.application.common import parse_payload, saved
from taskboard.domain.project import Project
from taskboard.domain.shared import (
    AuthorizationError,
    Clock,
    Err,
    NotFoundError,
    Ok,
    ReadOnlyError,
    Result,
    StorageError,
    ValidationError,
    new_id,
    utc_now,
)
from taskboard.domain.task import Task, TaskDraft, TaskPatch, TaskStatus
from taskboard.domain.user import Session
from taskboard.infrastructure.storage import EntityStore, ProjectRepository, TaskRepository

logger = logging.getLogger(__name__)

READ_ONLY_MESSAGE = "Project is read-only"

TaskResult = Result[Task, NotFoundError | ReadOnlyError | AuthorizationError | ValidationError | StorageError]


def can_edit(task: Task, session: Session) -> bool:
    """Admins, the creator and the assignee may edit or move a task."""
    return session.is_admin or session.user_id in (task.created_by_id, task.assignee_id)


def can_delete(task: Task, session: Session) -> bool:
    """Only admins and the creator may delete a task."""
    return session.is_admin or session.user_id == task.created_by_id


class TaskService:
    """Task lifecycle manager."""

    def __init__(self, store: EntityStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock
        self._projects = ProjectRepository(store)
        self._tasks = TaskRepository(store)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, task_id: str) -> Result[Task, NotFoundError]:
        task = self._tasks.get(task_id)
        if task is None:
            return Err(NotFoundError(f"Task not found: {task_id}"))
        return Ok(task)

    def list_all(
        self,
        project_id: str | None = None,
        assignee_id: str | None = None,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        return self._tasks.list_filtered(project_id, assignee_id, status)

    def is_read_only(self, task: Task) -> bool:
        """Derive read-only state from the live parent project.

        A task whose project has vanished is treated as read-only.
        """
        project = self._projects.get(task.project_id)
        return project is None or project.is_read_only

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, payload: TaskDraft | Mapping[str, Any], session: Session) -> TaskResult:
        """Create a task on an active project.

        The assignee defaults to the acting user. ``created_at``,
        ``assigned_at`` and ``updated_at`` all start at now.
        """
        parsed = parse_payload(TaskDraft, payload)
        if isinstance(parsed, Err):
            return parsed
        draft = parsed.value

        with self._store.lock:
            project = self._projects.get(draft.project_id)
            if project is None:
                return Err(NotFoundError(f"Project not found: {draft.project_id}"))
            if project.is_read_only:
                logger.warning(f"Refused task creation on read-only project {project.id}")
                return Err(ReadOnlyError(READ_ONLY_MESSAGE))

            now = self._clock()
            task = Task(
                id=new_id("task"),
                project_id=project.id,
                title=draft.title,
                description=draft.description,
                assignee_id=draft.assignee_id or session.user_id,
                priority=draft.priority,
                status=draft.status,
                tags=draft.tags,
                links=draft.links,
                attachments=draft.attachments,
                created_by_id=session.user_id,
                created_at=now,
                assigned_at=now,
                updated_at=now,
                deadline=draft.deadline,
            )
            tasks = self._tasks.list_all()
            result = saved(self._tasks.append(tasks, task), task)

        if isinstance(result, Ok):
            logger.info(f"Created task {task.id} in project {project.id}")
        return result

    def update(self, task_id: str, patch: TaskPatch | Mapping[str, Any], session: Session) -> TaskResult:
        """Merge a patch into a task and stamp ``updated_at``.

        Reassigning the task re-stamps ``assigned_at``.
        """
        parsed = parse_payload(TaskPatch, patch)
        if isinstance(parsed, Err):
            return parsed
        changes = parsed.value.changes()

        with self._store.lock:
            checked = self._editable(task_id, session, can_edit)
            if isinstance(checked, Err):
                return checked
            tasks, task = checked.value

            now = self._clock()
            if "assignee_id" in changes and changes["assignee_id"] != task.assignee_id:
                changes["assigned_at"] = now
            changes["updated_at"] = now
            updated = Task.model_validate({**task.model_dump(), **changes})
            return saved(self._tasks.replace(tasks, updated), updated)

    def move_status(self, task_id: str, new_status: TaskStatus | str, session: Session) -> TaskResult:
        """Move a task to another board column.

        Any column may follow any other. Logging completion on the project
        is left to the caller.
        """
        try:
            status = TaskStatus(new_status)
        except ValueError:
            return Err(ValidationError(f"Unknown task status: {new_status}"))

        with self._store.lock:
            checked = self._editable(task_id, session, can_edit)
            if isinstance(checked, Err):
                return checked
            tasks, task = checked.value

            updated = task.model_copy(update={"status": status, "updated_at": self._clock()})
            result = saved(self._tasks.replace(tasks, updated), updated)

        if isinstance(result, Ok):
            logger.info(f"Task {task_id}: {task.status.value} -> {status.value}")
        return result

    def remove(
        self, task_id: str, session: Session
    ) -> Result[None, NotFoundError | ReadOnlyError | AuthorizationError | StorageError]:
        """Delete a task. Only admins and the task's creator may do so.

        An admin may also delete a task whose project no longer exists.
        """
        with self._store.lock:
            checked = self._editable(task_id, session, can_delete, allow_orphan=session.is_admin)
            if isinstance(checked, Err):
                return checked
            tasks, _task = checked.value
            result = saved(self._tasks.remove_where(tasks, lambda t: t.id == task_id), None)

        if isinstance(result, Ok):
            logger.info(f"Deleted task {task_id}")
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _editable(
        self, task_id: str, session: Session, allowed, allow_orphan: bool = False
    ) -> Result[tuple[list[Task], Task], NotFoundError | ReadOnlyError | AuthorizationError]:
        """Load a task and check it exists, is writable and the caller may act on it."""
        tasks = self._tasks.list_all()
        task = next((t for t in tasks if t.id == task_id), None)
        if task is None:
            return Err(NotFoundError(f"Task not found: {task_id}"))

        project: Project | None = self._projects.get(task.project_id)
        orphan_ok = project is None and allow_orphan
        if not orphan_ok and (project is None or project.is_read_only):
            logger.warning(f"Refused change to task {task_id}: project is read-only")
            return Err(ReadOnlyError(READ_ONLY_MESSAGE))

        if not allowed(task, session):
            logger.warning(f"User {session.user_id} may not change task {task_id}")
            return Err(AuthorizationError("You do not have permission to change this task"))

        return Ok((tasks, task))

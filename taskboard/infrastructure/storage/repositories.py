"""Repository implementations for domain aggregates.

Each repository maps one store collection to pydantic models. Reads return
the whole collection; writes replace it, matching the store contract.
Invalid rows are skipped with a warning rather than failing the whole read.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from taskboard.domain.notification.models import Notification
from taskboard.domain.project.models import Project, ProjectStatus
from taskboard.domain.shared.result import Result
from taskboard.domain.task.models import Task, TaskStatus
from taskboard.domain.user.models import Role, User
from taskboard.infrastructure.storage.store import CollectionKey, EntityStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class CollectionRepository(Generic[M]):
    """Whole-collection access for one model type."""

    key: CollectionKey
    model: type[M]

    def __init__(self, store: EntityStore) -> None:
        """Initialize the repository.

        Args:
            store: Entity store holding the collection.
        """
        self._store = store

    def list_all(self) -> list[M]:
        items: list[M] = []
        for row in self._store.load(self.key, []):
            try:
                items.append(self.model.model_validate(row))
            except PydanticValidationError as e:
                row_id = row.get("id") if isinstance(row, dict) else row
                logger.warning(f"Skipping invalid {self.key.value} row {row_id!r}: {e}")
        return items

    def get(self, entity_id: str) -> M | None:
        return next((item for item in self.list_all() if item.id == entity_id), None)

    def save_all(self, items: Iterable[M]) -> Result[None, str]:
        rows = [item.model_dump(mode="json") for item in items]
        return self._store.save(self.key, rows)

    def replace(self, items: list[M], updated: M) -> Result[None, str]:
        """Write ``items`` back with the entity sharing ``updated.id`` swapped in."""
        return self.save_all([updated if item.id == updated.id else item for item in items])

    def append(self, items: list[M], created: M) -> Result[None, str]:
        return self.save_all([*items, created])

    def remove_where(self, items: list[M], predicate: Callable[[M], bool]) -> Result[None, str]:
        return self.save_all([item for item in items if not predicate(item)])


class ProjectRepository(CollectionRepository[Project]):
    key = CollectionKey.PROJECTS
    model = Project

    def list_by_status(self, status: ProjectStatus | None = None) -> list[Project]:
        projects = self.list_all()
        if status is None:
            return projects
        return [p for p in projects if p.status is status]


class TaskRepository(CollectionRepository[Task]):
    key = CollectionKey.TASKS
    model = Task

    def list_filtered(
        self,
        project_id: str | None = None,
        assignee_id: str | None = None,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        tasks = self.list_all()
        if project_id is not None:
            tasks = [t for t in tasks if t.project_id == project_id]
        if assignee_id is not None:
            tasks = [t for t in tasks if t.assignee_id == assignee_id]
        if status is not None:
            tasks = [t for t in tasks if t.status is status]
        return tasks


class UserRepository(CollectionRepository[User]):
    key = CollectionKey.USERS
    model = User

    def active_admins(self) -> list[User]:
        return [u for u in self.list_all() if u.role is Role.ADMIN and u.is_active]


class NotificationRepository(CollectionRepository[Notification]):
    key = CollectionKey.NOTIFICATIONS
    model = Notification

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        items = [n for n in self.list_all() if n.user_id == user_id]
        if unread_only:
            items = [n for n in items if not n.read]
        return sorted(items, key=lambda n: n.created_at, reverse=True)

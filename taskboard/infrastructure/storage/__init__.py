"""Storage infrastructure for Taskboard.

Entity stores (file-backed and in-memory) and the repositories that map
their collections to domain models.
"""

from taskboard.infrastructure.storage.json_storage import JsonStorage
from taskboard.infrastructure.storage.repositories import (
    CollectionRepository,
    NotificationRepository,
    ProjectRepository,
    TaskRepository,
    UserRepository,
)
from taskboard.infrastructure.storage.store import (
    CollectionKey,
    EntityStore,
    JsonFileStore,
    MemoryStore,
)

__all__ = [
    "CollectionKey",
    "CollectionRepository",
    "EntityStore",
    "JsonFileStore",
    "JsonStorage",
    "MemoryStore",
    "NotificationRepository",
    "ProjectRepository",
    "TaskRepository",
    "UserRepository",
]

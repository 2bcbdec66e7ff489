"""Infrastructure layer for Taskboard.

Exports:
    Storage:
        - JsonStorage: Low-level JSON file I/O
        - JsonFileStore / MemoryStore: Entity stores
        - ProjectRepository, TaskRepository, UserRepository,
          NotificationRepository: Collection repositories
"""

from taskboard.infrastructure.storage import (
    CollectionKey,
    EntityStore,
    JsonFileStore,
    JsonStorage,
    MemoryStore,
    NotificationRepository,
    ProjectRepository,
    TaskRepository,
    UserRepository,
)

__all__ = [
    "CollectionKey",
    "EntityStore",
    "JsonFileStore",
    "JsonStorage",
    "MemoryStore",
    "NotificationRepository",
    "ProjectRepository",
    "TaskRepository",
    "UserRepository",
]

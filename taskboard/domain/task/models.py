"""Task domain models.

Pure domain models for tasks on a project board. A task never stores its
own read-only flag; that is always derived from the parent project.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from taskboard.domain.shared.clock import UtcDateTime

LEARNING_TAG = "Learning"


class TaskStatus(str, Enum):
    """Board column of a task. Any transition between them is allowed."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


def _unique_tags(tags: list[str]) -> list[str]:
    cleaned = (tag.strip() for tag in tags)
    return list(dict.fromkeys(tag for tag in cleaned if tag))


class Task(BaseModel):
    """A unit of work owned by exactly one project."""

    id: str
    project_id: str
    title: str
    description: str = ""
    assignee_id: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    tags: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)
    created_by_id: str
    created_at: UtcDateTime
    assigned_at: UtcDateTime
    updated_at: UtcDateTime
    deadline: UtcDateTime | None = None

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[str]) -> list[str]:
        return _unique_tags(value)

    @property
    def is_learning(self) -> bool:
        return LEARNING_TAG in self.tags


class TaskDraft(BaseModel):
    """Payload accepted by task creation."""

    project_id: str
    title: str
    description: str = ""
    assignee_id: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    tags: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)
    deadline: UtcDateTime | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value.strip()

    @field_validator("project_id")
    @classmethod
    def _project_required(cls, value: str) -> str:
        if not value:
            raise ValueError("Project is required")
        return value


class TaskPatch(BaseModel):
    """Partial update for a task. ``project_id`` is deliberately absent."""

    title: str | None = None
    description: str | None = None
    assignee_id: str | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    tags: list[str] | None = None
    links: list[str] | None = None
    attachments: list[str] | None = None
    deadline: UtcDateTime | None = None

    model_config = {"extra": "forbid"}

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("Title is required")
        return value.strip() if value is not None else None

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller set.

        ``deadline`` may be explicitly cleared with ``None``.
        """
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None or name == "deadline"
        }

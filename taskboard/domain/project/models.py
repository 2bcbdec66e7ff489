"""Project domain models.

Pure data structures for the project aggregate. No I/O, no side effects.
History sequences are append-only: services build new lists with
``[*old, entry]`` and never edit an entry in place.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from taskboard.domain.shared.clock import UtcDateTime


class ProjectStatus(str, Enum):
    """Lifecycle state of a project."""

    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"

    @property
    def is_read_only(self) -> bool:
        """ON_HOLD and COMPLETED freeze every field except status."""
        return self in READ_ONLY_STATUSES


READ_ONLY_STATUSES = frozenset({ProjectStatus.ON_HOLD, ProjectStatus.COMPLETED})


class ActivityType(str, Enum):
    """Kinds of entries recorded in a project's activity log."""

    DATE_CHANGE = "date_change"
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    MILESTONE = "milestone"
    TASK_MILESTONE = "task_milestone"


class StatusEntry(BaseModel):
    """One transition in a project's status history."""

    status: ProjectStatus
    at: UtcDateTime
    user_id: str | None = None
    note: str | None = None

    model_config = {"frozen": True}


class ActivityEvent(BaseModel):
    """An activity-log entry.

    ``payload`` depends on ``type``:

    - date_change: ``{"field", "old_value", "new_value"}``
    - member_added / member_removed: ``{"user_id"}``
    - milestone: ``{"title"}``
    - task_milestone: ``{"task_id", "message"}``
    """

    id: str
    type: ActivityType
    at: UtcDateTime
    user_id: str | None = None
    note: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class NewActivity(BaseModel):
    """An activity event as submitted by a collaborator, before it is stamped."""

    type: ActivityType
    note: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class Project(BaseModel):
    """A tracked project and its append-only history."""

    id: str
    name: str
    description: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE
    start_date: UtcDateTime
    end_date: UtcDateTime
    assigned_user_ids: list[str] = Field(default_factory=list)
    created_at: UtcDateTime
    status_history: list[StatusEntry] = Field(default_factory=list)
    activity_log: list[ActivityEvent] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)

    @property
    def is_read_only(self) -> bool:
        return self.status.is_read_only


class ProjectDraft(BaseModel):
    """Payload accepted by project creation."""

    name: str
    description: str = ""
    start_date: UtcDateTime
    end_date: UtcDateTime
    assigned_user_ids: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Project name cannot be empty")
        return value.strip()


class ProjectPatch(BaseModel):
    """Partial update for a project.

    Only fields the caller actually set are applied (``model_fields_set``).
    A new ``assigned_user_ids`` is diffed against the current team and
    logged as member events, the same as ``assign_members``.
    """

    name: str | None = None
    description: str | None = None
    status: ProjectStatus | None = None
    start_date: UtcDateTime | None = None
    end_date: UtcDateTime | None = None
    assigned_user_ids: list[str] | None = None
    attachments: list[str] | None = None

    model_config = {"extra": "forbid"}

    def changes(self) -> dict[str, Any]:
        """Return the explicitly provided fields, excluding ``status``."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "status" and getattr(self, name) is not None
        }


def isoformat(value: datetime | None) -> str | None:
    """Serialize a timestamp the way date_change payloads store it."""
    if value is None:
        return None
    return value.isoformat()

"""Request/Response schemas for the Taskboard API.

These Pydantic models define the API contract for request and response
bodies. They are separate from the domain models in taskboard.domain; the
services re-validate what they receive.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from taskboard.domain.project import ProjectStatus
from taskboard.domain.task import TaskPriority, TaskStatus
from taskboard.domain.timeline import TimelineEvent


# =============================================================================
# Project Schemas
# =============================================================================


class CreateProjectRequest(BaseModel):
    """Request to create a new project."""

    name: str
    description: str = ""
    start_date: datetime
    end_date: datetime
    assigned_user_ids: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)


class UpdateProjectRequest(BaseModel):
    """Partial project update. Only fields present in the body are applied."""

    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    assigned_user_ids: Optional[list[str]] = None
    attachments: Optional[list[str]] = None

    model_config = {"extra": "forbid"}


class SetStatusRequest(BaseModel):
    status: ProjectStatus
    note: Optional[str] = None


class AssignMembersRequest(BaseModel):
    """The complete desired team."""

    user_ids: list[str]


class MilestoneRequest(BaseModel):
    title: str
    note: Optional[str] = None


# =============================================================================
# Task Schemas
# =============================================================================


class CreateTaskRequest(BaseModel):
    """Request to add a task to a project."""

    project_id: str
    title: str
    description: str = ""
    assignee_id: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    tags: list[str] = Field(default_factory=list)
    links: list[str] = Field(default_factory=list)
    attachments: list[str] = Field(default_factory=list)
    deadline: Optional[datetime] = None


class UpdateTaskRequest(BaseModel):
    """Partial task update. Send ``"deadline": null`` to clear the deadline."""

    title: Optional[str] = None
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    tags: Optional[list[str]] = None
    links: Optional[list[str]] = None
    attachments: Optional[list[str]] = None
    deadline: Optional[datetime] = None

    model_config = {"extra": "forbid"}


class MoveTaskRequest(BaseModel):
    status: TaskStatus


# =============================================================================
# Notification Schemas
# =============================================================================


class DeadlineCheckRequest(BaseModel):
    """Reference instant for the scan; the server clock when omitted."""

    now: Optional[datetime] = None


class MarkAllReadResponse(BaseModel):
    updated: int


# =============================================================================
# Timeline Schemas
# =============================================================================


class TimelineEntry(BaseModel):
    """A timeline event with its display label and the gap to the previous one."""

    event: TimelineEvent
    label: str
    days_since_previous: Optional[int] = None
    duration: Optional[str] = None

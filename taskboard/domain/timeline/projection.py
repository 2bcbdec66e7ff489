"""Timeline projection.

Merges a project's status history and activity log into one ordered,
labeled feed for display and export. Every function here is pure: it reads
the project and returns new objects, so filtering or exporting a feed can
never touch the stored history.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from taskboard.domain.project.models import ActivityType, Project, ProjectStatus
from taskboard.domain.shared.clock import UtcDateTime, as_utc, utc_now
from taskboard.domain.task.models import Task
from taskboard.domain.user.models import User

STATUS_CHANGE = "status_change"
TEAM_FILTER = "team"
TEAM_TYPES = frozenset({ActivityType.MEMBER_ADDED.value, ActivityType.MEMBER_REMOVED.value})

STATUS_LABELS = {
    ProjectStatus.ACTIVE: "Active",
    ProjectStatus.ON_HOLD: "On Hold",
    ProjectStatus.COMPLETED: "Completed",
}

# Filter values offered by timeline views, in display order
EVENT_FILTERS = (
    ("", "All"),
    (STATUS_CHANGE, "Status"),
    (ActivityType.DATE_CHANGE.value, "Dates"),
    (TEAM_FILTER, "Team"),
    (ActivityType.MILESTONE.value, "Milestones"),
    (ActivityType.TASK_MILESTONE.value, "Tasks"),
)


class TimelineEvent(BaseModel):
    """One entry of the projected feed."""

    type: str
    at: UtcDateTime
    id: str | None = None
    user_id: str | None = None
    note: str | None = None
    status: ProjectStatus | None = None
    is_first: bool = False
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class AnnotatedEvent(BaseModel):
    """A visible event with the gap to the previous visible one."""

    event: TimelineEvent
    days_since_previous: int | None = None


def build_timeline(project: Project | None, now: datetime | None = None) -> list[TimelineEvent]:
    """Project status history and activity log into a sorted feed.

    When both logs are empty a two-point timeline is synthesized: the project
    start as ACTIVE, plus the current status at the end date when the
    project is no longer active.
    """
    if project is None:
        return []

    events: list[TimelineEvent] = [
        TimelineEvent(
            type=STATUS_CHANGE,
            at=entry.at,
            user_id=entry.user_id,
            note=entry.note,
            status=entry.status,
            is_first=index == 0,
        )
        for index, entry in enumerate(project.status_history)
    ]
    events.extend(
        TimelineEvent(
            type=entry.type.value,
            at=entry.at,
            id=entry.id,
            user_id=entry.user_id,
            note=entry.note,
            payload=dict(entry.payload),
        )
        for entry in project.activity_log
    )

    if not events:
        current = now or utc_now()
        events.append(
            TimelineEvent(
                type=STATUS_CHANGE,
                at=project.start_date or project.created_at or current,
                status=ProjectStatus.ACTIVE,
                is_first=True,
            )
        )
        if project.status is not ProjectStatus.ACTIVE:
            events.append(
                TimelineEvent(
                    type=STATUS_CHANGE,
                    at=project.end_date or current,
                    status=project.status,
                )
            )

    # sorted() is stable, so same-instant events keep history-then-log order
    return sorted(events, key=lambda event: event.at)


def event_label(event: TimelineEvent, tasks_by_id: Mapping[str, Task] | None = None) -> str:
    """Human-readable text for an event."""
    if event.type == STATUS_CHANGE:
        if event.is_first and event.status is ProjectStatus.ACTIVE:
            return "Project created"
        if event.status is ProjectStatus.ACTIVE:
            return "Marked active"
        if event.status is ProjectStatus.ON_HOLD:
            return "Put on hold"
        if event.status is ProjectStatus.COMPLETED:
            return "Marked completed"
        return "Status change"

    payload = event.payload
    if event.type == ActivityType.DATE_CHANGE.value and payload.get("field"):
        field = "Start date" if payload["field"] == "start_date" else "End date"
        return f"{field} changed"
    if event.type == ActivityType.MEMBER_ADDED.value:
        return "Member added"
    if event.type == ActivityType.MEMBER_REMOVED.value:
        return "Member removed"
    if event.type == ActivityType.MILESTONE.value and payload.get("title"):
        return str(payload["title"])
    if event.type == ActivityType.TASK_MILESTONE.value:
        task = (tasks_by_id or {}).get(payload.get("task_id", ""))
        return f"Task completed: {task.title}" if task else "Task completed"
    return "Event"


def filter_timeline(
    events: Sequence[TimelineEvent],
    event_type: str | None = None,
    since_days: int | None = None,
    now: datetime | None = None,
) -> list[TimelineEvent]:
    """Narrow an already-sorted feed by type and by a date-range lower bound.

    Args:
        events: Output of ``build_timeline``.
        event_type: An event type, ``"team"`` for both membership types,
            or empty/None for everything.
        since_days: Keep events with ``at >= now - since_days``.
        now: Reference time for ``since_days`` (defaults to the current time).

    Returns:
        A new list; ``events`` is left untouched.
    """
    selected = list(events)
    if event_type:
        if event_type == TEAM_FILTER:
            selected = [e for e in selected if e.type in TEAM_TYPES]
        else:
            selected = [e for e in selected if e.type == event_type]
    if since_days:
        since = as_utc(now or utc_now()) - timedelta(days=since_days)
        selected = [e for e in selected if e.at >= since]
    return selected


def annotate_durations(events: Sequence[TimelineEvent]) -> list[AnnotatedEvent]:
    """Attach whole days since the previous visible event (None below one day)."""
    annotated: list[AnnotatedEvent] = []
    previous: TimelineEvent | None = None
    for event in events:
        days = None
        if previous is not None:
            gap = (event.at - previous.at).days
            days = gap if gap >= 1 else None
        annotated.append(AnnotatedEvent(event=event, days_since_previous=days))
        previous = event
    return annotated


def format_duration(days: int | None) -> str | None:
    """Render a gap as "1 day", "12 days", "3 months" or "2 years"."""
    if days is None or days <= 0:
        return None
    if days == 1:
        return "1 day"
    if days < 30:
        return f"{days} days"
    months = round(days / 30)
    if months < 12:
        return f"{months} month{'s' if months != 1 else ''}"
    years = round(months / 12)
    return f"{years} year{'s' if years != 1 else ''}"


def format_timestamp(value: datetime) -> str:
    """Format like ``Jan 5, 2024, 09:30 AM`` (UTC)."""
    value = as_utc(value)
    return f"{value:%b} {value.day}, {value:%Y}, {value:%I:%M %p}"


def export_timeline(
    events: Sequence[TimelineEvent],
    users_by_id: Mapping[str, User] | None = None,
    tasks_by_id: Mapping[str, Task] | None = None,
) -> str:
    """Render a filtered feed as plain text, one line per event."""
    users = users_by_id or {}
    lines = []
    for event in events:
        line = f"{format_timestamp(event.at)} — {event_label(event, tasks_by_id)}"
        if event.user_id:
            user = users.get(event.user_id)
            line += f" by {user.name if user else 'Someone'}"
        if event.note:
            line += f" ({event.note})"
        if event.type == STATUS_CHANGE and event.status is not None:
            line += f" — {STATUS_LABELS.get(event.status, event.status.value)}"
        lines.append(line)
    return "\n".join(lines)


def export_document(
    project: Project,
    events: Sequence[TimelineEvent],
    users_by_id: Mapping[str, User] | None = None,
    tasks_by_id: Mapping[str, Task] | None = None,
) -> str:
    """Export text headed with the project name, as copied to the clipboard."""
    body = export_timeline(events, users_by_id, tasks_by_id)
    return f"Project: {project.name or 'Project'}\n\n{body}"

"""Project application service.

Owns project creation, updates, status transitions, team membership and the
append-only activity log. Every public method performs its
read-modify-write while holding the store lock and returns a Result.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from taskboard.application.common import parse_payload, saved
from taskboard.domain.project import (
    ActivityEvent,
    ActivityType,
    NewActivity,
    Project,
    ProjectDraft,
    ProjectPatch,
    ProjectStatus,
    StatusEntry,
    dedupe_ids,
    diff_members,
)
from taskboard.domain.project.models import isoformat
from taskboard.domain.shared import (
    Clock,
    Err,
    NotFoundError,
    Ok,
    Result,
    StorageError,
    ValidationError,
    flat_map,
    is_ok,
    map_result,
    new_id,
    utc_now,
)
from taskboard.infrastructure.storage import EntityStore, ProjectRepository, TaskRepository

logger = logging.getLogger(__name__)

# Fields whose changes are recorded as date_change events, in recording order
TRACKED_DATE_FIELDS = ("start_date", "end_date")


def _not_found(project_id: str) -> Err[NotFoundError]:
    return Err(NotFoundError(f"Project not found: {project_id}"))


def seed_history(project: Project, now: datetime) -> list[StatusEntry]:
    """Return the status history, seeding legacy projects that have none.

    The seed entry reflects the current status at ``created_at``, falling
    back to ``start_date`` and then ``now``.
    """
    if project.status_history:
        return list(project.status_history)
    at = project.created_at or project.start_date or now
    return [StatusEntry(status=project.status, at=at)]


def transition(
    project: Project,
    new_status: ProjectStatus,
    now: datetime,
    user_id: str | None = None,
    note: str | None = None,
) -> Project:
    """Apply a status transition and keep history in step with ``status``.

    Re-entering the current status appends nothing.
    """
    history = seed_history(project, now)
    if project.status is not new_status:
        history = [*history, StatusEntry(status=new_status, at=now, user_id=user_id, note=note)]
    return project.model_copy(update={"status": new_status, "status_history": history})


def _requested_status(
    patch: ProjectPatch | Mapping[str, Any] | None,
) -> Result[ProjectStatus | None, ValidationError]:
    """Pull only ``status`` out of a patch; every other key is ignored."""
    if isinstance(patch, ProjectPatch):
        return Ok(patch.status)
    raw = (patch or {}).get("status")
    return map_result(parse_payload(ProjectPatch, {"status": raw}), lambda parsed: parsed.status)


def _ignored_fields(patch: ProjectPatch | Mapping[str, Any] | None) -> list[str]:
    if isinstance(patch, ProjectPatch):
        return sorted(patch.changes())
    return sorted(key for key, value in (patch or {}).items() if key != "status" and value is not None)


def _member_events(
    project: Project,
    desired_user_ids: Iterable[str] | None,
    now: datetime,
    by_user_id: str | None,
) -> tuple[list[str], list[ActivityEvent]]:
    """Return the deduplicated team and its change events, removals first."""
    desired = dedupe_ids(desired_user_ids)
    delta = diff_members(project.assigned_user_ids, desired)
    events = [
        ActivityEvent(
            id=new_id("evt"),
            type=event_type,
            at=now,
            user_id=by_user_id,
            payload={"user_id": member_id},
        )
        for event_type, ids in (
            (ActivityType.MEMBER_REMOVED, delta.removed),
            (ActivityType.MEMBER_ADDED, delta.added),
        )
        for member_id in ids
    ]
    return desired, events


class ProjectService:
    """Project lifecycle manager.

    Example:
        service = ProjectService(MemoryStore())
        result = service.create({"name": "Portal", ...}, "user-admin")
    """

    def __init__(self, store: EntityStore, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock
        self._projects = ProjectRepository(store)
        self._tasks = TaskRepository(store)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, project_id: str) -> Result[Project, NotFoundError]:
        project = self._projects.get(project_id)
        if project is None:
            return _not_found(project_id)
        return Ok(project)

    def list_all(self, status: ProjectStatus | None = None) -> list[Project]:
        return self._projects.list_by_status(status)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(
        self,
        payload: ProjectDraft | Mapping[str, Any],
        created_by_user_id: str | None = None,
    ) -> Result[Project, ValidationError | StorageError]:
        """Create a new ACTIVE project with a seeded status history.

        Args:
            payload: Name, description, start/end dates, optional members
                and attachments.
            created_by_user_id: Recorded on the first history entry.

        Returns:
            Ok(Project) on success, Err(ValidationError) for a malformed
            payload.
        """
        parsed = parse_payload(ProjectDraft, payload)
        if isinstance(parsed, Err):
            logger.warning(f"Rejected project payload: {parsed.error}")
            return parsed
        draft = parsed.value
        if draft.end_date < draft.start_date:
            return Err(ValidationError("End date cannot be before start date"))

        now = self._clock()
        project = Project(
            id=new_id("proj"),
            name=draft.name,
            description=draft.description,
            status=ProjectStatus.ACTIVE,
            start_date=draft.start_date,
            end_date=draft.end_date,
            assigned_user_ids=dedupe_ids(draft.assigned_user_ids),
            created_at=now,
            status_history=[StatusEntry(status=ProjectStatus.ACTIVE, at=now, user_id=created_by_user_id)],
            activity_log=[],
            attachments=list(draft.attachments),
        )

        with self._store.lock:
            projects = self._projects.list_all()
            result = saved(self._projects.append(projects, project), project)

        if is_ok(result):
            logger.info(f"Created project {project.id} ({project.name})")
        return result

    def update(
        self,
        project_id: str,
        patch: ProjectPatch | Mapping[str, Any],
        user_id: str | None = None,
    ) -> Result[Project, NotFoundError | ValidationError | StorageError]:
        """Apply a partial update.

        A read-only (ON_HOLD/COMPLETED) project only honors ``status``; every
        other field in the patch is ignored without being validated. On an
        active project, start and end date changes are logged as
        ``date_change`` events before the fields are overwritten, and a new
        ``assigned_user_ids`` is logged as member events. A status in the
        patch goes through the same transition as ``set_status``.
        """
        with self._store.lock:
            projects = self._projects.list_all()
            project = next((p for p in projects if p.id == project_id), None)
            if project is None:
                return _not_found(project_id)
            if project.is_read_only:
                return self._update_read_only(projects, project, patch, user_id)

            parsed = parse_payload(ProjectPatch, patch)
            if isinstance(parsed, Err):
                return parsed
            project_patch = parsed.value

            now = self._clock()
            changes = project_patch.changes()
            log = list(project.activity_log)
            for field in TRACKED_DATE_FIELDS:
                if field not in changes:
                    continue
                old_value, new_value = getattr(project, field), changes[field]
                if new_value != old_value:
                    log.append(
                        ActivityEvent(
                            id=new_id("evt"),
                            type=ActivityType.DATE_CHANGE,
                            at=now,
                            user_id=user_id,
                            payload={
                                "field": field,
                                "old_value": isoformat(old_value),
                                "new_value": isoformat(new_value),
                            },
                        )
                    )
            if "assigned_user_ids" in changes:
                desired, member_events = _member_events(
                    project, changes["assigned_user_ids"], now, user_id
                )
                changes["assigned_user_ids"] = desired
                log.extend(member_events)

            updated = project.model_copy(update={**changes, "activity_log": log})
            if updated.end_date < updated.start_date:
                return Err(ValidationError("End date cannot be before start date"))
            if project_patch.status is not None:
                updated = transition(updated, project_patch.status, now, user_id)
            return saved(self._projects.replace(projects, updated), updated)

    def _update_read_only(
        self,
        projects: list[Project],
        project: Project,
        patch: ProjectPatch | Mapping[str, Any],
        user_id: str | None,
    ) -> Result[Project, ValidationError | StorageError]:
        requested = _requested_status(patch)
        if isinstance(requested, Err):
            return requested
        if requested.value is None:
            ignored = _ignored_fields(patch)
            if ignored:
                logger.info(f"Project {project.id} is read-only, ignoring {ignored}")
            return Ok(project)
        updated = transition(project, requested.value, self._clock(), user_id)
        return saved(self._projects.replace(projects, updated), updated)

    def set_status(
        self,
        project_id: str,
        new_status: ProjectStatus | str,
        user_id: str | None = None,
        note: str | None = None,
    ) -> Result[Project, NotFoundError | ValidationError | StorageError]:
        """Transition a project, appending to its status history.

        Setting the status a project already has is idempotent: no history
        entry is appended.
        """
        try:
            status = ProjectStatus(new_status)
        except ValueError:
            return Err(ValidationError(f"Unknown project status: {new_status}"))

        with self._store.lock:
            projects = self._projects.list_all()
            project = next((p for p in projects if p.id == project_id), None)
            if project is None:
                return _not_found(project_id)

            updated = transition(project, status, self._clock(), user_id, note)
            result = saved(self._projects.replace(projects, updated), updated)

        if project.status is status:
            logger.debug(f"Project {project_id} already {status.value}, history unchanged")
        elif is_ok(result):
            logger.info(f"Project {project_id}: {project.status.value} -> {status.value}")
        return result

    def assign_members(
        self,
        project_id: str,
        desired_user_ids: Iterable[str] | None,
        by_user_id: str | None = None,
    ) -> Result[Project, NotFoundError | StorageError]:
        """Replace the team, logging one event per actual change.

        All ``member_removed`` events are appended before any
        ``member_added`` event.
        """
        with self._store.lock:
            projects = self._projects.list_all()
            project = next((p for p in projects if p.id == project_id), None)
            if project is None:
                return _not_found(project_id)

            desired, events = _member_events(project, desired_user_ids, self._clock(), by_user_id)
            updated = project.model_copy(
                update={
                    "assigned_user_ids": desired,
                    "activity_log": [*project.activity_log, *events],
                }
            )
            result = saved(self._projects.replace(projects, updated), updated)

        if events:
            removed = sum(1 for e in events if e.type is ActivityType.MEMBER_REMOVED)
            logger.info(f"Project {project_id} team: +{len(events) - removed} -{removed}")
        return result

    def add_milestone(
        self,
        project_id: str,
        title: str,
        user_id: str | None = None,
        note: str | None = None,
    ) -> Result[Project, NotFoundError | ValidationError | StorageError]:
        """Append a milestone event. Status and history are untouched."""
        if not title or not title.strip():
            return Err(ValidationError("Milestone title is required"))
        activity = NewActivity(
            type=ActivityType.MILESTONE,
            note=note or None,
            payload={"title": title.strip()},
        )
        return self.record_activity(project_id, activity, user_id)

    def record_activity(
        self,
        project_id: str,
        event: NewActivity | Mapping[str, Any],
        user_id: str | None = None,
    ) -> Result[Project, NotFoundError | ValidationError | StorageError]:
        """Stamp an event with an ID and timestamp and append it verbatim."""
        return flat_map(
            parse_payload(NewActivity, event),
            lambda activity: self._append_activity(project_id, activity, user_id),
        )

    def _append_activity(
        self, project_id: str, activity: NewActivity, user_id: str | None
    ) -> Result[Project, NotFoundError | StorageError]:
        with self._store.lock:
            projects = self._projects.list_all()
            project = next((p for p in projects if p.id == project_id), None)
            if project is None:
                return _not_found(project_id)

            entry = ActivityEvent(
                id=new_id("evt"),
                type=activity.type,
                at=self._clock(),
                user_id=user_id,
                note=activity.note,
                payload=dict(activity.payload),
            )
            updated = project.model_copy(update={"activity_log": [*project.activity_log, entry]})
            return saved(self._projects.replace(projects, updated), updated)

    def remove(self, project_id: str) -> Result[None, NotFoundError | StorageError]:
        """Delete a project and every task that belongs to it.

        Tasks are deleted first. If the project write then fails the task
        collection is restored, so callers never observe one without the
        other.
        """
        with self._store.lock:
            projects = self._projects.list_all()
            if not any(p.id == project_id for p in projects):
                return _not_found(project_id)

            tasks = self._tasks.list_all()
            doomed = sum(1 for t in tasks if t.project_id == project_id)
            task_write = self._tasks.remove_where(tasks, lambda t: t.project_id == project_id)
            if isinstance(task_write, Err):
                logger.warning(f"Could not delete tasks of {project_id}: {task_write.error}")
                return Err(StorageError(task_write.error))

            project_write = self._projects.remove_where(projects, lambda p: p.id == project_id)
            if isinstance(project_write, Err):
                logger.warning(f"Could not delete project {project_id}, restoring its tasks")
                self._tasks.save_all(tasks)
                return Err(StorageError(project_write.error))

        logger.info(f"Deleted project {project_id} and {doomed} task(s)")
        return Ok(None)

"""FastAPI routes for Taskboard.

Every route delegates to the Tracker facade. The acting user is taken from
the ``X-User-Id`` header; ``X-User-Role`` overrides the stored role.
"""

from typing import Annotated, Any, Optional, TypeVar

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from taskboard import __version__
from taskboard.application import Tracker
from taskboard.config import get_config
from taskboard.domain.notification import Notification
from taskboard.domain.project import Project, ProjectStatus
from taskboard.domain.shared import (
    AuthorizationError,
    Err,
    NotFoundError,
    ReadOnlyError,
    Result,
    ValidationError,
)
from taskboard.domain.task import Task, TaskStatus
from taskboard.domain.timeline import event_label, format_duration
from taskboard.domain.user import Role, Session, User
from taskboard.infrastructure.storage import JsonFileStore
from taskboard.interfaces.api.schemas import (
    AssignMembersRequest,
    CreateProjectRequest,
    CreateTaskRequest,
    DeadlineCheckRequest,
    MarkAllReadResponse,
    MilestoneRequest,
    MoveTaskRequest,
    SetStatusRequest,
    TimelineEntry,
    UpdateProjectRequest,
    UpdateTaskRequest,
)

T = TypeVar("T")

STATUS_CODES = {
    NotFoundError: 404,
    ReadOnlyError: 409,
    ValidationError: 422,
    AuthorizationError: 403,
}


def unwrap(result: Result[T, Any]) -> T:
    """Return the Ok value or raise the matching HTTPException."""
    if isinstance(result, Err):
        error = result.error
        status_code = STATUS_CODES.get(type(error), 500)
        raise HTTPException(status_code=status_code, detail=str(error))
    return result.value


# =============================================================================
# Dependencies
# =============================================================================


def get_tracker(request: Request) -> Tracker:
    return request.app.state.tracker


def get_session(
    tracker: Annotated[Tracker, Depends(get_tracker)],
    x_user_id: Annotated[str, Header()],
    x_user_role: Annotated[Optional[Role], Header()] = None,
) -> Session:
    """Build the acting session from request headers."""
    return tracker.session_for(x_user_id, x_user_role)


TrackerDep = Annotated[Tracker, Depends(get_tracker)]
SessionDep = Annotated[Session, Depends(get_session)]


# =============================================================================
# Router
# =============================================================================


router = APIRouter(prefix="/api")


# =============================================================================
# Users
# =============================================================================


@router.get("/users", response_model=list[User])
def list_users(tracker: TrackerDep):
    return tracker.list_users()


@router.put("/users/{user_id}", response_model=User)
def save_user(user_id: str, user: User, tracker: TrackerDep):
    """Insert or replace a user record."""
    if user.id != user_id:
        raise HTTPException(status_code=422, detail="User ID does not match the path")
    return unwrap(tracker.save_user(user))


# =============================================================================
# Project Management
# =============================================================================


@router.get("/projects", response_model=list[Project])
def list_projects(tracker: TrackerDep, status: Optional[ProjectStatus] = None):
    return tracker.projects.list_all(status)


@router.post("/projects", response_model=Project, status_code=201)
def create_project(req: CreateProjectRequest, tracker: TrackerDep, session: SessionDep):
    """Create a new ACTIVE project."""
    return unwrap(tracker.create_project(req.model_dump(), session))


@router.get("/projects/{project_id}", response_model=Project)
def get_project(project_id: str, tracker: TrackerDep):
    return unwrap(tracker.projects.get(project_id))


@router.patch("/projects/{project_id}", response_model=Project)
def update_project(
    project_id: str,
    req: UpdateProjectRequest,
    tracker: TrackerDep,
    session: SessionDep,
):
    """Apply a partial update. Read-only projects only accept ``status``."""
    return unwrap(tracker.update_project(project_id, req.model_dump(exclude_unset=True), session))


@router.post("/projects/{project_id}/status", response_model=Project)
def set_project_status(
    project_id: str,
    req: SetStatusRequest,
    tracker: TrackerDep,
    session: SessionDep,
):
    return unwrap(tracker.set_project_status(project_id, req.status, session, req.note))


@router.put("/projects/{project_id}/members", response_model=Project)
def assign_members(
    project_id: str,
    req: AssignMembersRequest,
    tracker: TrackerDep,
    session: SessionDep,
):
    """Replace the team; additions and removals are logged."""
    return unwrap(tracker.assign_members(project_id, req.user_ids, session))


@router.post("/projects/{project_id}/milestones", response_model=Project)
def add_milestone(
    project_id: str,
    req: MilestoneRequest,
    tracker: TrackerDep,
    session: SessionDep,
):
    return unwrap(tracker.add_milestone(project_id, req.title, session, req.note))


@router.post("/projects/{project_id}/completion-request", response_model=list[Notification])
def request_completion(project_id: str, tracker: TrackerDep, session: SessionDep):
    """Notify every active admin that completion was requested."""
    return unwrap(tracker.request_completion(project_id, session))


@router.delete("/projects/{project_id}")
def delete_project(project_id: str, tracker: TrackerDep):
    """Delete a project and all of its tasks."""
    unwrap(tracker.delete_project(project_id))
    return {"status": "deleted"}


# =============================================================================
# Timeline
# =============================================================================


@router.get("/projects/{project_id}/timeline", response_model=list[TimelineEntry])
def get_timeline(
    project_id: str,
    tracker: TrackerDep,
    event_type: Annotated[Optional[str], Query(alias="type")] = None,
    since_days: Optional[int] = None,
):
    entries = unwrap(tracker.timeline(project_id, event_type, since_days))
    tasks = tracker.tasks_by_id(project_id)
    return [
        TimelineEntry(
            event=entry.event,
            label=event_label(entry.event, tasks),
            days_since_previous=entry.days_since_previous,
            duration=format_duration(entry.days_since_previous),
        )
        for entry in entries
    ]


@router.get("/projects/{project_id}/timeline/export")
def export_timeline(
    project_id: str,
    tracker: TrackerDep,
    event_type: Annotated[Optional[str], Query(alias="type")] = None,
    since_days: Optional[int] = None,
):
    return {"text": unwrap(tracker.export_timeline(project_id, event_type, since_days))}


# =============================================================================
# Tasks
# =============================================================================


@router.get("/tasks", response_model=list[Task])
def list_tasks(
    tracker: TrackerDep,
    project_id: Optional[str] = None,
    assignee_id: Optional[str] = None,
    status: Optional[TaskStatus] = None,
):
    return tracker.tasks.list_all(project_id=project_id, assignee_id=assignee_id, status=status)


@router.post("/tasks", response_model=Task, status_code=201)
def create_task(req: CreateTaskRequest, tracker: TrackerDep, session: SessionDep):
    return unwrap(tracker.create_task(req.model_dump(exclude_unset=True), session))


@router.get("/tasks/{task_id}", response_model=Task)
def get_task(task_id: str, tracker: TrackerDep):
    return unwrap(tracker.tasks.get(task_id))


@router.patch("/tasks/{task_id}", response_model=Task)
def update_task(task_id: str, req: UpdateTaskRequest, tracker: TrackerDep, session: SessionDep):
    return unwrap(tracker.update_task(task_id, req.model_dump(exclude_unset=True), session))


@router.post("/tasks/{task_id}/status", response_model=Task)
def move_task(task_id: str, req: MoveTaskRequest, tracker: TrackerDep, session: SessionDep):
    """Move a task between board columns."""
    return unwrap(tracker.move_task_status(task_id, req.status, session))


@router.delete("/tasks/{task_id}")
def delete_task(task_id: str, tracker: TrackerDep, session: SessionDep):
    unwrap(tracker.delete_task(task_id, session))
    return {"status": "deleted"}


# =============================================================================
# Notifications
# =============================================================================


@router.get("/notifications", response_model=list[Notification])
def list_notifications(tracker: TrackerDep, session: SessionDep, unread: bool = False):
    """The acting user's inbox, newest first."""
    return tracker.inbox(session, unread_only=unread)


@router.post("/notifications/deadline-check", response_model=list[Notification])
def run_deadline_check(tracker: TrackerDep, req: Optional[DeadlineCheckRequest] = None):
    return unwrap(tracker.run_deadline_check(req.now if req else None))


@router.post("/notifications/read-all", response_model=MarkAllReadResponse)
def mark_all_read(tracker: TrackerDep, session: SessionDep):
    return MarkAllReadResponse(updated=unwrap(tracker.mark_all_read(session)))


@router.post("/notifications/{notification_id}/read", response_model=Notification)
def mark_read(notification_id: str, tracker: TrackerDep, session: SessionDep):
    return unwrap(tracker.mark_notification_read(notification_id, session))


# =============================================================================
# App Factory
# =============================================================================


def create_app(tracker: Optional[Tracker] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        tracker: Facade to serve; defaults to one over the configured data directory.
    """
    app = FastAPI(
        title="Taskboard",
        description="Project and task lifecycle tracking",
        version=__version__,
    )
    app.state.tracker = tracker or Tracker(JsonFileStore(get_config().data_path))

    # CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.get("/")
    def root():
        return {"name": "Taskboard", "version": __version__}

    return app

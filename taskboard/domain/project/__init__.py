"""Project domain package.

Models, the membership differ and status types for the project aggregate.
"""

from taskboard.domain.project.membership import MembershipDiff, dedupe_ids, diff_members
from taskboard.domain.project.models import (
    READ_ONLY_STATUSES,
    ActivityEvent,
    ActivityType,
    NewActivity,
    Project,
    ProjectDraft,
    ProjectPatch,
    ProjectStatus,
    StatusEntry,
)

__all__ = [
    "ActivityEvent",
    "ActivityType",
    "MembershipDiff",
    "NewActivity",
    "Project",
    "ProjectDraft",
    "ProjectPatch",
    "ProjectStatus",
    "READ_ONLY_STATUSES",
    "StatusEntry",
    "dedupe_ids",
    "diff_members",
]

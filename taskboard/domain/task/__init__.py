"""Task domain package.

Key Types:
    TaskStatus - Board column (TODO, IN_PROGRESS, COMPLETED)
    TaskPriority - LOW, MEDIUM, HIGH
    Task - Persisted task entity
    TaskDraft - Creation payload
    TaskPatch - Partial update payload
"""

from .models import LEARNING_TAG, Task, TaskDraft, TaskPatch, TaskPriority, TaskStatus

__all__ = [
    "LEARNING_TAG",
    "Task",
    "TaskDraft",
    "TaskPatch",
    "TaskPriority",
    "TaskStatus",
]

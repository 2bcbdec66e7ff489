"""Notification domain package."""

from taskboard.domain.notification.models import (
    Notification,
    NotificationType,
    days_until_deadline,
    deadline_dedup_key,
    deadline_message,
    needs_deadline_notice,
)

__all__ = [
    "Notification",
    "NotificationType",
    "days_until_deadline",
    "deadline_dedup_key",
    "deadline_message",
    "needs_deadline_notice",
]

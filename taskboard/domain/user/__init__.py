"""User domain package."""

from taskboard.domain.user.models import Role, Session, User

__all__ = ["Role", "Session", "User"]

"""User and session models.

Authentication lives outside this package; callers hand in a ``Session``
describing who is acting.
"""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class User(BaseModel):
    """A person who can be assigned to projects and tasks."""

    id: str
    name: str
    email: str = ""
    role: Role = Role.EMPLOYEE
    department: str | None = None
    is_active: bool = True


class Session(BaseModel):
    """The acting user for a mutating operation."""

    user_id: str
    role: Role = Role.EMPLOYEE

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

"""User model definitions."""

from datetime import datetime
from enum import Enum

from pydantic import Field, model_validator

from office_hours.models.entity import Entity, utcnow

USERS = "users"
TEACHERS = "teachers"


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class User(Entity):
    """An application user, keyed by the principal id it belongs to."""

    email: str
    name: str
    role: Role
    department: str | None = None
    subject: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    is_approved: bool = False

    @model_validator(mode="before")
    @classmethod
    def default_approval(cls, data):
        # Only students wait for approval; a missing flag means not approved yet.
        if isinstance(data, dict) and "isApproved" not in data and "is_approved" not in data:
            data = {**data, "isApproved": data.get("role") != Role.STUDENT.value}
        return data


class TeacherProfile(Entity):
    """Scheduling-facing copy of a teacher user; shares the user's id."""

    name: str
    email: str
    department: str
    subject: str
    available_slots: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    def matches(self, query: str) -> bool:
        needle = query.lower()
        return any(
            needle in field.lower()
            for field in (self.name, self.department, self.subject)
        )

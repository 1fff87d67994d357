"""Message model definitions."""

from datetime import datetime

from pydantic import Field

from office_hours.models.entity import Entity, utcnow

MESSAGES = "messages"


class Message(Entity):
    """A one-way note from a student to a teacher."""

    student_id: str
    teacher_id: str
    student_name: str
    teacher_name: str
    content: str
    appointment_id: str | None = None  # never set by any operation
    created_at: datetime = Field(default_factory=utcnow)

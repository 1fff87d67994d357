"""Appointment model definitions."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from office_hours.models.entity import Entity, utcnow

APPOINTMENTS = "appointments"


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"


# Statuses a teacher may set; "pending" is only ever the initial value.
DECISION_STATUSES = {AppointmentStatus.APPROVED, AppointmentStatus.CANCELLED}


class Appointment(Entity):
    """A student's booking request against one of a teacher's slots.

    Names are copied at booking time and are not refreshed afterwards.
    """

    student_id: str
    teacher_id: str
    student_name: str
    teacher_name: str
    date: str
    time: str
    purpose: str
    status: AppointmentStatus = AppointmentStatus.PENDING
    created_at: datetime = Field(default_factory=utcnow)

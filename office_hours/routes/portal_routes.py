from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator

from office_hours.auth.dependencies import get_current_user, get_portal_service
from office_hours.models.appointment import Appointment
from office_hours.models.message import Message
from office_hours.models.user import TeacherProfile, User
from office_hours.routes.common import portal_errors
from office_hours.services.portal import PortalService

router = APIRouter(tags=['portal'])

MAX_PURPOSE_LENGTH = 600
MAX_MESSAGE_LENGTH = 2000


class CreateAppointmentRequest(BaseModel):
    teacher_id: str
    date: str
    time: str
    purpose: str

    @field_validator('teacher_id', 'date', 'time')
    @classmethod
    def strip_value(cls, value: str) -> str:
        return value.strip()

    @field_validator('purpose')
    @classmethod
    def validate_purpose(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) > MAX_PURPOSE_LENGTH:
            raise ValueError(f'Purpose must be {MAX_PURPOSE_LENGTH} characters or fewer.')
        return normalized


class UpdateAppointmentStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def normalize_status(cls, value: str) -> str:
        return value.strip().lower()


class SendMessageRequest(BaseModel):
    teacher_id: str
    content: str

    @field_validator('content')
    @classmethod
    def validate_content(cls, value: str) -> str:
        normalized = value.strip()
        if len(normalized) > MAX_MESSAGE_LENGTH:
            raise ValueError(f'Messages must be {MAX_MESSAGE_LENGTH} characters or fewer.')
        return normalized


class DashboardResponse(BaseModel):
    role: str
    appointments: list[Appointment]
    pending_appointments: list[Appointment]
    messages: list[Message]
    teachers: list[TeacherProfile]
    students: list[User]


@router.get('/teachers', response_model=list[TeacherProfile], dependencies=[Depends(get_current_user)])
def search_teachers(
    q: str = Query(default=''),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        return service.search_teachers(q)


@router.post('/appointments', response_model=Appointment, status_code=status.HTTP_201_CREATED)
def book_appointment(
    data: CreateAppointmentRequest,
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        return service.book_appointment(current_user, data.teacher_id, data.date, data.time, data.purpose)


@router.patch('/appointments/{appointment_id}/status', response_model=Appointment)
def update_appointment_status(
    appointment_id: str,
    data: UpdateAppointmentStatusRequest,
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        return service.set_appointment_status(current_user, appointment_id, data.status)


@router.post('/messages', response_model=Message, status_code=status.HTTP_201_CREATED)
def send_message(
    data: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        return service.send_message(current_user, data.teacher_id, data.content)


@router.get('/dashboard', response_model=DashboardResponse)
def dashboard(
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        view = service.list_for_role(current_user)

    return DashboardResponse(
        role=current_user.role.value,
        appointments=view.appointments,
        pending_appointments=view.pending_appointments,
        messages=view.messages,
        teachers=view.teachers,
        students=view.students,
    )

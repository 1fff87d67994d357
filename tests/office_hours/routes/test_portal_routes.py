import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from office_hours.auth.dependencies import get_current_user
from office_hours.routes import portal_routes
from office_hours.routes.portal_routes import (
    CreateAppointmentRequest,
    SendMessageRequest,
    UpdateAppointmentStatusRequest,
)


def _book(service, student, teacher):
    return portal_routes.book_appointment(
        data=CreateAppointmentRequest(teacher_id=teacher.id, date='2024-05-01', time='09:00', purpose=' advising '),
        current_user=student,
        service=service,
    )


def test_create_appointment_request_rejects_long_purpose() -> None:
    with pytest.raises(ValidationError):
        CreateAppointmentRequest(teacher_id='t1', date='2024-05-01', time='09:00', purpose='x' * 601)


def test_update_status_request_normalizes_status() -> None:
    assert UpdateAppointmentStatusRequest(status=' Approved ').status == 'approved'


def test_search_teachers_route_filters_by_query(service, teacher) -> None:
    service.register('noether@school.edu', 'secret-pass', 'Emmy Noether', 'teacher', department='Mathematics', subject='Algebra')

    results = portal_routes.search_teachers(q='algo', service=service)

    assert [profile.id for profile in results] == [teacher.id]


def test_book_appointment_route_returns_pending(service, teacher, student) -> None:
    appointment = _book(service, student, teacher)

    assert appointment.status.value == 'pending'
    assert appointment.purpose == 'advising'


def test_book_appointment_route_as_teacher_returns_403(service, teacher) -> None:
    with pytest.raises(HTTPException) as exception_info:
        _book(service, teacher, teacher)

    assert exception_info.value.status_code == 403


def test_update_status_route_by_owner(service, teacher, student) -> None:
    appointment = _book(service, student, teacher)

    updated = portal_routes.update_appointment_status(
        appointment_id=appointment.id,
        data=UpdateAppointmentStatusRequest(status='approved'),
        current_user=teacher,
        service=service,
    )

    assert updated.status.value == 'approved'


def test_update_status_route_by_other_user_returns_403(service, teacher, student) -> None:
    appointment = _book(service, student, teacher)

    with pytest.raises(HTTPException) as exception_info:
        portal_routes.update_appointment_status(
            appointment_id=appointment.id,
            data=UpdateAppointmentStatusRequest(status='approved'),
            current_user=student,
            service=service,
        )

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail['kind'] == 'authorization_error'


def test_send_message_route_to_missing_teacher_returns_404(service, student) -> None:
    with pytest.raises(HTTPException) as exception_info:
        portal_routes.send_message(
            data=SendMessageRequest(teacher_id='missing', content='Hello'),
            current_user=student,
            service=service,
        )

    assert exception_info.value.status_code == 404


def test_teacher_dashboard_counts_pending_and_messages(service, teacher, student) -> None:
    _book(service, student, teacher)
    portal_routes.send_message(
        data=SendMessageRequest(teacher_id=teacher.id, content='Running late'),
        current_user=student,
        service=service,
    )

    dashboard = portal_routes.dashboard(current_user=teacher, service=service)

    assert dashboard.role == 'teacher'
    assert len(dashboard.appointments) == 1
    assert len(dashboard.pending_appointments) == 1
    assert [message.content for message in dashboard.messages] == ['Running late']


def test_dashboard_serializes_camel_case_documents(service, teacher, student) -> None:
    _book(service, student, teacher)

    dashboard = portal_routes.dashboard(current_user=student, service=service)
    body = dashboard.model_dump(mode='json', by_alias=True)

    assert body['appointments'][0]['teacherName'] == 'Alan Turing'
    assert body['teachers'][0]['availableSlots'][0] == '09:00'


def test_search_teachers_route_requires_signed_in_user() -> None:
    route = next(
        route for route in portal_routes.router.routes
        if route.path == '/teachers' and 'GET' in route.methods
    )

    assert get_current_user in [dependency.call for dependency in route.dependant.dependencies]

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from office_hours.auth import jwt_handler
from office_hours.routes import auth_routes
from office_hours.routes.auth_routes import LoginRequest, RegisterRequest

PASSWORD = 'secret-pass'


def test_register_request_normalizes_fields() -> None:
    request = RegisterRequest(
        email=' GRACE@SCHOOL.EDU ',
        password=PASSWORD,
        name='Grace Hopper',
        role=' Teacher ',
        department='  ',
        subject=' Compilers ',
    )

    assert request.email == 'grace@school.edu'
    assert request.role == 'teacher'
    assert request.department is None
    assert request.subject == 'Compilers'


def test_register_request_rejects_admin_self_registration() -> None:
    with pytest.raises(ValidationError):
        RegisterRequest(email='root@school.edu', password=PASSWORD, name='Root', role='admin')


def test_register_student_reports_pending_approval(service) -> None:
    response = auth_routes.register(
        data=RegisterRequest(email='grace@school.edu', password=PASSWORD, name='Grace Hopper'),
        service=service,
    )

    assert response.requires_approval is True
    assert response.user.is_approved is False
    assert 'pending approval' in response.message


def test_register_teacher_without_subject_returns_422(service) -> None:
    with pytest.raises(HTTPException) as exception_info:
        auth_routes.register(
            data=RegisterRequest(
                email='turing@school.edu',
                password=PASSWORD,
                name='Alan Turing',
                role='teacher',
                department='CS',
            ),
            service=service,
        )

    assert exception_info.value.status_code == 422
    assert exception_info.value.detail == {'kind': 'validation_error', 'message': 'Subject is required.'}


def test_login_returns_token_for_principal(service, teacher) -> None:
    response = auth_routes.login(data=LoginRequest(email='turing@school.edu', password=PASSWORD), service=service)

    payload = jwt_handler.decode_access_token(response.access_token)
    assert payload['sub'] == teacher.id
    assert payload['email'] == 'turing@school.edu'
    assert response.token_type == 'bearer'
    assert response.user.id == teacher.id


def test_login_pending_student_returns_403(service) -> None:
    service.register('grace@school.edu', PASSWORD, 'Grace Hopper', 'student')

    with pytest.raises(HTTPException) as exception_info:
        auth_routes.login(data=LoginRequest(email='grace@school.edu', password=PASSWORD), service=service)

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail['kind'] == 'pending_approval'


def test_login_wrong_password_returns_401(service, teacher) -> None:
    with pytest.raises(HTTPException) as exception_info:
        auth_routes.login(data=LoginRequest(email='turing@school.edu', password='nope-nope'), service=service)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == {'kind': 'authentication_error', 'message': 'Invalid email or password.'}


def test_logout_ends_session(service, principal_store, teacher) -> None:
    sessions: list[str | None] = []
    principal_store.on_session_change(sessions.append)

    auth_routes.logout(current_user=teacher, service=service)

    assert sessions == [None]


def test_me_returns_current_user(teacher) -> None:
    assert auth_routes.me(current_user=teacher) == teacher


def test_register_short_password_returns_422(service) -> None:
    with pytest.raises(HTTPException) as exception_info:
        auth_routes.register(
            data=RegisterRequest(email='grace@school.edu', password='123', name='Grace Hopper'),
            service=service,
        )

    assert exception_info.value.status_code == 422
    assert exception_info.value.detail['kind'] == 'validation_error'

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from office_hours.auth import jwt_handler
from office_hours.auth.dependencies import get_current_user
from office_hours.auth.session import Principal, restore_principal


def test_restore_principal_from_valid_token() -> None:
    token = jwt_handler.create_access_token(subject='p1', email='grace@school.edu')

    assert restore_principal(token) == Principal(id='p1', email='grace@school.edu')


@pytest.mark.parametrize('token', [None, '', 'not-a-jwt'])
def test_restore_principal_returns_none_for_missing_or_invalid_token(token) -> None:
    assert restore_principal(token) is None


def test_restore_principal_returns_none_for_expired_token() -> None:
    token = jwt_handler.create_access_token(subject='p1', email='grace@school.edu', expires_minutes=-1)

    assert restore_principal(token) is None


def test_get_current_user_loads_profile(service, teacher) -> None:
    token = jwt_handler.create_access_token(subject=teacher.id, email=teacher.email)
    credentials = HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)

    assert get_current_user(credentials=credentials, service=service) == teacher


def test_get_current_user_rejects_deleted_profile(service, admin) -> None:
    pending = service.register('grace@school.edu', 'secret-pass', 'Grace Hopper', 'student')
    service.reject_student(admin, pending.id)
    token = jwt_handler.create_access_token(subject=pending.id, email=pending.email)

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(
            credentials=HTTPAuthorizationCredentials(scheme='Bearer', credentials=token),
            service=service,
        )

    assert exception_info.value.status_code == 401

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator

from office_hours.auth import jwt_handler
from office_hours.auth.dependencies import get_current_user, get_portal_service
from office_hours.models.user import Role, User
from office_hours.routes.common import portal_errors
from office_hours.services.portal import PortalService

router = APIRouter(tags=['auth'])

SELF_SERVICE_ROLES = {Role.STUDENT.value, Role.TEACHER.value}


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    role: str = Role.STUDENT.value
    department: str | None = None
    subject: str | None = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in SELF_SERVICE_ROLES:
            raise ValueError('Only student and teacher accounts can be registered.')
        return normalized

    @field_validator('department', 'subject')
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class RegisterResponse(BaseModel):
    user: User
    requires_approval: bool
    message: str


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'
    user: User


@router.post('/register', response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, service: PortalService = Depends(get_portal_service)):
    with portal_errors():
        user = service.register(
            email=data.email,
            password=data.password,
            name=data.name,
            role=data.role,
            department=data.department,
            subject=data.subject,
        )

    if user.is_approved:
        return RegisterResponse(user=user, requires_approval=False, message='Registration successful.')
    return RegisterResponse(
        user=user,
        requires_approval=True,
        message='Registration successful! Your account is pending approval by the administrator.',
    )


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest, service: PortalService = Depends(get_portal_service)):
    with portal_errors():
        user = service.authenticate(data.email, data.password)

    token = jwt_handler.create_access_token(subject=user.id, email=user.email)
    return LoginResponse(access_token=token, user=user)


@router.post('/logout', status_code=status.HTTP_204_NO_CONTENT)
def logout(
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    service.sign_out(current_user)


@router.get('/me', response_model=User)
def me(current_user: User = Depends(get_current_user)):
    return current_user

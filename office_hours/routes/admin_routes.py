from fastapi import APIRouter, Depends, status

from office_hours.auth.dependencies import get_current_user, get_portal_service
from office_hours.core.errors import AuthorizationError
from office_hours.models.user import Role, TeacherProfile, User
from office_hours.routes.common import portal_errors
from office_hours.services.portal import PortalService

router = APIRouter(tags=['admin'])


@router.get('/students/pending', response_model=list[User])
def list_pending_students(
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        _require_admin_view(current_user)
        return service.list_for_role(current_user).students


@router.post('/students/{student_id}/approve', response_model=User)
def approve_student(
    student_id: str,
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        return service.approve_student(current_user, student_id)


@router.delete('/students/{student_id}', status_code=status.HTTP_204_NO_CONTENT)
def reject_student(
    student_id: str,
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        service.reject_student(current_user, student_id)


@router.get('/teachers', response_model=list[TeacherProfile])
def list_teachers(
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        _require_admin_view(current_user)
        return service.list_for_role(current_user).teachers


@router.delete('/teachers/{teacher_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_teacher(
    teacher_id: str,
    current_user: User = Depends(get_current_user),
    service: PortalService = Depends(get_portal_service),
):
    with portal_errors():
        service.remove_teacher(current_user, teacher_id)


def _require_admin_view(user: User) -> None:
    # The service scopes reads by role; this only keeps other roles off these lists.
    if user.role != Role.ADMIN:
        raise AuthorizationError('Only admins can view the administration lists.')

"""Role-scoped data access and appointment workflow.

``PortalService`` is the only place that decides who may read or change a
record. Every operation receives the acting ``User`` explicitly; queries for
appointments and messages are always built from that user's own id, never
from an id supplied by the caller.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from office_hours.core import config
from office_hours.core.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    PartialFailureError,
    PendingApprovalError,
    PrincipalStoreError,
    ValidationError,
)
from office_hours.models.appointment import (
    APPOINTMENTS,
    DECISION_STATUSES,
    Appointment,
    AppointmentStatus,
)
from office_hours.models.message import MESSAGES, Message
from office_hours.models.user import TEACHERS, USERS, Role, TeacherProfile, User
from office_hours.stores.principal_store import PrincipalStore
from office_hours.stores.record_store import RecordStore

logger = logging.getLogger(__name__)

PENDING_APPROVAL_MESSAGE = (
    'Your registration is pending approval. '
    'An administrator must approve your account before you can sign in.'
)


@dataclass
class RoleView:
    appointments: list[Appointment] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    teachers: list[TeacherProfile] = field(default_factory=list)
    students: list[User] = field(default_factory=list)

    @property
    def pending_appointments(self) -> list[Appointment]:
        return [
            appointment for appointment in self.appointments
            if appointment.status == AppointmentStatus.PENDING
        ]


def _require_text(value: str | None, label: str) -> str:
    normalized = (value or '').strip()
    if not normalized:
        raise ValidationError(f'{label} is required.')
    return normalized


def _require_role(user: User, role: Role, action: str) -> None:
    if user.role != role:
        raise AuthorizationError(f'Only {role.value}s can {action}.')


def _parse_role(role: str | Role) -> Role:
    try:
        return Role(role)
    except ValueError as exc:
        raise ValidationError(f'Invalid role: {role}.') from exc


class PortalService:
    def __init__(self, principal_store: PrincipalStore, record_store: RecordStore):
        self.principals = principal_store
        self.records = record_store

    # Accounts

    def register(
        self,
        email: str,
        password: str,
        name: str,
        role: str | Role,
        department: str | None = None,
        subject: str | None = None,
    ) -> User:
        """Create a principal, its user record and, for teachers, a teacher profile.

        All validation runs before the first write. The writes themselves are
        sequential; if a later one fails after an earlier one succeeded, a
        ``PartialFailureError`` names both.
        """
        email = _require_text(email, 'Email').lower()
        name = _require_text(name, 'Name')
        parsed_role = _parse_role(role)
        if not password:
            raise ValidationError('Password is required.')
        if len(password) < config.MIN_PASSWORD_LENGTH:
            raise ValidationError(f'Password should be at least {config.MIN_PASSWORD_LENGTH} characters.')

        profile_fields: dict[str, str] = {}
        if parsed_role == Role.TEACHER:
            profile_fields = {
                'department': _require_text(department, 'Department'),
                'subject': _require_text(subject, 'Subject'),
            }

        logger.info('Registration attempt for %s as %s', email, parsed_role.value)
        try:
            principal_id = self.principals.create_principal(email, password)
        except PrincipalStoreError as exc:
            logger.info('Registration failed for %s: %s', email, exc)
            raise AuthenticationError(str(exc)) from exc

        user = User(
            id=principal_id,
            email=email,
            name=name,
            role=parsed_role,
            is_approved=parsed_role != Role.STUDENT,
            **profile_fields,
        )
        profile = None
        if parsed_role == Role.TEACHER:
            profile = TeacherProfile(
                id=principal_id,
                name=name,
                email=email,
                available_slots=list(config.DEFAULT_AVAILABLE_SLOTS),
                created_at=user.created_at,
                **profile_fields,
            )

        self._follow_up(
            completed=f'create principal {principal_id}',
            step=f'create {USERS}/{principal_id}',
            write=lambda: self.records.put(USERS, user.id, user.to_document()),
        )
        if profile is not None:
            self._follow_up(
                completed=f'create {USERS}/{principal_id}',
                step=f'create {TEACHERS}/{principal_id}',
                write=lambda: self.records.put(TEACHERS, profile.id, profile.to_document()),
            )

        logger.info('Registration successful for %s (%s)', user.id, user.role.value)
        return user

    def authenticate(self, email: str, password: str) -> User:
        email = (email or '').strip().lower()
        logger.info('Login attempt for %s', email)
        try:
            principal_id = self.principals.authenticate(email, password or '')
        except PrincipalStoreError as exc:
            logger.info('Login failed for %s: %s', email, exc)
            raise AuthenticationError(str(exc)) from exc

        user = self.load_user(principal_id)
        if user is None:
            logger.warning('Login failed for %s: no user profile for principal %s', email, principal_id)
            raise NotFoundError('User profile not found.')

        if user.role == Role.STUDENT and not user.is_approved:
            logger.info('Login blocked for %s: registration pending approval', user.id)
            raise PendingApprovalError(PENDING_APPROVAL_MESSAGE)

        self.principals.begin_session(user.id)
        logger.info('Login successful for %s (%s)', user.id, user.role.value)
        return user

    def sign_out(self, user: User) -> None:
        self.principals.end_session(user.id)
        logger.info('Logout successful for %s', user.id)

    def load_user(self, principal_id: str) -> User | None:
        document = self.records.get(USERS, principal_id)
        return User.from_document(document) if document else None

    def bootstrap_admin(self, email: str, password: str, name: str) -> User | None:
        """Register the configured administrator unless the account already exists."""
        normalized_email = email.strip().lower()
        existing = self.records.query(USERS, {'email': normalized_email, 'role': Role.ADMIN.value})
        if existing:
            return None
        return self.register(normalized_email, password, name, Role.ADMIN)

    # Administration

    def approve_student(self, actor: User, student_id: str) -> User:
        _require_role(actor, Role.ADMIN, 'approve student registrations')
        student = self.load_user(student_id)
        if student is None:
            raise NotFoundError('Student not found.')

        if not student.is_approved:
            student.is_approved = True
            self.records.put(USERS, student.id, student.to_document())
        logger.info('Student approved: %s by %s', student.id, actor.id)
        return student

    def reject_student(self, actor: User, student_id: str) -> None:
        _require_role(actor, Role.ADMIN, 'reject student registrations')
        student = self.load_user(student_id)
        if student is not None and student.role != Role.STUDENT:
            raise ValidationError('Only student registrations can be rejected.')

        self.records.delete(USERS, student_id)
        logger.info('Student rejected: %s by %s', student_id, actor.id)

    def remove_teacher(self, actor: User, teacher_id: str) -> None:
        """Delete the teacher profile and then the user record.

        Both deletes are always attempted. Appointments and messages that
        reference the teacher are left in place.
        """
        _require_role(actor, Role.ADMIN, 'remove teachers')
        teacher = self.load_user(teacher_id)
        if teacher is not None and teacher.role != Role.TEACHER:
            raise ValidationError('Only teacher accounts can be removed.')

        steps = [
            (f'delete {TEACHERS}/{teacher_id}', lambda: self.records.delete(TEACHERS, teacher_id)),
            (f'delete {USERS}/{teacher_id}', lambda: self.records.delete(USERS, teacher_id)),
        ]
        completed: list[str] = []
        failures: list[tuple[str, Exception]] = []
        for label, step in steps:
            try:
                step()
            except Exception as exc:
                failures.append((label, exc))
            else:
                completed.append(label)

        if failures and not completed:
            raise failures[0][1]
        if failures:
            failed = [label for label, _ in failures]
            logger.error(
                'Partial failure removing teacher %s: completed %s; failed %s (%s)',
                teacher_id,
                completed,
                failed,
                failures[0][1],
            )
            raise PartialFailureError(
                f'Teacher {teacher_id} was only partially removed.',
                completed=completed,
                failed=failed,
            ) from failures[0][1]

        logger.info('Teacher removed: %s by %s', teacher_id, actor.id)

    # Scheduling

    def search_teachers(self, query: str = '') -> list[TeacherProfile]:
        needle = query or ''
        teachers = [TeacherProfile.from_document(document) for document in self.records.query(TEACHERS)]
        if not needle:
            return teachers
        return [teacher for teacher in teachers if teacher.matches(needle)]

    def get_teacher(self, teacher_id: str) -> TeacherProfile:
        document = self.records.get(TEACHERS, teacher_id)
        if document is None:
            raise NotFoundError('Teacher not found.')
        return TeacherProfile.from_document(document)

    def book_appointment(self, actor: User, teacher_id: str, date: str, time: str, purpose: str) -> Appointment:
        # The requested time is not checked against the teacher's slots, and
        # the same (teacher, date, time) may be booked more than once.
        _require_role(actor, Role.STUDENT, 'book appointments')
        date = _require_text(date, 'Date')
        time = _require_text(time, 'Time')
        purpose = _require_text(purpose, 'Purpose')
        teacher = self.get_teacher(_require_text(teacher_id, 'Teacher'))

        appointment = Appointment(
            id=self.records.new_id(),
            student_id=actor.id,
            teacher_id=teacher.id,
            student_name=actor.name,
            teacher_name=teacher.name,
            date=date,
            time=time,
            purpose=purpose,
            status=AppointmentStatus.PENDING,
        )
        self.records.put(APPOINTMENTS, appointment.id, appointment.to_document())
        logger.info('Appointment booked: %s (student %s, teacher %s)', appointment.id, actor.id, teacher.id)
        return appointment

    def set_appointment_status(self, actor: User, appointment_id: str, new_status: str | AppointmentStatus) -> Appointment:
        # A decided appointment can be decided again; the last call wins.
        try:
            status = AppointmentStatus(new_status)
        except ValueError as exc:
            raise ValidationError(f'Invalid appointment status: {new_status}.') from exc
        if status not in DECISION_STATUSES:
            raise ValidationError('Appointment status must be approved or cancelled.')

        document = self.records.get(APPOINTMENTS, appointment_id)
        if document is None:
            raise NotFoundError('Appointment not found.')
        appointment = Appointment.from_document(document)

        if actor.id != appointment.teacher_id:
            raise AuthorizationError('Only the teacher for this appointment can change its status.')

        appointment.status = status
        self.records.put(APPOINTMENTS, appointment.id, appointment.to_document())
        logger.info('Appointment status updated: %s -> %s by %s', appointment.id, status.value, actor.id)
        return appointment

    def send_message(self, actor: User, teacher_id: str, content: str) -> Message:
        _require_role(actor, Role.STUDENT, 'send messages')
        content = _require_text(content, 'Message')
        teacher = self.get_teacher(_require_text(teacher_id, 'Teacher'))

        message = Message(
            id=self.records.new_id(),
            student_id=actor.id,
            teacher_id=teacher.id,
            student_name=actor.name,
            teacher_name=teacher.name,
            content=content,
        )
        self.records.put(MESSAGES, message.id, message.to_document())
        logger.info('Message sent: %s (student %s, teacher %s)', message.id, actor.id, teacher.id)
        return message

    # Role-scoped reads

    def list_for_role(self, actor: User) -> RoleView:
        if actor.role == Role.ADMIN:
            return RoleView(
                students=[
                    User.from_document(document)
                    for document in self.records.query(USERS, {'role': Role.STUDENT.value, 'isApproved': False})
                ],
                teachers=self.search_teachers(),
            )

        if actor.role == Role.TEACHER:
            appointments = [
                Appointment.from_document(document)
                for document in self.records.query(APPOINTMENTS, {'teacherId': actor.id})
            ]
            appointments.sort(key=lambda appointment: appointment.created_at, reverse=True)
            return RoleView(
                appointments=appointments,
                messages=[
                    Message.from_document(document)
                    for document in self.records.query(MESSAGES, {'teacherId': actor.id})
                ],
            )

        return RoleView(
            appointments=[
                Appointment.from_document(document)
                for document in self.records.query(APPOINTMENTS, {'studentId': actor.id})
            ],
            teachers=self.search_teachers(),
        )

    def _follow_up(self, completed: str, step: str, write: Callable[[], None]) -> None:
        try:
            write()
        except Exception as exc:
            logger.error(
                'Partial failure: completed "%s"; failed "%s" (%s)',
                completed,
                step,
                exc,
            )
            raise PartialFailureError(
                f'Could not {step} after {completed}.',
                completed=[completed],
                failed=[step],
            ) from exc

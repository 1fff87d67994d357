"""Email/password identities and session-change notifications."""

import logging
import uuid
from typing import Callable, Protocol

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from office_hours.core import config
from office_hours.core.errors import PrincipalStoreError
from office_hours.models.principal import PrincipalRecord

logger = logging.getLogger(__name__)

SessionListener = Callable[[str | None], None]

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class PrincipalStore(Protocol):
    def create_principal(self, email: str, password: str) -> str: ...

    def authenticate(self, email: str, password: str) -> str: ...

    def begin_session(self, principal_id: str) -> None: ...

    def end_session(self, principal_id: str | None = None) -> None: ...

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]: ...


class SqlPrincipalStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._listeners: list[SessionListener] = []

    def create_principal(self, email: str, password: str) -> str:
        if len(password) < config.MIN_PASSWORD_LENGTH:
            raise PrincipalStoreError(f'Password should be at least {config.MIN_PASSWORD_LENGTH} characters.')

        db: Session = self._session_factory()
        try:
            if db.query(PrincipalRecord).filter(PrincipalRecord.email == email).first():
                raise PrincipalStoreError('Email already in use.')

            principal = PrincipalRecord(
                id=uuid.uuid4().hex,
                email=email,
                hashed_password=pwd_context.hash(password),
            )
            db.add(principal)
            db.commit()
            return principal.id
        except IntegrityError as exc:
            db.rollback()
            raise PrincipalStoreError('Email already in use.') from exc
        finally:
            db.close()

    def authenticate(self, email: str, password: str) -> str:
        db: Session = self._session_factory()
        try:
            principal = db.query(PrincipalRecord).filter(PrincipalRecord.email == email).first()
        finally:
            db.close()

        if principal is None or not pwd_context.verify(password, principal.hashed_password):
            raise PrincipalStoreError('Invalid email or password.')
        return principal.id

    def begin_session(self, principal_id: str) -> None:
        logger.info('Session started for principal %s', principal_id)
        self._notify(principal_id)

    def end_session(self, principal_id: str | None = None) -> None:
        if principal_id:
            logger.info('Session ended for principal %s', principal_id)
        self._notify(None)

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, principal_id: str | None) -> None:
        for listener in list(self._listeners):
            listener(principal_id)

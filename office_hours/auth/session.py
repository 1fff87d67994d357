"""Restore the signed-in principal from a bearer token."""

import logging
from dataclasses import dataclass

import jwt

from office_hours.auth import jwt_handler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    id: str
    email: str


def restore_principal(token: str | None) -> Principal | None:
    if not token:
        return None
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        logger.info('Rejected session token: %s', exc)
        return None

    principal_id = payload.get("sub")
    if not principal_id:
        return None
    return Principal(id=principal_id, email=payload.get("email", ""))


def log_session_change(principal_id: str | None) -> None:
    if principal_id:
        logger.info('Principal %s signed in', principal_id)
    else:
        logger.info('A principal signed out')

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from office_hours.auth.session import log_session_change, restore_principal
from office_hours.database import SessionLocal
from office_hours.models.user import User
from office_hours.services.portal import PortalService
from office_hours.stores.principal_store import SqlPrincipalStore
from office_hours.stores.record_store import SqlRecordStore

security = HTTPBearer()

principal_store = SqlPrincipalStore(SessionLocal)
record_store = SqlRecordStore(SessionLocal)
principal_store.on_session_change(log_session_change)


def get_portal_service() -> PortalService:
    return PortalService(principal_store, record_store)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    service: PortalService = Depends(get_portal_service),
) -> User:
    principal = restore_principal(credentials.credentials)
    if principal is None:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = service.load_user(principal.id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user

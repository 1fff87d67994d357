"""Typed failures raised by the portal service.

Every error carries a machine-readable ``kind`` and a human-readable
``message`` so the HTTP layer can hand both to the client unchanged.
"""


class PortalError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(PortalError):
    """Missing or malformed input; the caller can correct it and retry."""

    kind = "validation_error"
    status_code = 422


class AuthenticationError(PortalError):
    """Credentials rejected by the principal store."""

    kind = "authentication_error"
    status_code = 401


class AuthorizationError(PortalError):
    """Authenticated, but not allowed to perform the requested mutation."""

    kind = "authorization_error"
    status_code = 403


class PendingApprovalError(PortalError):
    """Valid credentials for a student account an admin has not approved yet."""

    kind = "pending_approval"
    status_code = 403


class NotFoundError(PortalError):
    kind = "not_found"
    status_code = 404


class PartialFailureError(PortalError):
    """A two-step write finished its first step and failed its second.

    ``completed`` and ``failed`` name the sub-operations so an operator can
    reconcile the records by hand.
    """

    kind = "partial_failure"
    status_code = 500

    def __init__(self, message: str, completed: list[str], failed: list[str]):
        super().__init__(message)
        self.completed = completed
        self.failed = failed

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail.update({"completed": self.completed, "failed": self.failed})
        return detail


class PrincipalStoreError(Exception):
    """Raised by the principal store when it rejects an email/password pair."""

"""Domain errors raised by the service layer.

Each error carries the HTTP status the API answers with, so route handlers
never translate exceptions by hand; ``api/app.py`` registers one handler for
the whole hierarchy.
"""

from __future__ import annotations


class PortalError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict[str, str]:
        body = {"message": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationFailed(PortalError):
    status_code = 400


class AuthenticationError(PortalError):
    status_code = 401


class ForbiddenError(PortalError):
    status_code = 403


class NotFoundError(PortalError):
    status_code = 404


class ConflictError(PortalError):
    status_code = 409


class PayloadTooLarge(PortalError):
    status_code = 413

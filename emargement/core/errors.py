"""Error taxonomy shared by the auth layer, the services and the HTTP handlers."""

from enum import Enum

from fastapi import status


class ServiceError(Exception):
    """Base class for failures that map onto an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthErrorReason(str, Enum):
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


class AuthError(ServiceError):
    """Missing, unreadable or wrongly-signed credential, or a role mismatch."""

    def __init__(self, reason: AuthErrorReason, message: str | None = None):
        self.reason = reason
        super().__init__(message or reason.value)

    @property
    def status_code(self) -> int:
        if self.reason is AuthErrorReason.FORBIDDEN:
            return status.HTTP_403_FORBIDDEN
        return status.HTTP_401_UNAUTHORIZED


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT

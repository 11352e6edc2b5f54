"""
Domain error taxonomy.

Services raise these instead of ``HTTPException`` so that the HTTP status is
decided in exactly one place: the exception handler registered in ``main.py``.
"""
import enum
from typing import Optional

from fastapi import status


class ErrorKind(str, enum.Enum):
    validation = "validation"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    not_found = "not_found"
    conflict = "conflict"
    internal = "internal"


STATUS_BY_KIND = {
    ErrorKind.validation: status.HTTP_400_BAD_REQUEST,
    ErrorKind.unauthorized: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.forbidden: status.HTTP_403_FORBIDDEN,
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.conflict: status.HTTP_409_CONFLICT,
    ErrorKind.internal: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Base class for every error a service may surface to a client."""

    kind = ErrorKind.internal
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(AppError):
    kind = ErrorKind.validation
    default_message = "Invalid request"


class Unauthorized(AppError):
    kind = ErrorKind.unauthorized
    default_message = "Unauthorized"


class TokenExpiredError(Unauthorized):
    default_message = "Token expired"


class InvalidTokenError(Unauthorized):
    default_message = "Invalid token"


class Forbidden(AppError):
    kind = ErrorKind.forbidden
    default_message = "Access denied"


class NotFound(AppError):
    kind = ErrorKind.not_found
    default_message = "Resource not found"


class Conflict(AppError):
    kind = ErrorKind.conflict
    default_message = "Resource already exists"


ERROR_BY_KIND = {
    ErrorKind.validation: ValidationError,
    ErrorKind.unauthorized: Unauthorized,
    ErrorKind.forbidden: Forbidden,
    ErrorKind.not_found: NotFound,
    ErrorKind.conflict: Conflict,
    ErrorKind.internal: AppError,
}


def error_for(kind: ErrorKind, message: Optional[str] = None) -> AppError:
    """Build the exception matching ``kind``."""
    return ERROR_BY_KIND[kind](message)

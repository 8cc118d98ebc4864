"""Error taxonomy shared by the access layer, services and API.

Every failure the application reports to a caller is one of the kinds in
:class:`ErrorKind`. Each kind has exactly one exception class and one HTTP
status code, so handlers can match on the kind exhaustively.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of error kinds."""

    UNAUTHENTICATED = "unauthenticated"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    UNEXPECTED = "unexpected"


def status_for(kind: ErrorKind) -> int:
    """Map an error kind to its HTTP status code."""
    match kind:
        case ErrorKind.UNAUTHENTICATED:
            return 401
        case ErrorKind.INVALID_INPUT:
            return 400
        case ErrorKind.NOT_FOUND:
            return 404
        case ErrorKind.FORBIDDEN:
            return 403
        case ErrorKind.CONFLICT:
            return 409
        case ErrorKind.UNEXPECTED:
            return 500


class AppError(Exception):
    """Base application error."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    default_message: str = "An unexpected error occurred. Please try again later."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return status_for(self.kind)


class UnauthenticatedError(AppError):
    """Authentication required."""

    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Authentication required."


class InvalidInputError(AppError):
    """Request input could not be interpreted."""

    kind = ErrorKind.INVALID_INPUT
    default_message = "Invalid input."


class NotFoundError(AppError):
    """Resource not found."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found."


class ForbiddenError(AppError):
    """Access denied."""

    kind = ErrorKind.FORBIDDEN
    default_message = "You do not have permission to perform this action."


class ConflictError(AppError):
    """Resource conflict (unique constraint)."""

    kind = ErrorKind.CONFLICT
    default_message = "Resource already exists."


class UnexpectedError(AppError):
    """Storage or transport failure."""

    kind = ErrorKind.UNEXPECTED


__all__ = [
    "AppError",
    "ConflictError",
    "ErrorKind",
    "ForbiddenError",
    "InvalidInputError",
    "NotFoundError",
    "UnauthenticatedError",
    "UnexpectedError",
    "status_for",
]

"""Error codes and exceptions shared by services and HTTP handlers."""

from enum import Enum

INSUFFICIENT_DATA_MESSAGE = "Insufficient data for the selected period."
NO_ORGANIZER_EVENTS_MESSAGE = "No events found for this organizer."


class ErrorCode(Enum):
    """Application error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE = "INVALID_DATE"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    RENDER_FAILED = "RENDER_FAILED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class AppError(Exception):
    """Base application error with code, user-safe message and HTTP status."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(AppError):
    """Raised for malformed query parameters or request bodies."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400


class InvalidDateError(ValidationError):
    """Raised when a date string cannot be parsed."""

    code = ErrorCode.INVALID_DATE

    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid date: {value!r}")
        self.value = value


class AuthenticationError(AppError):
    """Raised when no principal is attached to the request."""

    code = ErrorCode.AUTHENTICATION_REQUIRED
    status_code = 401


class AuthorizationError(AppError):
    """Raised when the principal's role or ownership does not allow access."""

    code = ErrorCode.FORBIDDEN
    status_code = 403


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    code = ErrorCode.NOT_FOUND
    status_code = 404


class ConflictError(AppError):
    """Raised when a record would duplicate an existing one."""

    code = ErrorCode.CONFLICT
    status_code = 400


class InsufficientDataError(AppError):
    """
    Signals an empty result set.

    Not a failure: handlers answer 200 with a ``message`` field.
    """

    code = ErrorCode.INSUFFICIENT_DATA
    status_code = 200

    def __init__(self, message: str = INSUFFICIENT_DATA_MESSAGE) -> None:
        super().__init__(message)


class RenderError(AppError):
    """Raised when PDF generation fails."""

    code = ErrorCode.RENDER_FAILED
    status_code = 500


class StoreUnavailableError(AppError):
    """Raised when the data store keeps failing after retries."""

    code = ErrorCode.STORE_UNAVAILABLE
    status_code = 503

    def __init__(self, message: str = "Data store is temporarily unavailable") -> None:
        super().__init__(message)

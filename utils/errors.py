"""
Error kinds for the task tracker API.

Every failure that can reach a handler boundary is one of these classes.
The handler decorator maps them to HTTP status codes, so services only
need to raise the right kind.
"""

from .responses import HTTPStatus


class TaskTrackerError(Exception):
    """Base class for all classified task tracker errors."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestValidationError(TaskTrackerError):
    """Missing or malformed required input."""

    status_code = HTTPStatus.BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class InvalidDataError(TaskTrackerError):
    """Malformed bulk import payload."""

    status_code = HTTPStatus.BAD_REQUEST
    error_code = "INVALID_DATA"


class InvalidCredentialsError(TaskTrackerError):
    """Unknown email or wrong password."""

    status_code = HTTPStatus.UNAUTHORIZED
    error_code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InvalidTokenError(TaskTrackerError):
    """Signed token failed signature or expiry checks."""

    status_code = HTTPStatus.UNAUTHORIZED
    error_code = "INVALID_TOKEN"

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class NotVerifiedError(TaskTrackerError):
    """User exists but has not verified their email yet."""

    status_code = HTTPStatus.FORBIDDEN
    error_code = "EMAIL_NOT_VERIFIED"

    def __init__(self, message: str = "Email address has not been verified"):
        super().__init__(message)


class NotFoundError(TaskTrackerError):
    status_code = HTTPStatus.NOT_FOUND
    error_code = "RESOURCE_NOT_FOUND"


class ConflictError(TaskTrackerError):
    """Business rule violation, e.g. registering an already verified email."""

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY
    error_code = "CONFLICT"


class StorageError(TaskTrackerError):
    """DynamoDB transport or engine failure."""

    error_code = "STORAGE_FAILURE"


class EmailTransportError(TaskTrackerError):
    """Email delivery failed."""

    error_code = "EMAIL_TRANSPORT_FAILURE"

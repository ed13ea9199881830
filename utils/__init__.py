"""
Utils package for shared utilities and cross-cutting concerns.

This package contains decorators, error kinds, logging utilities,
response formatters, and password hashing used across the application.
"""

from .decorators import (extract_path_params, lambda_handler, read_raw_body,
                         require_auth, validate_json_body)
from .errors import (ConflictError, EmailTransportError, InvalidCredentialsError,
                     InvalidDataError, InvalidTokenError, NotFoundError,
                     NotVerifiedError, RequestValidationError, StorageError,
                     TaskTrackerError)
from .logging import (log_error, log_lambda_event, log_lambda_response,
                      setup_logger)
from .responses import (HTTPStatus, create_response, error_response,
                        exception_response, graphql_response,
                        not_found_response, success_response,
                        unauthorized_response, validation_error_response)
from .security import PasswordHasher

__all__ = [
    # Decorators
    "lambda_handler",
    "require_auth",
    "validate_json_body",
    "extract_path_params",
    "read_raw_body",
    # Errors
    "TaskTrackerError",
    "RequestValidationError",
    "InvalidDataError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "NotVerifiedError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
    "EmailTransportError",
    # Logging
    "setup_logger",
    "log_lambda_event",
    "log_lambda_response",
    "log_error",
    # Responses
    "HTTPStatus",
    "create_response",
    "success_response",
    "error_response",
    "validation_error_response",
    "not_found_response",
    "unauthorized_response",
    "exception_response",
    "graphql_response",
    # Security
    "PasswordHasher",
]

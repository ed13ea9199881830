"""
Decorators for the task tracker Lambda handlers.

``lambda_handler`` is the outermost layer of every route: it logs the
invocation and turns whatever the handler raised into a classified
response. The other decorators unpack one piece of the proxy event
(authorizer context, JSON body, path parameters) into ``event`` before
the handler runs.
"""

import base64
import json
import time
from functools import wraps
from typing import Any, Callable, Dict, Iterable, Optional

from pydantic import ValidationError

from .errors import TaskTrackerError
from .logging import log_error, log_lambda_event, log_lambda_response, setup_logger
from .responses import (HTTPStatus, error_response, exception_response,
                        unauthorized_response, validation_error_response)

Handler = Callable[[Dict[str, Any], Any], Dict[str, Any]]


def _error_to_response(logger, error: Exception, event, context, started: float):
    if isinstance(error, TaskTrackerError):
        if error.status_code == HTTPStatus.INTERNAL_SERVER_ERROR:
            log_error(logger, error, {"error_code": error.error_code})
        else:
            logger.info(
                "Request rejected",
                extra={"error_code": error.error_code, "error_message": error.message},
            )
        return exception_response(error)

    if isinstance(error, ValidationError):
        return validation_error_response(
            "Request validation failed",
            {"validation_errors": error.errors(include_url=False, include_context=False)},
        )

    log_error(
        logger,
        error,
        {
            "function_name": getattr(context, "function_name", "unknown"),
            "request_id": getattr(context, "aws_request_id", "unknown"),
            "execution_time_ms": (time.time() - started) * 1000,
            "event_path": event.get("path") or event.get("rawPath"),
            "event_method": event.get("httpMethod"),
        },
    )
    # Unclassified failures never leak their message to the caller
    return error_response("Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR)


def lambda_handler(
    logger_name: Optional[str] = None,
    log_event: bool = True,
    log_response: bool = True,
    structured_logging: bool = True,
) -> Callable[[Handler], Handler]:
    """
    Wrap a route function with logging, timing and error classification.

    ``TaskTrackerError`` subclasses become responses with their own status
    and error code, pydantic ``ValidationError`` becomes a 400, and
    anything else a generic 500.

    Args:
        logger_name: Logger name (defaults to the handler's module)
        log_event: Log the incoming request (headers redacted, no body)
        log_response: Log status, size and execution time
        structured_logging: Emit JSON log lines
    """

    def decorator(func: Handler) -> Handler:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            logger = setup_logger(logger_name or func.__module__, structured=structured_logging)
            started = time.time()

            if log_event:
                log_lambda_event(logger, event, context)

            try:
                response = func(event, context)
            except Exception as e:
                response = _error_to_response(logger, e, event, context, started)
            else:
                if not isinstance(response, dict) or "statusCode" not in response:
                    logger.warning("Handler returned invalid response format")
                    response = error_response(
                        "Internal server error", HTTPStatus.INTERNAL_SERVER_ERROR
                    )

            if log_response:
                log_lambda_response(logger, response, (time.time() - started) * 1000)

            return response

        return wrapper

    return decorator


def require_auth(func: Handler) -> Handler:
    """
    Reject requests that reached the handler without an authorizer principal.

    The token authorizer puts ``{"email": ...}`` into the request context;
    it is exposed to the handler as ``event["auth"]``.
    """

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        request_context = event.get("requestContext") or {}
        authorizer_context = request_context.get("authorizer") or {}

        # REST API puts the context at the top level, HTTP API under "lambda"
        principal = authorizer_context.get("lambda", authorizer_context)

        if not principal or not principal.get("email"):
            setup_logger(__name__).info(
                "Authorization failed - no principal context found",
                extra={"authorizer_keys": sorted(authorizer_context)},
            )
            return unauthorized_response()

        event["auth"] = {"email": principal["email"]}
        return func(event, context)

    return wrapper


def read_raw_body(event: Dict[str, Any]) -> Any:
    """Return the request body, decoding base64 payloads from API Gateway."""
    body = event.get("body")
    if isinstance(body, str) and event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body


def validate_json_body(required_fields: Optional[Iterable[str]] = None) -> Callable[[Handler], Handler]:
    """
    Parse the body as a JSON object into ``event["json_body"]``.

    Bodies that upstream middleware already decoded into a dict are
    accepted as they are. Fields in ``required_fields`` must be present
    and not null.
    """
    required = list(required_fields or [])

    def decorator(func: Handler) -> Handler:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            body = read_raw_body(event) or "{}"

            if isinstance(body, str):
                try:
                    body = json.loads(body)
                except json.JSONDecodeError as e:
                    return validation_error_response(
                        "Invalid JSON in request body", {"json_error": str(e)}
                    )

            if not isinstance(body, dict):
                return validation_error_response("Request body must be a JSON object")

            missing = [name for name in required if body.get(name) is None]
            if missing:
                return validation_error_response(
                    f"Missing required fields: {', '.join(missing)}",
                    {"missing_fields": missing},
                )

            event["json_body"] = body
            return func(event, context)

        return wrapper

    return decorator


def extract_path_params(*param_names: str) -> Callable[[Handler], Handler]:
    """Copy the named, non-empty path parameters into ``event["path_params"]``."""

    def decorator(func: Handler) -> Handler:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
            path_params = event.get("pathParameters") or {}

            missing = [name for name in param_names if not path_params.get(name)]
            if missing:
                return validation_error_response(
                    f"Missing path parameters: {', '.join(missing)}",
                    {"missing_parameters": missing},
                )

            event["path_params"] = {name: path_params[name] for name in param_names}
            return func(event, context)

        return wrapper

    return decorator

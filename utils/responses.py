"""
API Gateway proxy responses for the task tracker.

Every body is JSON with a ``success`` flag. Successful payloads are merged
into the top level of the body; failures carry ``error`` and
``error_code``.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class HTTPStatus(Enum):
    """Status codes the API responds with."""

    OK = 200
    CREATED = 201
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500


JSON_CONTENT_TYPE = {"Content-Type": "application/json"}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}


class APIJSONEncoder(json.JSONEncoder):
    """Serializes DynamoDB numbers, timestamps and pydantic models."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            # DynamoDB hands back every number as Decimal
            return int(obj) if obj == obj.to_integral_value() else float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if hasattr(obj, "model_dump"):
            return obj.model_dump(by_alias=True)
        return super().default(obj)


def create_response(
    status_code: Union[int, HTTPStatus],
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    cors_enabled: bool = True,
) -> Dict[str, Any]:
    """
    Build a proxy integration response.

    Args:
        status_code: HTTP status, as an int or HTTPStatus member
        body: JSON-serializable body, omitted when None
        headers: Extra headers layered over the defaults
        cors_enabled: Add the CORS headers

    Returns:
        Dict with ``statusCode``, ``headers`` and optionally ``body``
    """
    response_headers = dict(JSON_CONTENT_TYPE)
    if cors_enabled:
        response_headers.update(CORS_HEADERS)
    response_headers.update(headers or {})

    response = {
        "statusCode": status_code.value if isinstance(status_code, HTTPStatus) else status_code,
        "headers": response_headers,
    }
    if body is not None:
        response["body"] = json.dumps(body, cls=APIJSONEncoder)
    return response


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: Union[int, HTTPStatus] = HTTPStatus.OK,
) -> Dict[str, Any]:
    """Dict payloads are merged into the body; anything else lands under "data"."""
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message

    if isinstance(data, dict):
        body.update(data)
    elif data is not None:
        body["data"] = data

    return create_response(status_code, body)


def error_response(
    message: str,
    status_code: Union[int, HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": message}
    if error_code:
        body["error_code"] = error_code
    if details:
        body["details"] = details
    return create_response(status_code, body)


def exception_response(error) -> Dict[str, Any]:
    """Response for a classified TaskTrackerError."""
    return error_response(error.message, error.status_code, error.error_code)


def validation_error_response(
    message: str = "Validation failed", errors: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    return error_response(message, HTTPStatus.BAD_REQUEST, "VALIDATION_ERROR", errors)


def not_found_response(resource: str, identifier: Optional[str] = None) -> Dict[str, Any]:
    """404 naming the missing resource, e.g. ``Task 'abc' not found``."""
    message = f"{resource} '{identifier}' not found" if identifier else f"{resource} not found"
    return error_response(message, HTTPStatus.NOT_FOUND, "RESOURCE_NOT_FOUND")


def unauthorized_response(message: str = "Unauthorized access") -> Dict[str, Any]:
    return error_response(message, HTTPStatus.UNAUTHORIZED, "UNAUTHORIZED")


def graphql_response(
    data: Optional[Dict[str, Any]],
    errors: Optional[List[Dict[str, Any]]] = None,
    status_code: Union[int, HTTPStatus] = HTTPStatus.OK,
) -> Dict[str, Any]:
    """GraphQL result envelope; ``errors`` is only present when non-empty."""
    body: Dict[str, Any] = {"success": not errors, "data": data}
    if errors:
        body["errors"] = errors
    return create_response(status_code, body)

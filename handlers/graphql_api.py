"""
GraphQL endpoint for the task tracker API.

Accepts either a JSON body ``{"query", "variables", "operationName"}`` or
a raw GraphQL document as the body, and runs it for the authenticated
user.
"""

import json

from services.graphql_schema import execute_query
from services.providers import get_task_repository
from utils.decorators import lambda_handler, read_raw_body, require_auth
from utils.errors import RequestValidationError, TaskTrackerError
from utils.responses import HTTPStatus, graphql_response


def _parse_request(event):
    body = read_raw_body(event)
    if isinstance(body, dict):
        payload = body
    elif isinstance(body, str) and body.strip():
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            payload = {"query": body}
    else:
        payload = {}

    if not isinstance(payload, dict) or not payload.get("query"):
        raise RequestValidationError("A GraphQL query is required")

    variables = payload.get("variables")
    if variables is not None and not isinstance(variables, dict):
        raise RequestValidationError("'variables' must be an object")

    return payload["query"], variables, payload.get("operationName")


def _status_for(errors) -> HTTPStatus:
    """Use the first classified resolver error's status, otherwise 400."""
    for error in errors:
        original = error.original_error
        if isinstance(original, TaskTrackerError):
            return original.status_code
    return HTTPStatus.BAD_REQUEST


@lambda_handler()
@require_auth
def graphql(event, context):
    """
    Execute a GraphQL query or mutation.

    POST /graphql
    """
    query, variables, operation_name = _parse_request(event)

    result = execute_query(
        query,
        owner=event["auth"]["email"],
        repository=get_task_repository(),
        variables=variables,
        operation_name=operation_name,
    )

    if result.errors:
        return graphql_response(
            result.data,
            [error.formatted for error in result.errors],
            _status_for(result.errors),
        )

    return graphql_response(result.data)

"""
Task handlers for the task tracker API.

CRUD, search, bulk import and reporting over the authenticated user's
tasks. The owner always comes from the authorizer context, never from
the request, so users can only see and change their own tasks.
"""

from models.task import TaskCreate, TaskUpdate
from services.providers import get_task_repository
from utils.decorators import (extract_path_params, lambda_handler,
                              read_raw_body, require_auth, validate_json_body)
from utils.errors import InvalidDataError, RequestValidationError
from utils.responses import HTTPStatus, not_found_response, success_response

REPORT_RESOURCES = {("tasks", "isChecked")}
TEXT_CONTENT_TYPES = ("text/plain",)


def _parse_bool(value, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise RequestValidationError(f"'{name}' must be 'true' or 'false'")


def _content_type(event) -> str:
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == "content-type" and value:
            return value.split(";")[0].strip().lower()
    return ""


@lambda_handler()
@require_auth
@validate_json_body(required_fields=["note"])
def create_task(event, context):
    """
    Create a task for the authenticated user.

    POST /tasks
    """
    request = TaskCreate(**event["json_body"])

    task = get_task_repository().create(event["auth"]["email"], request.note)

    return success_response(
        data={"task": task.to_api_dict()},
        message="Task created",
        status_code=HTTPStatus.CREATED,
    )


@lambda_handler()
@require_auth
def list_tasks(event, context):
    """
    List every task of the authenticated user.

    GET /tasks
    """
    tasks = get_task_repository().list_all(event["auth"]["email"])

    return success_response(
        data={"tasks": [task.to_api_dict() for task in tasks], "count": len(tasks)}
    )


@lambda_handler()
@require_auth
@extract_path_params("id")
def get_task(event, context):
    """
    Get one task by id.

    GET /tasks/{id}
    """
    task_id = event["path_params"]["id"]

    task = get_task_repository().get_by_id(event["auth"]["email"], task_id)
    if not task:
        return not_found_response("Task", task_id)

    return success_response(data={"task": task.to_api_dict()})


@lambda_handler()
@require_auth
@validate_json_body()
@extract_path_params("id")
def update_task(event, context):
    """
    Update the note and/or checked state of a task.

    PUT /tasks/{id}

    Responds 404 when the task does not exist; it is never created.
    """
    task_id = event["path_params"]["id"]
    changes = TaskUpdate(**event["json_body"])

    task = get_task_repository().update(event["auth"]["email"], task_id, changes)

    return success_response(data={"task": task.to_api_dict()}, message="Task updated")


@lambda_handler()
@require_auth
@extract_path_params("id")
def delete_task(event, context):
    """
    Delete a task.

    DELETE /tasks/{id}

    Deleting a task that does not exist still succeeds.
    """
    task_id = event["path_params"]["id"]

    get_task_repository().delete(event["auth"]["email"], task_id)

    return success_response(data={"taskId": task_id}, message="Task deleted")


@lambda_handler()
@require_auth
def search_tasks(event, context):
    """
    Search tasks by checked state and note text.

    GET /tasks/search?isChecked=true&note=milk

    ``isChecked`` is required; ``note`` is a case-sensitive substring and
    defaults to matching everything.
    """
    params = event.get("queryStringParameters") or {}
    if params.get("isChecked") is None:
        raise RequestValidationError("Query parameter 'isChecked' is required")

    checked = _parse_bool(params["isChecked"], "isChecked")
    tasks = get_task_repository().search_by_note(
        event["auth"]["email"], checked, params.get("note") or ""
    )

    return success_response(
        data={"tasks": [task.to_api_dict() for task in tasks], "count": len(tasks)}
    )


@lambda_handler()
@require_auth
def import_tasks(event, context):
    """
    Import tasks from a plain text body, one note per CRLF separated line.

    POST /tasks/import (Content-Type: text/plain)
    """
    content_type = _content_type(event)
    if content_type and content_type not in TEXT_CONTENT_TYPES:
        raise InvalidDataError(f"Unsupported content type '{content_type}', expected text/plain")

    created = get_task_repository().bulk_import(event["auth"]["email"], read_raw_body(event))

    return success_response(
        data={"imported": created},
        message=f"Imported {created} tasks",
        status_code=HTTPStatus.CREATED,
    )


@lambda_handler()
@require_auth
@extract_path_params("resource", "field")
def get_report(event, context):
    """
    Aggregate counts for the authenticated user.

    GET /report/tasks/isChecked
    """
    resource = event["path_params"]["resource"]
    field = event["path_params"]["field"]
    if (resource, field) not in REPORT_RESOURCES:
        raise RequestValidationError(f"No report available for '{resource}/{field}'")

    report = get_task_repository().report(event["auth"]["email"])

    return success_response(data=report.model_dump(by_alias=True))

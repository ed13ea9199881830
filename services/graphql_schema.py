"""
GraphQL schema over the task repository.

Queries ``task`` / ``tasks`` and mutations ``createTask`` / ``updateTask``
/ ``deleteTask``. Resolvers read the authenticated owner and the
repository from the execution context, so every operation is scoped to
the caller exactly like the REST handlers.
"""

from typing import Any, Dict, Optional

from graphql import (ExecutionResult, GraphQLArgument, GraphQLBoolean,
                     GraphQLField, GraphQLList, GraphQLNonNull,
                     GraphQLObjectType, GraphQLSchema, GraphQLString,
                     graphql_sync)

from models.task import TaskCreate, TaskUpdate
from services.tasks import TaskRepository

TaskType = GraphQLObjectType(
    name="Task",
    fields=lambda: {
        "taskId": GraphQLField(GraphQLString),
        "userId": GraphQLField(GraphQLString, description="Owner email"),
        "note": GraphQLField(GraphQLString),
        "isChecked": GraphQLField(GraphQLBoolean),
        "createdAt": GraphQLField(GraphQLString),
        "updatedAt": GraphQLField(GraphQLString),
    },
)


def _task_payload(task) -> Optional[Dict[str, Any]]:
    if task is None:
        return None
    return {
        "taskId": task.task_id,
        "userId": task.owner,
        "note": task.note,
        "isChecked": task.is_checked,
        "createdAt": task.created_at.isoformat() if task.created_at else None,
        "updatedAt": task.updated_at.isoformat() if task.updated_at else None,
    }


def _scope(info):
    return info.context["owner"], info.context["repository"]


def resolve_task(_root, info, taskId):
    owner, repository = _scope(info)
    return _task_payload(repository.get_by_id(owner, taskId))


def resolve_tasks(_root, info):
    owner, repository = _scope(info)
    return [_task_payload(task) for task in repository.list_all(owner)]


def resolve_create_task(_root, info, note):
    owner, repository = _scope(info)
    request = TaskCreate(note=note)
    return _task_payload(repository.create(owner, request.note))


def resolve_update_task(_root, info, taskId, note, isChecked):
    owner, repository = _scope(info)
    changes = TaskUpdate(note=note, is_checked=isChecked)
    return _task_payload(repository.update(owner, taskId, changes))


def resolve_delete_task(_root, info, taskId):
    owner, repository = _scope(info)
    repository.delete(owner, taskId)
    return True


RootQueryType = GraphQLObjectType(
    name="Query",
    description="Root Query",
    fields=lambda: {
        "task": GraphQLField(
            TaskType,
            description="A Single Task",
            args={"taskId": GraphQLArgument(GraphQLNonNull(GraphQLString))},
            resolve=resolve_task,
        ),
        "tasks": GraphQLField(
            GraphQLList(TaskType),
            description="List of all Tasks",
            resolve=resolve_tasks,
        ),
    },
)

RootMutationType = GraphQLObjectType(
    name="Mutation",
    description="Root Mutation",
    fields=lambda: {
        "createTask": GraphQLField(
            TaskType,
            description="Add a new task",
            args={"note": GraphQLArgument(GraphQLNonNull(GraphQLString))},
            resolve=resolve_create_task,
        ),
        "updateTask": GraphQLField(
            TaskType,
            description="Update a task",
            args={
                "taskId": GraphQLArgument(GraphQLNonNull(GraphQLString)),
                "note": GraphQLArgument(GraphQLNonNull(GraphQLString)),
                "isChecked": GraphQLArgument(GraphQLNonNull(GraphQLBoolean)),
            },
            resolve=resolve_update_task,
        ),
        "deleteTask": GraphQLField(
            GraphQLBoolean,
            description="Delete a task",
            args={"taskId": GraphQLArgument(GraphQLNonNull(GraphQLString))},
            resolve=resolve_delete_task,
        ),
    },
)

schema = GraphQLSchema(query=RootQueryType, mutation=RootMutationType)


def execute_query(
    source: str,
    owner: str,
    repository: TaskRepository,
    variables: Optional[Dict[str, Any]] = None,
    operation_name: Optional[str] = None,
) -> ExecutionResult:
    """Run a GraphQL document on behalf of ``owner``."""
    return graphql_sync(
        schema,
        source,
        context_value={"owner": owner, "repository": repository},
        variable_values=variables,
        operation_name=operation_name,
    )

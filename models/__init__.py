"""
Models package for data structures and database entities.

This package contains Pydantic models for validation, the DynamoDB item
representations, and the key builders of the single-table layout.
"""

from .dynamodb import DynamoDBItem, TaskItem, UserItem
from .keys import (TASKS_PARTITION, USERS_PARTITION, queryable_index,
                   task_key, user_key)
from .task import Task, TaskCreate, TaskReport, TaskUpdate
from .users import LoginRequest, RegisterRequest, User, create_user

__all__ = [
    "DynamoDBItem",
    "TaskItem",
    "UserItem",
    "TASKS_PARTITION",
    "USERS_PARTITION",
    "task_key",
    "user_key",
    "queryable_index",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskReport",
    "User",
    "create_user",
    "RegisterRequest",
    "LoginRequest",
]

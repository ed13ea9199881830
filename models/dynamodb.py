"""DynamoDB item models for the task tracker table."""

from pydantic import BaseModel

from models.keys import TASKS_PARTITION, USERS_PARTITION


class DynamoDBItem(BaseModel):
    """Base class for all DynamoDB items."""

    pk: str
    sk: str


class UserItem(DynamoDBItem):
    """Represents a user item in DynamoDB."""

    pk: str = USERS_PARTITION
    sk: str  # user_info::{email}
    email: str
    name: str
    password_hash: str
    is_verified: bool = False
    session_id: str | None = None  # Active session, None when logged out
    created_at: str
    updated_at: str


class TaskItem(DynamoDBItem):
    """Represents a task item in DynamoDB."""

    pk: str = TASKS_PARTITION
    sk: str  # task_info::{owner}::{task_id}
    task_id: str
    owner: str
    note: str
    is_checked: bool = False
    queryable: str  # {owner}::{is_checked}, range key of the queryable index
    created_at: str
    updated_at: str

"""Task model objects for the task tracker."""

import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from models.dynamodb import TaskItem
from models.keys import TASKS_PARTITION, queryable_index, task_key


def generate_task_id() -> str:
    """Short url-safe random identifier (72 bits of entropy)."""
    return secrets.token_urlsafe(9)


class Task(BaseModel):
    """A single to-do item owned by one user."""

    task_id: str = Field(default_factory=generate_task_id)
    owner: str
    note: str
    is_checked: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def queryable(self) -> str:
        return queryable_index(self.owner, self.is_checked)

    def to_dynamodb_item(self) -> TaskItem:
        """Convert to DynamoDB item format."""
        now = datetime.now(timezone.utc).isoformat()
        created = self.created_at.isoformat() if self.created_at else now
        updated = self.updated_at.isoformat() if self.updated_at else now

        return TaskItem(
            pk=TASKS_PARTITION,
            sk=task_key(self.owner, self.task_id),
            task_id=self.task_id,
            owner=self.owner,
            note=self.note,
            is_checked=self.is_checked,
            queryable=self.queryable,
            created_at=created,
            updated_at=updated,
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "Task":
        """Create a Task from a DynamoDB item."""
        return cls(
            task_id=item["task_id"],
            owner=item["owner"],
            note=item.get("note", ""),
            is_checked=bool(item.get("is_checked", False)),
            created_at=(
                datetime.fromisoformat(item["created_at"])
                if item.get("created_at")
                else None
            ),
            updated_at=(
                datetime.fromisoformat(item["updated_at"])
                if item.get("updated_at")
                else None
            ),
        )

    def to_api_dict(self) -> Dict[str, Any]:
        """Task representation returned by the REST and GraphQL layers."""
        return {
            "taskId": self.task_id,
            "owner": self.owner,
            "note": self.note,
            "isChecked": self.is_checked,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class TaskCreate(BaseModel):
    """Body of POST /tasks."""

    note: StrictStr = Field(..., min_length=1, description="Task's note")


class TaskUpdate(BaseModel):
    """
    Partial update of a task.

    Only ``note`` and ``isChecked`` may change; unknown fields are rejected.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    note: Optional[StrictStr] = Field(None, min_length=1)
    is_checked: Optional[StrictBool] = Field(None, alias="isChecked")

    def changed_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TaskReport(BaseModel):
    """Checked / unchecked totals for one owner."""

    model_config = ConfigDict(populate_by_name=True)

    total_checked: int = Field(..., alias="totalCheckedTasks")
    total_unchecked: int = Field(..., alias="totalUncheckedTasks")

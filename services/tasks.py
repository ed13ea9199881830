"""
Task repository.

CRUD, search, reporting and bulk import over tasks, always scoped to one
owner. Filtered reads go through the ``queryable`` secondary index
(``owner::checked``) and apply the note filter afterwards, since
DynamoDB cannot do substring matching in a key condition.
"""

from datetime import datetime, timezone
from typing import List, Optional

from models.keys import TASKS_PARTITION, queryable_index, task_key
from models.task import Task, TaskReport, TaskUpdate
from services.dynamodb import TaskTrackerTable
from utils.errors import InvalidDataError, NotFoundError, RequestValidationError
from utils.logging import setup_logger

logger = setup_logger(__name__)

LINE_SEPARATOR = "\r\n"


class TaskRepository:
    def __init__(self, table: TaskTrackerTable):
        self.table = table

    def create(self, owner: str, note: str) -> Task:
        """Create an unchecked task and return it with its generated id."""
        now = datetime.now(timezone.utc)
        task = Task(owner=owner, note=note, created_at=now, updated_at=now)

        item = task.to_dynamodb_item()
        self.table.put(item.pk, item.sk, item.model_dump())
        return task

    def list_all(self, owner: str) -> List[Task]:
        """Every task of ``owner`` in sort key order."""
        items = self.table.query_by_prefix(TASKS_PARTITION, task_key(owner))
        return [Task.from_dynamodb_item(item) for item in items]

    def get_by_id(self, owner: str, task_id: str) -> Optional[Task]:
        item = self.table.get(TASKS_PARTITION, task_key(owner, task_id))
        if not item:
            return None
        return Task.from_dynamodb_item(item)

    def update(self, owner: str, task_id: str, changes: TaskUpdate) -> Task:
        """
        Apply a partial update to an existing task.

        Changing ``is_checked`` rewrites the ``queryable`` index value in the
        same write.

        Raises:
            RequestValidationError: No updatable field given
            NotFoundError: The task does not exist for this owner
        """
        fields = changes.changed_fields()
        if not fields:
            raise RequestValidationError("Provide 'note' and/or 'isChecked' to update")

        if "is_checked" in fields:
            fields["queryable"] = queryable_index(owner, fields["is_checked"])
        fields["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            item = self.table.patch(TASKS_PARTITION, task_key(owner, task_id), fields)
        except NotFoundError as e:
            raise NotFoundError(f"Task '{task_id}' not found") from e

        return Task.from_dynamodb_item(item)

    def delete(self, owner: str, task_id: str) -> None:
        """Delete a task; missing tasks are ignored."""
        self.table.delete(TASKS_PARTITION, task_key(owner, task_id))

    def _by_checked(self, owner: str, checked: bool) -> List[Task]:
        items = self.table.query_by_index_prefix(
            self.table.index_name, TASKS_PARTITION, queryable_index(owner, checked)
        )
        return [Task.from_dynamodb_item(item) for item in items]

    def search_by_note(self, owner: str, checked: bool, substring: str) -> List[Task]:
        """Tasks with the given checked state whose note contains ``substring``."""
        return [task for task in self._by_checked(owner, checked) if substring in task.note]

    def count_by_checked(self, owner: str, checked: bool) -> int:
        return len(self._by_checked(owner, checked))

    def report(self, owner: str) -> TaskReport:
        return TaskReport(
            total_checked=self.count_by_checked(owner, True),
            total_unchecked=self.count_by_checked(owner, False),
        )

    def bulk_import(self, owner: str, text) -> int:
        """
        Create one task per non-blank CRLF separated line of ``text``.

        Raises:
            InvalidDataError: ``text`` is not a plain text string
        """
        if not isinstance(text, str):
            raise InvalidDataError("Import payload must be plain text")

        created = 0
        for line in text.split(LINE_SEPARATOR):
            if not line.strip():
                continue
            self.create(owner, line)
            created += 1

        logger.info("Imported tasks", extra={"owner": owner, "count": created})
        return created

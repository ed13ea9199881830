"""
Key and index builders for the single-table layout.

Users and tasks share one table. The partition key separates the two
entity kinds, the sort key addresses an item inside its partition, and
the ``queryable`` attribute feeds the secondary index used for
owner + checked-state lookups.
"""

from string import Template
from typing import Optional

TASKS_PARTITION = "tasks"
USERS_PARTITION = "users"

DELIMITER = "::"

TASK_SK_TEMPLATE = Template("task_info::${owner}::${task_id}")
USER_SK_TEMPLATE = Template("user_info::${owner}")


def _check_owner(owner: str) -> str:
    # The delimiter inside an owner would let one owner's prefix match another's
    if not owner or DELIMITER in owner:
        raise ValueError(f"Invalid owner segment: {owner!r}")
    return owner


def task_key(owner: str, task_id: Optional[str] = None) -> str:
    """
    Build a task sort key.

    Without ``task_id`` the result is the prefix shared by every task of
    ``owner``, e.g. ``task_info::a@x.com::``.
    """
    return TASK_SK_TEMPLATE.substitute(owner=_check_owner(owner), task_id=task_id or "")


def user_key(owner: str) -> str:
    """Build the sort key of a user record."""
    return USER_SK_TEMPLATE.substitute(owner=_check_owner(owner))


def queryable_index(owner: str, checked: bool) -> str:
    """Build the secondary index value ``owner::true`` / ``owner::false``."""
    return f"{_check_owner(owner)}{DELIMITER}{str(bool(checked)).lower()}"

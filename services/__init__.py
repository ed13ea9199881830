"""
Services package for business logic and external integrations.

This package contains the DynamoDB storage gateway, the user and task
services built on it, token signing, email delivery, configuration and
the GraphQL schema.
"""

from .dynamodb import TaskTrackerTable
from .tasks import TaskRepository
from .tokens import TokenService
from .users import UserManager

__all__ = [
    "TaskTrackerTable",
    "TaskRepository",
    "TokenService",
    "UserManager",
]

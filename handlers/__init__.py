"""
Handlers package for Lambda function handlers.

This package contains the API endpoint handlers for authentication,
user profiles, task management and the GraphQL endpoint.
"""

from . import auth, graphql_api, tasks, users

__all__ = ["auth", "users", "tasks", "graphql_api"]

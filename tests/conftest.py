"""
Pytest configuration and shared fixtures.

All AWS access is mocked with moto. Fixtures build real service objects
(gateway, user manager, task repository) on top of a mocked DynamoDB
table, and swap the email transport for an in-memory fake.
"""

import os

import boto3
import pytest
from moto import mock_aws

import authorizer
from handlers import auth, graphql_api, tasks, users
from services.dynamodb import TaskTrackerTable
from services.tasks import TaskRepository
from services.tokens import TokenService
from services.users import UserManager
from utils.security import PasswordHasher

from .fakes import INDEX_NAME, JWT_SECRET, TABLE_NAME, FakeMailer

# Set before any boto3 client is created
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")


def create_task_tracker_table(client, table_name: str = TABLE_NAME) -> None:
    """Create the single table with its owner/checked secondary index."""
    client.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "pk", "KeyType": "HASH"},
            {"AttributeName": "sk", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
            {"AttributeName": "queryable", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": INDEX_NAME,
                "KeySchema": [
                    {"AttributeName": "pk", "KeyType": "HASH"},
                    {"AttributeName": "queryable", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
        BillingMode="PAY_PER_REQUEST",
    )


@pytest.fixture
def dynamodb_resource():
    """Mocked DynamoDB resource with the task tracker table created."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name="us-east-1")
        create_task_tracker_table(client)
        yield boto3.resource("dynamodb", region_name="us-east-1")


@pytest.fixture
def table(dynamodb_resource) -> TaskTrackerTable:
    return TaskTrackerTable(TABLE_NAME, INDEX_NAME, resource=dynamodb_resource)


@pytest.fixture
def paged_table(dynamodb_resource) -> TaskTrackerTable:
    """Gateway reading one item per page, to exercise continuation handling."""
    return TaskTrackerTable(
        TABLE_NAME, INDEX_NAME, resource=dynamodb_resource, page_size=1
    )


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(JWT_SECRET)


@pytest.fixture
def hasher() -> PasswordHasher:
    # Low iteration count keeps the suite fast
    return PasswordHasher(iterations=1_000)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def user_manager(table, token_service, hasher, mailer) -> UserManager:
    return UserManager(
        table=table,
        tokens=token_service,
        hasher=hasher,
        mailer=mailer,
        verify_url="https://app.test/auth/verify",
    )


@pytest.fixture
def task_repository(table) -> TaskRepository:
    return TaskRepository(table)


@pytest.fixture
def verified_user(user_manager, mailer):
    """Register and verify a@x.com with password pw1."""
    user_manager.register("a@x.com", "A", "pw1")
    return user_manager.verify_token(mailer.last_token_for("a@x.com"))


@pytest.fixture
def wired_handlers(monkeypatch, user_manager, task_repository, token_service):
    """Point every handler module at the mocked services."""
    for module in (auth, users):
        monkeypatch.setattr(module, "get_user_manager", lambda: user_manager)
    for module in (tasks, graphql_api):
        monkeypatch.setattr(module, "get_task_repository", lambda: task_repository)
    monkeypatch.setattr(authorizer, "get_user_manager", lambda: user_manager)
    monkeypatch.setattr(authorizer, "get_token_service", lambda: token_service)

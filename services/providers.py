"""
Shared service instances for Lambda handlers.

Instances are built on first use and then reused across warm
invocations. Tests replace these factories instead of touching AWS.
"""

from datetime import timedelta
from functools import lru_cache

from services.dynamodb import TaskTrackerTable
from services.mailer import SesEmailSender
from services.parameter_store import AppSettings, load_settings
from services.tasks import TaskRepository
from services.tokens import TokenService
from services.users import UserManager
from utils.security import PasswordHasher


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()


@lru_cache(maxsize=1)
def get_table() -> TaskTrackerTable:
    settings = get_settings()
    return TaskTrackerTable(settings.table_name, settings.index_name)


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(settings.jwt_secret, settings.jwt_algorithm)


@lru_cache(maxsize=1)
def get_user_manager() -> UserManager:
    settings = get_settings()
    return UserManager(
        table=get_table(),
        tokens=get_token_service(),
        hasher=PasswordHasher(settings.password_hash_iterations),
        mailer=SesEmailSender(settings.sender_email),
        verify_url=settings.verify_url,
        access_token_ttl=timedelta(days=settings.access_token_ttl_days),
        verify_token_ttl=timedelta(hours=settings.verify_token_ttl_hours),
    )


@lru_cache(maxsize=1)
def get_task_repository() -> TaskRepository:
    return TaskRepository(get_table())


def reset():
    """Drop every cached instance (configuration changes, tests)."""
    for factory in (
        get_settings,
        get_table,
        get_token_service,
        get_user_manager,
        get_task_repository,
    ):
        factory.cache_clear()

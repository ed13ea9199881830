"""
AWS Systems Manager Parameter Store configuration.

Parameters are read from Parameter Store under ``/task-tracker/`` with
environment variables taking precedence for local development
(``/task-tracker/jwt-secret`` -> ``TASK_TRACKER_JWT_SECRET``). A local
``.env`` file is loaded with python-dotenv.
"""

import os
from functools import lru_cache
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from utils.logging import setup_logger

logger = setup_logger(__name__)

# Load .env file for local development
load_dotenv()

DEFAULT_PREFIX = "/task-tracker"

# Parameter names under the prefix; SecureString when the name says so
PARAMETER_KEYS = (
    "table-name",
    "index-name",
    "jwt-secret",
    "jwt-algorithm",
    "access-token-ttl-days",
    "verify-token-ttl-hours",
    "sender-email",
    "verify-url",
    "password-hash-iterations",
)

_ssm_client = None


def get_ssm_client():
    """Get or create SSM client with caching."""
    global _ssm_client
    if _ssm_client is None:
        _ssm_client = boto3.client("ssm")
    return _ssm_client


def env_var_name(parameter_name: str) -> str:
    """Environment variable that overrides a parameter name."""
    return parameter_name.strip("/").replace("/", "_").replace("-", "_").upper()


@lru_cache(maxsize=128)
def get_parameter(parameter_name: str, decrypt: bool = True) -> Optional[str]:
    """
    Get a parameter, preferring an environment variable over Parameter Store.

    Args:
        parameter_name: The name of the parameter to retrieve
        decrypt: Whether to decrypt SecureString parameters

    Returns:
        Parameter value or None if not found anywhere
    """
    local_value = os.getenv(env_var_name(parameter_name))

    if local_value:
        logger.debug(f"Using local environment variable for {parameter_name}")
        return local_value

    try:
        ssm = get_ssm_client()
        response = ssm.get_parameter(Name=parameter_name, WithDecryption=decrypt)
        value = response["Parameter"]["Value"]

        logger.debug(f"Retrieved parameter {parameter_name} from Parameter Store")
        return value

    except ClientError as e:
        error_code = e.response["Error"]["Code"]

        if error_code == "ParameterNotFound":
            logger.info(f"Parameter {parameter_name} not found in Parameter Store")
        else:
            logger.error(f"Error retrieving parameter {parameter_name}: {e}")

        return None
    except BotoCoreError as e:
        logger.error(f"Could not reach Parameter Store for {parameter_name}: {e}")
        return None


class ParameterStoreConfig:
    """
    Reads configuration values under a common parameter prefix, with
    per-instance caching and defaults.
    """

    def __init__(self, parameter_prefix: str = DEFAULT_PREFIX):
        self.parameter_prefix = parameter_prefix.rstrip("/")
        self._config_cache: Dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (will be prefixed with parameter_prefix)
            default: Default value if not found

        Returns:
            Configuration value or default
        """
        if key in self._config_cache:
            return self._config_cache[key]

        value = get_parameter(f"{self.parameter_prefix}/{key}")

        if value is None:
            value = default

        self._config_cache[key] = value
        return value

    def get_required(self, key: str) -> str:
        """
        Get a required configuration value.

        Raises:
            ValueError: If parameter is not found
        """
        value = self.get(key)
        if value is None:
            raise ValueError(
                f"Required parameter {self.parameter_prefix}/{key} not found"
            )
        return value


class AppSettings(BaseModel):
    """Resolved application configuration, passed explicitly to services."""

    table_name: str = "TaskTrackerTable"
    index_name: str = "queryable-index"
    jwt_secret: str = Field(..., min_length=1, repr=False)
    jwt_algorithm: str = "HS256"
    access_token_ttl_days: int = Field(30, gt=0)
    verify_token_ttl_hours: int = Field(24, gt=0)
    sender_email: str = "no-reply@example.com"
    verify_url: str = "http://localhost:3000/auth/verify"
    password_hash_iterations: int = Field(100_000, gt=0)


def load_settings(config: Optional[ParameterStoreConfig] = None) -> AppSettings:
    """
    Build AppSettings from Parameter Store / environment.

    Raises:
        ValueError: If the JWT secret is not configured
    """
    config = config or ParameterStoreConfig()
    defaults = AppSettings.model_fields

    settings = AppSettings(
        table_name=config.get("table-name", defaults["table_name"].default),
        index_name=config.get("index-name", defaults["index_name"].default),
        jwt_secret=config.get_required("jwt-secret"),
        jwt_algorithm=config.get("jwt-algorithm", defaults["jwt_algorithm"].default),
        access_token_ttl_days=config.get(
            "access-token-ttl-days", defaults["access_token_ttl_days"].default
        ),
        verify_token_ttl_hours=config.get(
            "verify-token-ttl-hours", defaults["verify_token_ttl_hours"].default
        ),
        sender_email=config.get("sender-email", defaults["sender_email"].default),
        verify_url=config.get("verify-url", defaults["verify_url"].default),
        password_hash_iterations=config.get(
            "password-hash-iterations", defaults["password_hash_iterations"].default
        ),
    )

    logger.info(
        "Loaded configuration",
        extra={"table_name": settings.table_name, "index_name": settings.index_name},
    )
    return settings


def clear_cache():
    """Clear parameter cache. Useful for testing or config updates."""
    get_parameter.cache_clear()
    logger.info("Parameter Store cache cleared")

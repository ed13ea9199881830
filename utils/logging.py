"""
Logging setup for the task tracker Lambdas.

Each logger writes one JSON object per line to stdout so CloudWatch Logs
Insights can filter on individual fields. Anything passed through
``extra=`` becomes a top-level field of the entry.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Attributes every LogRecord has; everything else came from ``extra=``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

_SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


class StructuredFormatter(logging.Formatter):
    """Render a record and its extra fields as a JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS
        )
        return json.dumps(entry, default=str)


def setup_logger(
    name: str, level: Optional[str] = None, structured: bool = True
) -> logging.Logger:
    """
    Return the named logger, attaching a stdout handler on first use.

    Args:
        name: Logger name (typically __name__)
        level: Log level name; defaults to $LOG_LEVEL or INFO
        structured: JSON lines instead of the plain text format
    """
    logger = logging.getLogger(name)

    # Warm Lambda containers reuse loggers
    if logger.handlers:
        return logger

    logger.setLevel((level or DEFAULT_LEVEL).upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        StructuredFormatter()
        if structured
        else logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def redact_headers(headers: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Copy of the request headers with credential headers masked."""
    return {
        key: "***" if key.lower() in _SENSITIVE_HEADERS else value
        for key, value in (headers or {}).items()
    }


def log_lambda_event(logger: logging.Logger, event: Dict[str, Any], context: Any) -> None:
    """Log who called which route. The body is left out, it may hold passwords."""
    request_context = event.get("requestContext") or {}
    logger.info(
        "Lambda invocation started",
        extra={
            "request_id": getattr(context, "aws_request_id", "unknown"),
            "function_name": getattr(context, "function_name", "unknown"),
            "http_method": event.get("httpMethod"),
            "path": event.get("path") or event.get("rawPath"),
            "headers": redact_headers(event.get("headers")),
            "source_ip": (request_context.get("identity") or {}).get("sourceIp"),
        },
    )


def log_lambda_response(
    logger: logging.Logger,
    response: Dict[str, Any],
    execution_time_ms: Optional[float] = None,
) -> None:
    logger.info(
        "Lambda invocation completed",
        extra={
            "status_code": response.get("statusCode"),
            "execution_time_ms": execution_time_ms,
            "response_size": len(response.get("body") or ""),
        },
    )


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None
) -> None:
    """Log an exception with its traceback plus any context fields."""
    extra = {"error_type": type(error).__name__, "error_message": str(error)}
    extra.update(context or {})
    logger.error(f"Error occurred: {error}", extra=extra, exc_info=True)

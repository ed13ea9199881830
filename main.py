"""
Health check endpoint for the task tracker API.

Unauthenticated; used by monitoring and deployment smoke tests.
"""

from utils.decorators import lambda_handler
from utils.responses import success_response

SERVICE_NAME = "task-tracker-api"
SERVICE_VERSION = "1.0.0"


@lambda_handler(log_event=False)
def healthz(event, context):
    """Return a static success payload while the function can run at all."""
    return success_response(
        data={
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
        },
        message="Service is running",
    )

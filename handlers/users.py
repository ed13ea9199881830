"""
User handlers for the task tracker API.

Profile lookup for the authenticated user. Account creation lives in
handlers.auth.
"""

from services.providers import get_user_manager
from utils.decorators import lambda_handler, require_auth
from utils.responses import not_found_response, success_response


@lambda_handler()
@require_auth
def get_user(event, context):
    """
    Get the authenticated user's profile.

    GET /users/me

    Password digest and session id are never returned.
    """
    email = event["auth"]["email"]

    user = get_user_manager().get_user_by_email(email)
    if not user:
        return not_found_response("User", email)

    return success_response(data={"user": user.to_public_dict()})

"""
Authentication handlers for the task tracker API.

Registration, email verification, login and logout. Registration and
login are public routes; logout runs behind the token authorizer.
"""

import json

from models.users import LoginRequest, RegisterRequest
from services.providers import get_user_manager
from utils.decorators import lambda_handler, require_auth, validate_json_body
from utils.errors import RequestValidationError
from utils.responses import HTTPStatus, success_response


@lambda_handler()
@validate_json_body(required_fields=["email", "name", "password"])
def register(event, context):
    """
    Register a new user.

    POST /auth/register

    Stores an unverified user and emails a verification link. Fails with
    422 when a verified user already owns the email.
    """
    request = RegisterRequest(**event["json_body"])

    user = get_user_manager().register(
        request.email, request.name, request.password.get_secret_value()
    )

    return success_response(
        data={"email": user.email, "status": "pending_verification"},
        message="Check your email to verify your account",
        status_code=HTTPStatus.CREATED,
    )


@lambda_handler()
def verify_email(event, context):
    """
    Verify a user's email address.

    GET /auth/verify?token=... (link from the email) or
    POST /auth/verify with {"token": ...}
    """
    token = (event.get("queryStringParameters") or {}).get("token")

    if not token and event.get("body"):
        body = event["body"]
        if isinstance(body, dict):
            token = body.get("token")
        else:
            try:
                token = json.loads(body).get("token")
            except (ValueError, AttributeError):
                token = None

    if not token:
        raise RequestValidationError("Verification token is required")

    user = get_user_manager().verify_token(token)

    return success_response(
        data={"user": user.to_public_dict()},
        message="Email verified successfully",
    )


@lambda_handler()
@validate_json_body(required_fields=["email", "password"])
def login(event, context):
    """
    Log in with email and password.

    POST /auth/login

    Returns an access token. Any token issued by an earlier login stops
    being accepted.
    """
    request = LoginRequest(**event["json_body"])

    token = get_user_manager().login(request.email, request.password.get_secret_value())

    return success_response(data={"accessToken": token, "tokenType": "Bearer"})


@lambda_handler()
@require_auth
def logout(event, context):
    """
    Close the caller's session.

    POST /auth/logout
    """
    get_user_manager().logout(event["auth"]["email"])

    return success_response(message="Logged out")

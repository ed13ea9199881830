"""
Token authorizer Lambda for API Gateway.

Validates the bearer token's signature and expiry, re-reads the user it
names, and allows the request only when the token carries the user's
current session id. The result is an IAM policy for the requested method.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from services.providers import get_token_service, get_user_manager
from services.tokens import TokenService, extract_token_from_header
from services.users import UserManager
from utils.errors import InvalidTokenError
from utils.logging import log_error, setup_logger

logger = setup_logger(__name__)

ALLOW = "Allow"
DENY = "Deny"
ANONYMOUS_PRINCIPAL = "anonymous"


@dataclass(frozen=True)
class AuthDecision:
    effect: str
    resource: Optional[str]
    principal_id: str = ANONYMOUS_PRINCIPAL
    context: Dict[str, str] = field(default_factory=dict)

    @property
    def allowed(self) -> bool:
        return self.effect == ALLOW

    def to_policy(self) -> Dict[str, Any]:
        """Render the decision as an API Gateway authorizer response."""
        response = {
            "principalId": self.principal_id,
            "policyDocument": {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Action": "execute-api:Invoke",
                        "Effect": self.effect,
                        "Resource": self.resource or "*",
                    }
                ],
            },
        }
        if self.allowed and self.context:
            response["context"] = dict(self.context)
        return response


def deny(resource: Optional[str]) -> AuthDecision:
    return AuthDecision(effect=DENY, resource=resource)


def authorize(
    token: Optional[str],
    resource: Optional[str],
    user_manager: UserManager,
    token_service: TokenService,
) -> AuthDecision:
    """
    Decide whether ``token`` may invoke ``resource``.

    Denies when the token or resource is missing, the token is invalid or
    expired, it carries no email, the user is gone, or the token belongs to
    a session that has since been replaced or closed.
    """
    if not token or not resource:
        logger.info("Authorization denied: missing token or resource")
        return deny(resource)

    try:
        claims = token_service.verify(token)
    except InvalidTokenError:
        logger.info("Authorization denied: token failed verification")
        return deny(resource)

    email = claims.get("email")
    if not email:
        logger.info("Authorization denied: token has no email claim")
        return deny(resource)

    user = user_manager.get_user_by_email(email)
    if not user:
        logger.warning("Authorization denied: user not found", extra={"email": email})
        return deny(resource)

    if not user_manager.check_unique_valid_token(user, claims):
        logger.info("Authorization denied: session is no longer active", extra={"email": email})
        return deny(resource)

    logger.info("User authorized", extra={"email": email})
    return AuthDecision(
        effect=ALLOW,
        resource=resource,
        principal_id=user.email,
        context={"email": user.email},
    )


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    API Gateway TOKEN authorizer entry point.

    Args:
        event: Authorizer event with ``authorizationToken`` and ``methodArn``
        context: Lambda context object

    Returns:
        IAM policy allowing or denying the call
    """
    resource = event.get("methodArn")
    token = extract_token_from_header(event.get("authorizationToken"))

    logger.info(
        "Authorization request received",
        extra={
            "request_id": getattr(context, "aws_request_id", "unknown"),
            "resource": resource,
        },
    )

    try:
        decision = authorize(token, resource, get_user_manager(), get_token_service())
    except Exception as e:
        log_error(logger, e, {"resource": resource})
        decision = deny(resource)

    return decision.to_policy()

"""
Signed token service for email verification and access tokens.

Tokens are HS256 JWTs signed with the process-wide secret from
configuration.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from utils.errors import InvalidTokenError

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.algorithm = algorithm

    def sign(self, claims: Dict[str, Any], expires_in: timedelta) -> str:
        """
        Sign ``claims`` into a token that expires after ``expires_in``.

        Args:
            claims: Custom claims to embed (e.g. email, sid)
            expires_in: Lifetime of the token

        Returns:
            The encoded token string
        """
        now = datetime.now(timezone.utc)
        payload = {**claims, "iat": now, "exp": now + expires_in}
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Check signature and expiry and return the token's claims.

        Raises:
            InvalidTokenError: on any signature, format or expiry problem
        """
        if not token:
            raise InvalidTokenError("Token is missing")

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token has expired")
            raise InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.info(f"Invalid token: {str(e)}")
            raise InvalidTokenError() from e


def extract_token_from_header(authorization_header: Optional[str]) -> Optional[str]:
    """
    Extract the token from an ``Authorization`` header.

    Both ``Bearer <token>`` and a bare ``<token>`` are accepted.

    Returns:
        The token if the header has one of those formats, None otherwise
    """
    if not authorization_header:
        return None

    parts = authorization_header.split()
    if len(parts) == 1:
        return parts[0]
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]

    return None

"""
User identity and session management.

Owns registration, email verification, login/logout and the
single-active-session rule: every login stores a fresh session id on the
user record and embeds it in the access token, so a later login makes all
earlier tokens fail the authorizer's session check.
"""

import secrets
from datetime import timedelta
from typing import Any, Dict, Optional, Protocol
from urllib.parse import urlencode

from models.keys import USERS_PARTITION, user_key
from models.users import User, create_user
from services.dynamodb import TaskTrackerTable
from services.tokens import TokenService
from utils.errors import (ConflictError, InvalidCredentialsError,
                          InvalidTokenError, NotFoundError, NotVerifiedError)
from utils.logging import setup_logger
from utils.security import PasswordHasher

logger = setup_logger(__name__)

VERIFY_EMAIL_SUBJECT = "Verify your task tracker account"


class EmailSender(Protocol):
    def send(self, to_address: str, subject: str, body_text: str) -> Any: ...


class UserManager:
    """User lifecycle and session bookkeeping on top of the storage gateway."""

    def __init__(
        self,
        table: TaskTrackerTable,
        tokens: TokenService,
        hasher: PasswordHasher,
        mailer: EmailSender,
        verify_url: str,
        access_token_ttl: timedelta = timedelta(days=30),
        verify_token_ttl: timedelta = timedelta(days=1),
    ):
        self.table = table
        self.tokens = tokens
        self.hasher = hasher
        self.mailer = mailer
        self.verify_url = verify_url
        self.access_token_ttl = access_token_ttl
        self.verify_token_ttl = verify_token_ttl

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Look up a user; None when the email is unknown or not a valid key."""
        try:
            sort_key = user_key(email)
        except ValueError:
            return None

        item = self.table.get(USERS_PARTITION, sort_key)
        if not item:
            return None
        return User.from_dynamodb_item(item)

    def save(self, user: User) -> User:
        """Persist the whole user record."""
        item = user.to_dynamodb_item()
        self.table.put(item.pk, item.sk, item.model_dump())
        return user

    def verification_link(self, token: str) -> str:
        separator = "&" if "?" in self.verify_url else "?"
        return f"{self.verify_url}{separator}{urlencode({'token': token})}"

    def register(self, email: str, name: str, password: str) -> User:
        """
        Create an unverified user and email them a verification link.

        An existing unverified registration is replaced.

        Raises:
            ConflictError: If a verified user already owns the email
            EmailTransportError: If the verification email cannot be sent
        """
        existing = self.get_user_by_email(email)
        if existing and existing.is_verified:
            raise ConflictError(f"User '{email}' already exists")

        user = self.save(create_user(email, name, password, self.hasher))

        token = self.tokens.sign({"email": user.email}, self.verify_token_ttl)
        self.mailer.send(
            user.email,
            VERIFY_EMAIL_SUBJECT,
            f"Hi {user.name},\n\n"
            f"Confirm your email address by opening this link:\n"
            f"{self.verification_link(token)}\n\n"
            f"The link expires in {int(self.verify_token_ttl.total_seconds() // 3600)} hours.\n",
        )

        logger.info("User registered, verification email sent", extra={"email": email})
        return user

    def verify_token(self, token: str) -> User:
        """
        Mark the user named by a verification token as verified.

        Raises:
            InvalidTokenError: Bad signature, expired, or no email claim
            NotFoundError: The token's user no longer exists
        """
        claims = self.tokens.verify(token)
        email = claims.get("email")
        if not email:
            raise InvalidTokenError("Token carries no email claim")

        user = self.get_user_by_email(email)
        if not user:
            raise NotFoundError(f"User '{email}' not found")

        if user.is_verified:
            return user

        user = self.save(user.mark_verified())
        logger.info("Email verified", extra={"email": email})
        return user

    def login(self, email: str, password: str) -> str:
        """
        Check credentials and open a new session.

        Returns:
            A signed access token; every token issued before it stops working

        Raises:
            InvalidCredentialsError: Unknown email, or wrong password for a verified user
            NotVerifiedError: The email is not verified, whatever the password
        """
        user = self.get_user_by_email(email)
        if not user:
            raise InvalidCredentialsError()

        # Unverified accounts are refused whatever password was given
        if not user.is_verified:
            raise NotVerifiedError()

        if not user.check_password(password, self.hasher):
            raise InvalidCredentialsError()

        session_id = secrets.token_urlsafe(16)
        token = self.tokens.sign(
            {"email": user.email, "sid": session_id}, self.access_token_ttl
        )
        self.save(user.with_session(session_id))

        logger.info("User logged in", extra={"email": email})
        return token

    def logout(self, email: str) -> None:
        """
        Close the user's session so no issued token is accepted any more.

        Raises:
            NotFoundError: The user does not exist
        """
        user = self.get_user_by_email(email)
        if not user:
            raise NotFoundError(f"User '{email}' not found")

        self.save(user.with_session(None))
        logger.info("User logged out", extra={"email": email})

    @staticmethod
    def check_unique_valid_token(user: User, claims: Dict[str, Any]) -> bool:
        """True when the token's session id is the user's one active session."""
        return user.has_session(claims.get("sid"))

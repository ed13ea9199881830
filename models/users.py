"""User model objects for the task tracker."""

import hmac
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr

from models.dynamodb import UserItem
from models.keys import USERS_PARTITION, user_key
from utils.security import PasswordHasher

class User(BaseModel):
    """
    Immutable user record.

    Every mutation returns a new value; the caller persists it as a whole
    record overwrite.
    """

    model_config = ConfigDict(frozen=True)

    email: str
    name: str
    password_hash: str = Field(..., repr=False)
    is_verified: bool = False
    session_id: Optional[str] = Field(default=None, repr=False)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def check_password(self, password: str, hasher: PasswordHasher) -> bool:
        return hasher.verify(password, self.password_hash)

    def mark_verified(self) -> "User":
        return self.model_copy(
            update={"is_verified": True, "updated_at": datetime.now(timezone.utc)}
        )

    def with_session(self, session_id: Optional[str]) -> "User":
        """Return a copy whose active session is ``session_id`` (None logs out)."""
        return self.model_copy(
            update={"session_id": session_id, "updated_at": datetime.now(timezone.utc)}
        )

    def has_session(self, session_id: Optional[str]) -> bool:
        """True when ``session_id`` is exactly the active session."""
        if not self.session_id or not session_id:
            return False
        return hmac.compare_digest(self.session_id, session_id)

    def to_dynamodb_item(self) -> UserItem:
        """Convert to DynamoDB item format."""
        now = datetime.now(timezone.utc).isoformat()
        created = self.created_at.isoformat() if self.created_at else now
        updated = self.updated_at.isoformat() if self.updated_at else now

        return UserItem(
            pk=USERS_PARTITION,
            sk=user_key(self.email),
            email=self.email,
            name=self.name,
            password_hash=self.password_hash,
            is_verified=self.is_verified,
            session_id=self.session_id,
            created_at=created,
            updated_at=updated,
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> "User":
        """Create a User from a DynamoDB item."""
        return cls(
            email=item["email"],
            name=item.get("name", ""),
            password_hash=item["password_hash"],
            is_verified=bool(item.get("is_verified", False)),
            session_id=item.get("session_id") or None,
            created_at=(
                datetime.fromisoformat(item["created_at"])
                if item.get("created_at")
                else None
            ),
            updated_at=(
                datetime.fromisoformat(item["updated_at"])
                if item.get("updated_at")
                else None
            ),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """User data safe to return to clients."""
        return {
            "email": self.email,
            "name": self.name,
            "isVerified": self.is_verified,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


def create_user(
    email: str, name: str, password: str, hasher: PasswordHasher
) -> User:
    """Build a new unverified user, hashing the plain text password."""
    now = datetime.now(timezone.utc)
    return User(
        email=email,
        name=name,
        password_hash=hasher.hash(password),
        is_verified=False,
        created_at=now,
        updated_at=now,
    )

class RegisterRequest(BaseModel):
    """Body of POST /auth/register."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: SecretStr = Field(..., min_length=1, max_length=256)

class LoginRequest(BaseModel):
    """Body of POST /auth/login."""

    email: EmailStr
    password: SecretStr = Field(..., min_length=1)

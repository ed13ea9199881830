"""
Password hashing for user credentials.

Digests are self-describing strings of the form
``pbkdf2_sha256$<iterations>$<salt b64>$<hash b64>`` so the iteration
count can be raised later without invalidating stored passwords.
"""

import base64
import hashlib
import secrets

ALGORITHM = "pbkdf2_sha256"


class PasswordHasher:
    """
    One-way password hashing using PBKDF2 with SHA-256.

    Each password gets a fresh random salt; verification uses a
    constant-time comparison.
    """

    DEFAULT_ITERATIONS = 100_000
    SALT_LENGTH = 16

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    @staticmethod
    def _derive(password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)

    def hash(self, password: str) -> str:
        """
        Hash a password with a random salt.

        Args:
            password: Plain text password to hash

        Returns:
            Encoded digest containing algorithm, iterations, salt and hash
        """
        salt = secrets.token_bytes(self.SALT_LENGTH)
        digest = self._derive(password, salt, self.iterations)
        return "$".join(
            [
                ALGORITHM,
                str(self.iterations),
                base64.b64encode(salt).decode("ascii"),
                base64.b64encode(digest).decode("ascii"),
            ]
        )

    def verify(self, password: str, encoded: str) -> bool:
        """
        Verify a password against a stored digest.

        Malformed digests verify as False rather than raising.
        """
        try:
            algorithm, iterations, salt_b64, hash_b64 = encoded.split("$")
            if algorithm != ALGORITHM:
                return False
            salt = base64.b64decode(salt_b64)
            expected = base64.b64decode(hash_b64)
            candidate = self._derive(password, salt, int(iterations))
        except (AttributeError, ValueError):
            return False

        return secrets.compare_digest(candidate, expected)

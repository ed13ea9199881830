"""Unit tests for password hashing and signed tokens."""

from datetime import timedelta

import jwt
import pytest

from services.tokens import TokenService, extract_token_from_header
from utils import security
from utils.errors import InvalidTokenError
from utils.security import PasswordHasher

from ..fakes import JWT_SECRET


class TestPasswordHasher:
    def test_hash_is_not_plaintext_and_salted(self):
        hasher = PasswordHasher(iterations=1_000)

        first = hasher.hash("pw1")
        second = hasher.hash("pw1")

        assert "pw1" not in first
        assert first != second

    def test_verify_round_trip(self):
        hasher = PasswordHasher(iterations=1_000)
        digest = hasher.hash("pw1")

        assert hasher.verify("pw1", digest)
        assert not hasher.verify("wrongpw", digest)

    def test_iterations_are_read_from_digest(self):
        digest = PasswordHasher(iterations=1_000).hash("pw1")

        assert PasswordHasher(iterations=5_000).verify("pw1", digest)

    @pytest.mark.parametrize("digest", ["", "garbage", "md5$1$a$b", "pbkdf2_sha256$x$y$z"])
    def test_malformed_digest_does_not_verify(self, digest):
        assert not PasswordHasher(iterations=1_000).verify("pw1", digest)

    def test_hashing_goes_through_a_configured_hasher(self):
        assert not hasattr(security, "hash_password")
        assert not hasattr(security, "verify_password")


class TestTokenService:
    def test_sign_and_verify(self):
        service = TokenService(JWT_SECRET)

        token = service.sign({"email": "a@x.com"}, timedelta(days=1))
        claims = service.verify(token)

        assert claims["email"] == "a@x.com"
        assert "exp" in claims

    def test_expired_token_rejected(self):
        service = TokenService(JWT_SECRET)
        token = service.sign({"email": "a@x.com"}, timedelta(seconds=-10))

        with pytest.raises(InvalidTokenError):
            service.verify(token)

    def test_wrong_secret_rejected(self):
        token = TokenService("another-secret-that-is-long-enough-too").sign(
            {"email": "a@x.com"}, timedelta(days=1)
        )

        with pytest.raises(InvalidTokenError):
            TokenService(JWT_SECRET).verify(token)

    def test_token_without_expiry_rejected(self):
        token = jwt.encode({"email": "a@x.com"}, JWT_SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            TokenService(JWT_SECRET).verify(token)

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
    def test_garbage_rejected(self, token):
        with pytest.raises(InvalidTokenError):
            TokenService(JWT_SECRET).verify(token)

    def test_empty_secret_not_allowed(self):
        with pytest.raises(ValueError):
            TokenService("")


class TestExtractToken:
    def test_bearer_header(self):
        assert extract_token_from_header("Bearer abc.def") == "abc.def"
        assert extract_token_from_header("bearer abc.def") == "abc.def"

    def test_bare_token_without_scheme(self):
        assert extract_token_from_header("abc.def") == "abc.def"

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer a b"])
    def test_invalid_headers(self, header):
        assert extract_token_from_header(header) is None

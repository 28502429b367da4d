"""
Test suite for bearer token verification.

System role: Verification of connection authentication
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from pydantic import SecretStr

from researchly.api.realtime.auth import CredentialVerifier
from researchly.configs.auth import AuthSettings
from researchly.core.exceptions import AuthError, ErrorKind

SECRET = "verifier-secret"


@pytest.fixture
def verifier() -> CredentialVerifier:
    return CredentialVerifier(AuthSettings(jwt_secret=SecretStr(SECRET)))


def encode(claims: dict, secret: str = SECRET) -> str:
    claims = {"exp": datetime.now(timezone.utc) + timedelta(minutes=5), **claims}
    return jwt.encode(claims, secret, algorithm="HS256")


class TestCredentialVerifier:
    def test_valid_token_should_yield_identity(self, verifier) -> None:
        token = encode({"userId": "u-1", "firebaseUid": "fb-1", "email": "a@example.test"})

        user = verifier.verify(token)

        assert user.user_id == "u-1"
        assert user.firebase_uid == "fb-1"
        assert user.email == "a@example.test"

    @pytest.mark.parametrize(
        "token, message",
        [
            (None, "Authentication required"),
            ("", "Authentication required"),
            ("not-a-jwt", "Invalid token"),
        ],
    )
    def test_unusable_tokens_should_raise(self, verifier, token, message) -> None:
        with pytest.raises(AuthError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.message == message
        assert exc_info.value.kind == ErrorKind.AUTH_ERROR

    def test_expired_token_should_raise_expired(self, verifier) -> None:
        token = encode({"userId": "u-1", "exp": datetime.now(timezone.utc) - timedelta(seconds=30)})

        with pytest.raises(AuthError, match="Token expired"):
            verifier.verify(token)

    def test_foreign_signature_should_be_invalid(self, verifier) -> None:
        with pytest.raises(AuthError, match="Invalid token"):
            verifier.verify(encode({"userId": "u-1"}, secret="someone-else"))

    def test_missing_user_claim_should_be_invalid(self, verifier) -> None:
        with pytest.raises(AuthError, match="Invalid token"):
            verifier.verify(encode({"email": "a@example.test"}))

"""
Realtime credential verification.

Bearer tokens are HS256 JWTs issued by the auth subsystem. They are verified
during the WebSocket handshake, before the connection is accepted.

Dependencies: python-jose, starlette
System role: Connection authentication
"""

import logging

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ConfigDict
from starlette.websockets import WebSocket

from researchly.configs.auth import AuthSettings
from researchly.core.exceptions import AuthError

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    """Identity bound to a connection for its lifetime."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    firebase_uid: str | None = None
    email: str | None = None


def extract_token(websocket: WebSocket) -> str | None:
    """
    Read the bearer token from the handshake.

    Accepts:
    1) Authorization: Bearer <token>
    2) ?token=<token> (fallback for browser clients)
    """
    header = websocket.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return websocket.query_params.get("token") or None


class CredentialVerifier:
    """Verify bearer tokens and produce the connection identity."""

    def __init__(self, settings: AuthSettings) -> None:
        self._secret = settings.jwt_secret.get_secret_value()
        self._algorithm = settings.jwt_algorithm

    def verify(self, token: str | None) -> AuthenticatedUser:
        """
        Decode and validate a token.

        Args:
            token: Raw bearer token (None when the client sent none)

        Returns:
            AuthenticatedUser: Identity from the userId, firebaseUid and email claims

        Raises:
            AuthError: "Authentication required", "Token expired" or "Invalid token"
        """
        if not token:
            raise AuthError("Authentication required")
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise AuthError("Token expired") from e
        except JWTError as e:
            raise AuthError("Invalid token") from e

        user_id = claims.get("userId")
        if not user_id:
            raise AuthError("Invalid token", details={"reason": "missing userId claim"})
        return AuthenticatedUser(
            user_id=str(user_id),
            firebase_uid=claims.get("firebaseUid"),
            email=claims.get("email"),
        )

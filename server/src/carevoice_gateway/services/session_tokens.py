"""Locally signed HS256 session tokens."""

import logging
import time
from typing import Any

import jwt

from carevoice_gateway.exceptions import AuthenticationError
from carevoice_gateway.models.auth import SessionClaims

logger = logging.getLogger(__name__)

ALGO = "HS256"


class SessionTokenService:
    """Issues and verifies the API's own bearer tokens.

    These are unrelated to CareVoiceOS tokens: they only prove that the
    caller registered or authenticated through this gateway.
    """

    def __init__(self, secret: str, expires_in: int) -> None:
        """Initialize the token service.

        Args:
            secret: HS256 signing secret
            expires_in: Token lifetime in seconds
        """
        self._secret = secret
        self.expires_in = expires_in

    def issue(self, claims: SessionClaims, ttl: int | None = None) -> str:
        """Sign a token carrying the given claims.

        Args:
            claims: Subject claims to embed
            ttl: Lifetime override in seconds

        Returns:
            The encoded JWT
        """
        now = int(time.time())
        payload: dict[str, Any] = claims.to_payload()
        payload["iat"] = now
        payload["exp"] = now + (ttl if ttl is not None else self.expires_in)
        return jwt.encode(payload, self._secret, algorithm=ALGO)

    def verify(self, token: str) -> SessionClaims:
        """Verify a token and return its claims.

        Raises:
            AuthenticationError: If the token is expired, tampered or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGO],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired session token")
            raise AuthenticationError("Invalid or expired token")
        except jwt.PyJWTError as e:
            logger.debug(f"Rejected session token: {e}")
            raise AuthenticationError("Invalid or expired token")
        return SessionClaims.model_validate(payload)

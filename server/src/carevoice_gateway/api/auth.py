"""Bearer session-token authentication for protected routes."""

import logging
from typing import Annotated

from fastapi import Depends, Header

from carevoice_gateway.api.dependencies import Tokens
from carevoice_gateway.exceptions import AuthenticationError
from carevoice_gateway.models.auth import SessionClaims

logger = logging.getLogger(__name__)


async def get_session_claims(
    tokens: Tokens,
    authorization: Annotated[str | None, Header()] = None,
) -> SessionClaims:
    """Validate the bearer token and return its claims.

    Args:
        tokens: The session token service
        authorization: The Authorization header ("Bearer <token>")

    Returns:
        The verified SessionClaims

    Raises:
        AuthenticationError: If the token is missing, expired or invalid
    """
    token = ""
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("Access token is required")
    return tokens.verify(token)


# Type alias for dependency injection
Session = Annotated[SessionClaims, Depends(get_session_claims)]

"""FastAPI dependencies resolving the services built in ``create_app``.

Services live on ``app.state`` rather than in module globals, so each app
instance (and each test) gets its own upstream client, store and limiter.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from carevoice_gateway.api.rate_limit import RateLimiter
from carevoice_gateway.exceptions import RateLimitExceededError
from carevoice_gateway.services.carevoice_client import CareVoiceClient
from carevoice_gateway.services.identity import IdentityService
from carevoice_gateway.services.session_tokens import SessionTokenService

logger = logging.getLogger(__name__)


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity


def get_token_service(request: Request) -> SessionTokenService:
    return request.app.state.identity.tokens


def get_carevoice_client(request: Request) -> CareVoiceClient:
    return request.app.state.carevoice_client


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


async def enforce_rate_limit(
    request: Request,
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> None:
    """Reject the request once its client has used up the window's budget.

    Raises:
        RateLimitExceededError: If the client is over the limit
    """
    client_id = request.client.host if request.client else "unknown"
    allowed, _remaining, retry_after = limiter.check_and_increment(client_id)
    if not allowed:
        logger.warning(f"Rate limit exceeded for {client_id} on {request.url.path}")
        raise RateLimitExceededError(retry_after)


Identity = Annotated[IdentityService, Depends(get_identity_service)]
Tokens = Annotated[SessionTokenService, Depends(get_token_service)]
Upstream = Annotated[CareVoiceClient, Depends(get_carevoice_client)]

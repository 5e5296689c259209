"""Three-step CareVoiceOS handshake.

server token -> account provisioning -> user token, strictly in sequence.
The first failing step ends the run and its error is returned verbatim; there
is no retry and no rollback of an already provisioned account.
"""

from __future__ import annotations

import logging
import time
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from carevoice_gateway.models.upstream import AuthResult, AuthStep, SdkSession, UpstreamResult

logger = logging.getLogger(__name__)


@runtime_checkable
class UpstreamClient(Protocol):
    """The calls the authenticator needs from a CareVoiceOS client."""

    async def fetch_server_token(self) -> UpstreamResult: ...

    async def provision_account(self, server_token: str, unique_id: str) -> UpstreamResult: ...

    async def fetch_user_token(self, server_token: str, account_id: str) -> UpstreamResult: ...


class CareVoiceAuthenticator:
    """Runs the handshake for one externally identified user."""

    def __init__(self, client: UpstreamClient) -> None:
        self.client = client

    async def authenticate(self, unique_id: str) -> AuthResult:
        """Obtain SDK tokens for ``unique_id``.

        Every call repeats all three steps, including provisioning, even if
        the account already exists upstream.

        Args:
            unique_id: The user's external unique identifier (UDID)

        Returns:
            AuthResult with an SdkSession on success, or the failing step
            and its upstream error
        """
        logger.info(f"CareVoiceOS handshake starting for uniqueId={unique_id}")
        start_time = time.monotonic()

        # Step 1
        token_result = await self.client.fetch_server_token()
        if not token_result.success:
            return self._failed(AuthStep.SERVER_TOKEN, token_result.error, unique_id)
        server_token = (token_result.data or {}).get("access_token")
        if not server_token:
            return self._failed(AuthStep.SERVER_TOKEN, "Malformed server token response", unique_id)
        server_token = str(server_token)

        # Step 2
        account_result = await self.client.provision_account(server_token, unique_id)
        if not account_result.success:
            return self._failed(AuthStep.PROVISION_ACCOUNT, account_result.error, unique_id)
        account_id = (account_result.data or {}).get("uid")
        if not account_id:
            return self._failed(AuthStep.PROVISION_ACCOUNT, "Malformed account response", unique_id)
        account_id = str(account_id)

        # Step 3
        user_token_result = await self.client.fetch_user_token(server_token, account_id)
        if not user_token_result.success:
            return self._failed(AuthStep.USER_TOKEN, user_token_result.error, unique_id)
        user_token_data = user_token_result.data or {}
        if not user_token_data.get("access_token"):
            return self._failed(AuthStep.USER_TOKEN, "Malformed user token response", unique_id)

        # Token values are passed through; only their shape is normalized
        refresh_token = user_token_data.get("refresh_token")
        try:
            session = SdkSession(
                account_id=account_id,
                server_token=server_token,
                user_token=str(user_token_data["access_token"]),
                refresh_token=str(refresh_token) if refresh_token is not None else None,
                expires_in=user_token_data.get("expires_in"),
            )
        except ValidationError as e:
            return self._failed(AuthStep.USER_TOKEN, f"Malformed user token response: {e}", unique_id)

        total_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            f"CareVoiceOS handshake complete for uniqueId={unique_id} "
            f"account={account_id} in {total_ms}ms"
        )
        return AuthResult.ok(session)

    @staticmethod
    def _failed(step: AuthStep, error: object, unique_id: str) -> AuthResult:
        logger.error(f"CareVoiceOS handshake failed at {step.value} for uniqueId={unique_id}: {error!r}")
        return AuthResult.fail(step, error)

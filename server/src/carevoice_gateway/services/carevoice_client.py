"""HTTP client for the CareVoiceOS open API.

Wraps the three server-to-server calls of the SDK handshake and normalizes
every outcome into an UpstreamResult. Nothing here raises to the caller:
transport failures, non-2xx statuses and unparseable bodies all come back as
``UpstreamResult(success=False, ...)``.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from carevoice_gateway.config import Settings
from carevoice_gateway.models.upstream import UpstreamResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _mask_headers(headers: httpx.Headers) -> dict[str, str]:
    return {
        "X-Api-Key": "***" if headers.get("X-Api-Key") else "not set",
        "Authorization": "Bearer ***" if headers.get("Authorization") else "not set",
        "Content-Type": headers.get("Content-Type", "not set"),
    }


def _response_body(response: httpx.Response) -> Any:
    """Best-effort decode of a response body (JSON, else text, else None)."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class CareVoiceClient:
    """Client for the CareVoiceOS token, account and account-token endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        client_id: str,
        client_secret: str,
        group: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: CareVoiceOS open API base URL
            api_key: Static key sent as X-Api-Key on every call
            client_id: Client-credentials id for the server token
            client_secret: Client-credentials secret for the server token
            group: Group new accounts are provisioned into
            timeout: Per-call timeout in seconds
            transport: Optional httpx transport override
        """
        self.base_url = base_url
        self._client_id = client_id
        self._client_secret = client_secret
        self.group = group
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "X-Api-Key": api_key,
                "Content-Type": "application/json",
            },
            event_hooks={
                "request": [self._log_request],
                "response": [self._log_response],
            },
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> CareVoiceClient:
        return cls(
            base_url=settings.carevoice_api_base_url,
            api_key=settings.carevoice_api_key,
            client_id=settings.carevoice_client_id,
            client_secret=settings.carevoice_client_secret,
            group=settings.carevoice_group,
            timeout=settings.carevoice_timeout,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def fetch_server_token(self) -> UpstreamResult:
        """Exchange the client credentials for a server token.

        Returns:
            UpstreamResult whose data holds ``access_token`` and ``expires_in``
        """
        logger.info("Fetching CareVoiceOS server token")
        return await self._send(
            "fetch_server_token",
            "POST",
            "/auth/token",
            json={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
        )

    async def provision_account(self, server_token: str, unique_id: str) -> UpstreamResult:
        """Create (or re-resolve) the account for a unique identifier.

        The provider is trusted to return the same account for a repeated
        unique identifier; this is not checked here.

        Args:
            server_token: Bearer token from fetch_server_token
            unique_id: The user's external unique identifier

        Returns:
            UpstreamResult whose data holds the account id as ``uid``
        """
        logger.info(f"Provisioning CareVoiceOS account for uniqueId={unique_id}")
        return await self._send(
            "provision_account",
            "POST",
            "/account",
            json={"group": self.group, "uniqueId": unique_id},
            bearer=server_token,
        )

    async def fetch_user_token(self, server_token: str, account_id: str) -> UpstreamResult:
        """Issue an SDK token pair for one account.

        Args:
            server_token: Bearer token from fetch_server_token
            account_id: Account id from provision_account

        Returns:
            UpstreamResult whose data holds ``access_token``,
            ``refresh_token`` and ``expires_in``
        """
        logger.info(f"Fetching CareVoiceOS user token for account {account_id}")
        return await self._send(
            "fetch_user_token",
            "GET",
            f"/account/{account_id}/token",
            bearer=server_token,
        )

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        bearer: str | None = None,
    ) -> UpstreamResult:
        headers = {"Authorization": f"Bearer {bearer}"} if bearer else None
        start_time = time.monotonic()

        try:
            response = await self._http.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException:
            latency_ms = int((time.monotonic() - start_time) * 1000)
            logger.warning(f"CareVoiceOS {operation} timed out after {latency_ms}ms")
            return UpstreamResult.fail(f"Timeout after {latency_ms}ms", latency_ms=latency_ms)
        except httpx.HTTPError as e:
            latency_ms = int((time.monotonic() - start_time) * 1000)
            logger.error(f"CareVoiceOS {operation} transport error after {latency_ms}ms: {e}")
            return UpstreamResult.fail(str(e) or e.__class__.__name__, latency_ms=latency_ms)

        latency_ms = int((time.monotonic() - start_time) * 1000)
        body = _response_body(response)

        if not response.is_success:
            logger.error(
                f"CareVoiceOS {operation} failed in {latency_ms}ms: "
                f"status={response.status_code} body={body!r}"
            )
            error = body if body is not None else f"Request failed with status code {response.status_code}"
            return UpstreamResult.fail(error, status_code=response.status_code, latency_ms=latency_ms)

        if not isinstance(body, dict):
            logger.error(f"CareVoiceOS {operation} returned a malformed body: {body!r}")
            return UpstreamResult.fail(
                body if body is not None else "Empty response body",
                status_code=response.status_code,
                latency_ms=latency_ms,
            )

        logger.info(f"CareVoiceOS {operation} succeeded in {latency_ms}ms")
        return UpstreamResult.ok(body, status_code=response.status_code, latency_ms=latency_ms)

    async def _log_request(self, request: httpx.Request) -> None:
        logger.debug(
            f"CareVoiceOS request: {request.method} {request.url} "
            f"headers={_mask_headers(request.headers)}"
        )

    async def _log_response(self, response: httpx.Response) -> None:
        await response.aread()
        request = response.request
        logger.debug(
            f"CareVoiceOS response: {request.method} {request.url} "
            f"status={response.status_code} body={response.text}"
        )

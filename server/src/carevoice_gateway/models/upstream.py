"""Result models for the CareVoiceOS handshake."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UpstreamResult(BaseModel):
    """Normalized outcome of a single CareVoiceOS call.

    Exactly one of ``data`` (on success) or ``error`` (on failure) is
    meaningful. ``error`` is the upstream response body when there was one,
    otherwise a description of the transport failure.
    """

    success: bool
    data: dict[str, Any] | None = None
    error: Any = None
    status_code: int | None = None
    latency_ms: int = 0

    @classmethod
    def ok(cls, data: dict[str, Any], status_code: int | None = None, latency_ms: int = 0) -> "UpstreamResult":
        return cls(success=True, data=data, status_code=status_code, latency_ms=latency_ms)

    @classmethod
    def fail(cls, error: Any, status_code: int | None = None, latency_ms: int = 0) -> "UpstreamResult":
        return cls(success=False, error=error, status_code=status_code, latency_ms=latency_ms)


class AuthStep(str, Enum):
    """Steps of the CareVoiceOS handshake, in order."""

    SERVER_TOKEN = "server_token"
    PROVISION_ACCOUNT = "provision_account"
    USER_TOKEN = "user_token"


class SdkSession(BaseModel):
    """Everything produced by a successful handshake."""

    account_id: str
    server_token: str
    user_token: str
    refresh_token: str | None = None
    expires_in: int | float | str | None = None

    def sdk_tokens(self) -> "SdkTokens":
        return SdkTokens(
            access_token=self.user_token,
            refresh_token=self.refresh_token,
            expires_in=self.expires_in,
        )


class SdkTokens(BaseModel):
    """The token triple handed to the client-side SDK."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str
    refresh_token: str | None = None
    expires_in: int | float | str | None = None


class AuthResult(BaseModel):
    """Composite outcome of the three-step handshake."""

    success: bool
    session: SdkSession | None = None
    error: Any = None
    failed_step: AuthStep | None = None

    @classmethod
    def ok(cls, session: SdkSession) -> "AuthResult":
        return cls(success=True, session=session)

    @classmethod
    def fail(cls, step: AuthStep, error: Any) -> "AuthResult":
        return cls(success=False, error=error, failed_step=step)

"""Request, response and token-claim models for the auth API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from carevoice_gateway.models.identity import UserPublic
from carevoice_gateway.models.upstream import SdkTokens


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(BaseModel):
    """Body of POST /api/auth/register."""

    email: EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    """Body of POST /api/auth/login."""

    email: EmailStr
    password: str = Field(min_length=6)


class CareVoiceAuthRequest(_CamelModel):
    """Body of POST /api/auth/carevoice."""

    unique_id: str = Field(min_length=1)


class SessionClaims(_CamelModel):
    """Claims carried by a locally signed session token.

    Registration and login tokens identify a local user (``userId`` and
    ``email``); tokens from the direct CareVoiceOS endpoint carry
    ``uniqueId`` instead.
    """

    user_id: str | None = None
    email: str | None = None
    account_id: str | None = None
    unique_id: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ApiResponse(BaseModel):
    """Uniform success envelope."""

    success: bool = True
    message: str | None = None
    data: Any = None


class RegisterData(BaseModel):
    user: UserPublic
    token: str


class LoginData(BaseModel):
    user: UserPublic
    token: str
    sdk: SdkTokens


class CareVoiceAuthData(_CamelModel):
    sdk: SdkTokens
    token: str
    account_id: str
